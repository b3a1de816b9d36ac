import io

import pytest

from xvtools.fmt import format_printf, fprintf


def test_plain_text_passes_through():
    assert format_printf("hello, world\n") == "hello, world\n"


@pytest.mark.parametrize("n", [0, 7, -42, 123456, -(2**31), 2**31 - 1])
def test_decimal_round_trip(n):
    assert int(format_printf("%d", n)) == n


def test_decimal_wraps_to_32_bits():
    assert format_printf("%d", 2**31) == str(-(2**31))


def test_unsigned_long():
    assert format_printf("%l", 2**40) == str(2**40)
    assert format_printf("%l", -1) == str(2**64 - 1)


@pytest.mark.parametrize("n", [0, 1, 255, 0xDEAD, 2**32 - 1])
def test_hex_round_trip(n):
    text = format_printf("%x", n)
    assert int(text, 16) == n
    assert text == text.upper()


def test_hex_of_negative_is_32_bit():
    assert int(format_printf("%x", -1), 16) == 2**32 - 1


@pytest.mark.parametrize("n", [0, 0x80000000, 2**64 - 1])
def test_pointer_round_trip(n):
    text = format_printf("%p", n)
    assert text.startswith("0x")
    assert len(text) == 2 + 16
    assert int(text, 16) == n


def test_null_string():
    assert format_printf("[%s]", None) == "[(null)]"


def test_string_and_char():
    assert format_printf("%s=%c", "key", ord("v")) == "key=v"


def test_percent_escape():
    assert format_printf("100%%") == "100%"


def test_unknown_conversion_is_shown():
    assert format_printf("a%qb") == "a%qb"


def test_trailing_percent_dropped():
    assert format_printf("ab%") == "ab"


def test_missing_argument():
    with pytest.raises(TypeError):
        format_printf("%d %d", 1)


def test_fprintf_writes_to_stream():
    out = io.StringIO()
    fprintf(out, "%s %d\n", "count", 3)
    fprintf(out, "done")
    assert out.getvalue() == "count 3\ndone"