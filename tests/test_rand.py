import pytest

from xvtools.rand import ParkMiller, do_rand


def test_minimal_standard_check_value():
    # Seed 0 starts the sequence at 1; the 10000th draw of the minimal
    # standard generator from 1 is 1043618065.
    gen = ParkMiller(0)
    value = None
    for _ in range(10000):
        value = gen.next()
    assert value + 1 == 1043618065


def test_default_seed_is_one():
    assert ParkMiller().next() == do_rand(1)


def test_state_follows_returned_value():
    gen = ParkMiller(42)
    first = gen.next()
    assert gen.state == first
    assert gen.next() == do_rand(first)


@pytest.mark.parametrize("seed", [0, 1, 7177, 0x7FFFFFFD, 0x7FFFFFFE, 2**63, 2**64 - 1])
def test_values_stay_in_range(seed):
    gen = ParkMiller(seed)
    for _ in range(200):
        value = gen.next()
        assert 0 <= value <= 0x7FFFFFFD


def test_deterministic():
    a = ParkMiller(31)
    b = ParkMiller(31)
    assert [a.next() for _ in range(50)] == [b.next() for _ in range(50)]


def test_different_seeds_diverge():
    a = ParkMiller(1 ^ 31)
    b = ParkMiller(1 ^ 7177)
    assert [a.next() for _ in range(10)] != [b.next() for _ in range(10)]


def test_seed_is_reduced_to_64_bits():
    assert ParkMiller(2**64 + 5).state == 5
    assert do_rand(2**64 + 5) == do_rand(5)