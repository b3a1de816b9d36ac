"""A small printf that understands %d, %l, %x, %p, %s, %c and %%."""

_DIGITS = "0123456789ABCDEF"
_U32 = 1 << 32
_U64 = 1 << 64


def _int32(value):
    return (int(value) + (1 << 31)) % _U32 - (1 << 31)


def _digits(value, base):
    out = []
    while True:
        out.append(_DIGITS[value % base])
        value //= base
        if value == 0:
            break
    return "".join(reversed(out))


def _signed(value):
    value = _int32(value)
    if value < 0:
        return "-" + _digits(-value, 10)
    return _digits(value, 10)


def _pointer(value):
    value = int(value) % _U64
    return "0x" + "".join(_DIGITS[(value >> shift) & 0xF] for shift in range(60, -4, -4))


def _string(value):
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        return value.decode("latin-1")
    return str(value)


def _char(value):
    if isinstance(value, str):
        return value[:1]
    return chr(int(value) & 0xFF)


_CONVERSIONS = {
    "d": _signed,
    "l": lambda v: _digits(int(v) % _U64, 10),
    "x": lambda v: _digits(int(v) % _U32, 16),
    "p": _pointer,
    "s": _string,
    "c": _char,
}


def format_printf(fmt, *args):
    """Render ``fmt`` with ``args`` and return the resulting text.

    Unknown conversions are copied through with their percent sign, and
    a lone percent sign at the end of the format is dropped.
    """
    pieces = []
    remaining = iter(args)
    chars = iter(fmt)
    for c in chars:
        if c != "%":
            pieces.append(c)
            continue
        spec = next(chars, None)
        if spec is None:
            break
        convert = _CONVERSIONS.get(spec)
        if convert is None:
            pieces.append("%" if spec == "%" else "%" + spec)
            continue
        try:
            value = next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None
        pieces.append(convert(value))
    return "".join(pieces)


def fprintf(stream, fmt, *args):
    """Write the formatted text to ``stream``."""
    stream.write(format_printf(fmt, *args))