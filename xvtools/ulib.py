"""Small string and input helpers with C library semantics."""

_INT_MIN = 1 << 31
_U32 = 1 << 32


def _as_bytes(s):
    if isinstance(s, str):
        return s.encode()
    return bytes(s)


def atoi(s):
    """Value of the leading decimal digits of ``s`` as a 32-bit int.

    No sign or leading space is accepted; a string without leading
    digits gives 0.
    """
    n = 0
    for c in s:
        if not "0" <= c <= "9":
            break
        n = (n * 10 + ord(c) - ord("0")) % _U32
    return (n + _INT_MIN) % _U32 - _INT_MIN


def strcmp(p, q):
    """Compare two strings byte by byte up to a NUL.

    Returns the difference of the first differing bytes, 0 if equal.
    """
    p = _as_bytes(p).split(b"\0", 1)[0] + b"\0"
    q = _as_bytes(q).split(b"\0", 1)[0] + b"\0"
    for a, b in zip(p, q):
        if a != b or a == 0:
            return a - b
    return 0


def memcmp(a, b, n):
    """Compare the first ``n`` bytes of ``a`` and ``b`` as unsigned values."""
    a = _as_bytes(a)
    b = _as_bytes(b)
    if n < 0 or n > len(a) or n > len(b):
        raise ValueError(f"cannot compare {n} bytes")
    for x, y in zip(a[:n], b[:n]):
        if x != y:
            return x - y
    return 0


def gets(stream, max):
    """Read one line of at most ``max - 1`` characters from ``stream``.

    Reading stops after a newline or carriage return, which is kept.
    An empty string means end of input.
    """
    out = []
    while len(out) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        out.append(c)
        if c in "\n\r":
            break
    return "".join(out)