"""The Park-Miller "minimal standard" pseudo-random number generator."""

_U64 = (1 << 64) - 1
_MODULUS = 0x7FFFFFFF
_MULTIPLIER = 16807
_Q = 127773  # _MODULUS // _MULTIPLIER
_R = 2836  # _MODULUS % _MULTIPLIER


def do_rand(ctx):
    """Advance generator state ``ctx`` and return the next value.

    The returned value lies in ``[0, 0x7ffffffd]`` and is also the new
    state to pass to the following call. Schrage's method keeps the
    product within 31 bits.
    """
    x = ((ctx & _U64) % 0x7FFFFFFE) + 1
    hi, lo = divmod(x, _Q)
    x = _MULTIPLIER * lo - _R * hi
    if x < 0:
        x += _MODULUS
    return x - 1


class ParkMiller:
    """A stateful generator seeded with an unsigned 64-bit value."""

    def __init__(self, seed=1):
        self.state = seed & _U64

    def next(self):
        """Return the next value and advance the state."""
        self.state = do_rand(self.state)
        return self.state