"""Deterministic pseudo-random streams.

Every synthetic series in the package is a pure function of an integer seed.
The uniform stream is a 32-bit linear congruential generator; normal variates
come from the Box-Muller transform over that stream.
"""

import math
from typing import Iterator

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32
LCG_SCALE = LCG_MODULUS - 1

# Day-to-day seed recurrence used by the historical series generator
SEED_MULTIPLIER = 1103515245
SEED_INCREMENT = 12345


class LCGStream:
    """Uniform stream over [0, 1] backed by a 32-bit LCG.

    The stream owns its state; two streams built from different seeds never
    interfere.

    Example:
        >>> stream = LCGStream(42)
        >>> u = stream.next()
        >>> 0.0 <= u <= 1.0
        True
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        self._state = int(seed) % LCG_MODULUS

    @property
    def state(self) -> int:
        """Current integer state."""
        return self._state

    def next(self) -> float:
        """Advance the generator and return the next uniform value."""
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_SCALE

    def __call__(self) -> float:
        return self.next()

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.next()

    def __repr__(self) -> str:
        return f"LCGStream(state={self._state})"


def make_stream(seed: int) -> LCGStream:
    """Create a uniform stream for ``seed``."""
    return LCGStream(seed)


def normal(stream: LCGStream) -> float:
    """Draw a standard normal variate (Box-Muller).

    Args:
        stream: Uniform stream to draw from.

    Returns:
        Standard normal sample (mean 0, variance 1).
    """
    u1 = stream.next()
    u2 = stream.next()
    # log(0) is undefined
    while u1 == 0:
        u1 = stream.next()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def next_day_seed(seed: int) -> int:
    """Advance the day-level seed recurrence (kept within 32 bits)."""
    return (seed * SEED_MULTIPLIER + SEED_INCREMENT) % LCG_MODULUS
