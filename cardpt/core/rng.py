"""
Seeded random number stream for deterministic dealing.

A seed string is hashed with 32-bit FNV-1a and the hash seeds a xorshift32
generator. The same seed string always produces the same stream, so a
``(seed, hand_id)`` pair fully determines the deck order of a hand.
"""

from __future__ import annotations

MASK_32 = 0xFFFFFFFF

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

# xorshift32 has a fixed point at zero
ZERO_STATE_REPLACEMENT = 0x6D2B79F5


def fnv1a32(text: str) -> int:
    """
    Hash a string with 32-bit FNV-1a.

    The hash runs over UTF-16 code units so that seeds containing
    non-BMP characters hash the same way as in JavaScript clients.
    """
    h = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & MASK_32
    return h


class XorShift32:
    """xorshift32 pseudo-random stream."""

    __slots__ = ("_state",)

    def __init__(self, seed: int):
        seed &= MASK_32
        self._state = seed if seed != 0 else ZERO_STATE_REPLACEMENT

    @property
    def state(self) -> int:
        return self._state

    def next_uint32(self) -> int:
        s = self._state
        s = (s ^ (s << 13)) & MASK_32
        s ^= s >> 17
        s = (s ^ (s << 5)) & MASK_32
        self._state = s
        return s

    def next_int(self, n: int) -> int:
        """Return an integer in ``[0, n)``."""
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}")
        return self.next_uint32() % n


def create_rng(seed: str) -> XorShift32:
    """Create a stream seeded from a string."""
    return XorShift32(fnv1a32(seed))


def hand_seed(seed: str, hand_id: int) -> str:
    """Seed string used for the deck of a given hand."""
    return f"{seed}:{hand_id}"
