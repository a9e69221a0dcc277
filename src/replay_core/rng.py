"""
Seeded uniform generator.

Seed text -> uint32 via FNV-1a, then a mulberry32 stream of floats in [0, 1).
Both steps are pure 32-bit arithmetic, so a seed always replays the same
stream. The state is an explicit value; nothing is kept at module level.

Seeds are hashed per UTF-16 code unit (the same as per byte for ASCII) so
sessions saved by the browser version of the tool replay identically.
"""

from __future__ import annotations

from dataclasses import dataclass

MASK32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapped multiply (low 32 bits of the product)."""
    return (a * b) & MASK32


def _code_units(text: str) -> list[int]:
    raw = text.encode("utf-16-le")
    return [raw[i] | (raw[i + 1] << 8) for i in range(0, len(raw), 2)]


def hash_seed(text: str) -> int:
    """FNV-1a 32-bit hash of *text*."""
    h = FNV_OFFSET_BASIS
    for unit in _code_units(text):
        h ^= unit
        h = _imul(h, FNV_PRIME)
    return h


@dataclass(frozen=True)
class GeneratorState:
    """Opaque uint32 generator state."""

    value: int


def init_generator(seed_text: str) -> GeneratorState:
    return GeneratorState(hash_seed(seed_text))


def next_uniform(state: GeneratorState) -> tuple[float, GeneratorState]:
    """Advance one step. Returns (u in [0, 1), new state)."""
    a = (state.value + MULBERRY_INCREMENT) & MASK32
    t = _imul(a ^ (a >> 15), a | 1)
    t = ((t + _imul(t ^ (t >> 7), t | 61)) & MASK32) ^ t
    out = (t ^ (t >> 14)) & MASK32
    return out / TWO_POW_32, GeneratorState(a)


class SeededRandom:
    """Stateful convenience wrapper: ``rng.random()`` or ``next(rng)``."""

    def __init__(self, seed_text: str) -> None:
        self._state = init_generator(seed_text)

    @property
    def state(self) -> GeneratorState:
        return self._state

    def random(self) -> float:
        u, self._state = next_uniform(self._state)
        return u

    def __iter__(self) -> SeededRandom:
        return self

    def __next__(self) -> float:
        return self.random()
