"""Explicit random number handles.

Every stochastic operation takes a :class:`numpy.random.Generator`. Parallel
work receives its own generator spawned from a :class:`numpy.random.SeedSequence`,
so a fixed seed reproduces a run regardless of thread scheduling.
"""

from __future__ import annotations

import numpy as np
from numpy.random import Generator, SeedSequence

__all__ = [
    "RandomSource",
    "as_generator",
    "distinct_indexes",
    "random_indexes",
    "subset",
]


def as_generator(rng: Generator | int | None = None) -> Generator:
    """Return *rng* if it already is a generator, otherwise seed a new one."""
    if isinstance(rng, Generator):
        return rng
    return np.random.default_rng(rng)


class RandomSource:
    """Deterministic supplier of independent generators for one engine run."""

    def __init__(self, seed: int | None = None):
        self._seed_sequence = SeedSequence(seed)

    @property
    def entropy(self) -> int:
        return self._seed_sequence.entropy

    def spawn(self, count: int) -> list[Generator]:
        """Return *count* statistically independent child generators."""
        return [np.random.default_rng(s) for s in self._seed_sequence.spawn(count)]

    def next(self) -> Generator:
        return self.spawn(1)[0]


def random_indexes(n: int, p: float, rng: Generator) -> np.ndarray:
    """Indexes in ``[0, n)``, each included independently with probability *p*.

    This is the Bernoulli index stream that drives mutation and recombination.
    The result is sorted ascending.
    """
    if n <= 0 or p <= 0.0:
        return np.empty(0, dtype=np.intp)
    if p >= 1.0:
        return np.arange(n, dtype=np.intp)
    return np.flatnonzero(rng.random(n) < p)


def subset(n: int, k: int, rng: Generator) -> np.ndarray:
    """Sorted random subset of *k* distinct indexes from ``[0, n)``."""
    if k < 0 or k > n:
        raise ValueError(f"subset size must be in [0, {n}], got {k}")
    return np.sort(rng.choice(n, size=k, replace=False))


def distinct_indexes(n: int, first: int, k: int, rng: Generator) -> list[int]:
    """*k* distinct indexes from ``[0, n)``, starting with *first*.

    The remaining ``k - 1`` indexes are drawn uniformly from ``[0, n)``
    without *first*.
    """
    if not 0 <= first < n:
        raise IndexError(f"first index {first} out of range [0, {n})")
    if k < 1 or k > n:
        raise ValueError(f"k must be in [1, {n}], got {k}")

    others = rng.choice(n - 1, size=k - 1, replace=False)
    others = np.where(others >= first, others + 1, others)
    return [first, *(int(i) for i in others)]
