"""Per-pair recombination functions used by :class:`~gaevo.alteration.recombinator.Crossover`.

A strategy receives the mutable gene lists of one chromosome from each of two
parents, rewrites both in place and returns the number of altered genes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from numpy.random import Generator

from gaevo.alteration.base import check_probability
from gaevo.exceptions import ConfigurationError, EncodingError
from gaevo.genetics.gene import Gene, NumericGene
from gaevo.utils.rng import random_indexes, subset

__all__ = [
    "CrossoverStrategy",
    "IntermediateCrossover",
    "LineCrossover",
    "MultiPointCrossover",
    "PartiallyMatchedCrossover",
    "SinglePointCrossover",
    "UniformCrossover",
]


class CrossoverStrategy(ABC):
    @abstractmethod
    def crossover(self, that: list[Gene], other: list[Gene], rng: Generator) -> int:
        """Recombine *that* and *other* in place; return the altered gene count."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ---------------------------------------------------------------------------
# Point crossovers
# ---------------------------------------------------------------------------


def _swap(that: list, other: list, start: int, end: int) -> int:
    that[start:end], other[start:end] = other[start:end], that[start:end]
    return max(0, end - start)


class MultiPointCrossover(CrossoverStrategy):
    """Swap alternating spans between ``n`` distinct cut points.

    With an odd number of points the last span runs to the end of the
    shorter chromosome.
    """

    def __init__(self, n: int = 2):
        if n < 1:
            raise ConfigurationError(f"number of crossover points must be >= 1, got {n}")
        self.n = n

    def crossover(self, that: list[Gene], other: list[Gene], rng: Generator) -> int:
        length = min(len(that), len(other))
        k = min(length, self.n)
        points = subset(length, k, rng) if k > 0 else ()
        return self.swap_spans(that, other, [int(p) for p in points])

    @staticmethod
    def swap_spans(that: list, other: list, points: Sequence[int]) -> int:
        """Swap ``[points[0], points[1])``, ``[points[2], points[3])`` and so on.

        *points* must be sorted ascending. Returns the number of swapped
        positions.
        """
        length = min(len(that), len(other))
        swapped = 0
        for i in range(0, len(points) - 1, 2):
            swapped += _swap(that, other, points[i], points[i + 1])
        if len(points) % 2 == 1:
            swapped += _swap(that, other, points[-1], length)
        return swapped

    def __repr__(self) -> str:
        return f"MultiPointCrossover(n={self.n})"


class SinglePointCrossover(MultiPointCrossover):
    """Swap everything behind one random cut point."""

    def __init__(self):
        super().__init__(1)

    def __repr__(self) -> str:
        return "SinglePointCrossover()"


class UniformCrossover(CrossoverStrategy):
    """Swap each position independently with *swap_probability*."""

    def __init__(self, swap_probability: float = 0.5):
        self.swap_probability = check_probability(swap_probability, "swap_probability")

    def crossover(self, that: list[Gene], other: list[Gene], rng: Generator) -> int:
        length = min(len(that), len(other))
        indexes = random_indexes(length, self.swap_probability, rng)
        for i in indexes:
            that[i], other[i] = other[i], that[i]
        return len(indexes)

    def __repr__(self) -> str:
        return f"UniformCrossover(swap_probability={self.swap_probability:g})"


# ---------------------------------------------------------------------------
# Permutation crossover
# ---------------------------------------------------------------------------


class PartiallyMatchedCrossover(CrossoverStrategy):
    """PMX for permutation chromosomes; both children stay permutations.

    The section between two random cut points (``0 <= begin <= end <= len``)
    is swapped. Outside the section, every allele that now occurs twice is
    replaced by the allele displaced from the same section position of the
    other parent until no duplicate is left.
    """

    def crossover(self, that: list[Gene], other: list[Gene], rng: Generator) -> int:
        if len(that) != len(other):
            raise EncodingError(
                f"PMX needs chromosomes of equal length, got {len(that)} and {len(other)}"
            )
        if len(that) < 2:
            return 0

        begin, end = (int(p) for p in subset(len(that) + 1, 2, rng))
        return self.pmx(that, other, begin, end)

    @staticmethod
    def pmx(that: list[Gene], other: list[Gene], begin: int, end: int) -> int:
        """Apply PMX with the section ``[begin, end)``; return the changed positions."""
        before = list(that), list(other)
        _swap(that, other, begin, end)
        _repair(that, other, begin, end)
        _repair(other, that, begin, end)
        return sum(
            1
            for i in range(len(that))
            if that[i].allele != before[0][i].allele
            or other[i].allele != before[1][i].allele
        )


def _repair(that: list[Gene], other: list[Gene], begin: int, end: int) -> None:
    section = {that[j].allele: j for j in range(begin, end)}
    for i in [*range(begin), *range(end, len(that))]:
        index = section.get(that[i].allele)
        while index is not None:
            that[i] = other[index]
            index = section.get(that[i].allele)


# ---------------------------------------------------------------------------
# Numeric crossovers
# ---------------------------------------------------------------------------


def combine(v: float, w: float, a: float, b: float) -> tuple[float, float]:
    """``(a*v + (1-a)*w, b*w + (1-b)*v)``."""
    return a * v + (1.0 - a) * w, b * w + (1.0 - b) * v


def _accept(
    that: list[NumericGene], other: list[NumericGene], i: int, a: float, b: float
) -> bool:
    g1, g2 = that[i], other[i]
    lo, hi = float(g1.min), float(g1.max)
    t, s = combine(float(g1), float(g2), a, b)
    if lo <= t < hi and lo <= s < hi:
        that[i] = g1.with_allele(t)
        other[i] = g2.with_allele(s)
        return True
    return False


class _NumericCrossover(CrossoverStrategy):
    def __init__(self, p: float = 0.25):
        if p < 0:
            raise ConfigurationError(f"p must be >= 0, got {p}")
        self.p = p

    def _draw(self, rng: Generator, size: int | None = None):
        return rng.uniform(-self.p, 1.0 + self.p, size=size)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(p={self.p:g})"


class LineCrossover(_NumericCrossover):
    """Children on the line through both parents.

    ``a`` and ``b`` are drawn once from ``[-p, 1+p]`` and used for every
    position. A position changes only if both candidate values lie in
    ``[min, max)``; otherwise neither gene at that position changes.
    """

    def crossover(self, that: list[Gene], other: list[Gene], rng: Generator) -> int:
        a, b = self._draw(rng), self._draw(rng)
        return self.apply(that, other, a, b)

    @staticmethod
    def apply(that: list[Gene], other: list[Gene], a: float, b: float) -> int:
        """Recombine with fixed ``a`` and ``b``; return the altered gene count."""
        accepted = sum(
            1 for i in range(min(len(that), len(other))) if _accept(that, other, i, a, b)
        )
        return 2 * accepted


class IntermediateCrossover(_NumericCrossover):
    """Like :class:`LineCrossover` but with fresh ``a`` and ``b`` per position."""

    def crossover(self, that: list[Gene], other: list[Gene], rng: Generator) -> int:
        length = min(len(that), len(other))
        a, b = self._draw(rng, length), self._draw(rng, length)
        accepted = sum(
            1 for i in range(length) if _accept(that, other, i, float(a[i]), float(b[i]))
        )
        return 2 * accepted
