"""Chromosome contract and concrete chromosomes.

Chromosomes are immutable. Alterers copy the genes into a list, rewrite the
list and call :meth:`Chromosome.with_genes` to obtain a new chromosome.
"""

from __future__ import annotations

from functools import cached_property
from typing import Any, Generic, Iterator, Sequence, TypeVar

import numpy as np
from numpy.random import Generator

from gaevo.exceptions import EncodingError
from gaevo.genetics.gene import BitGene, DoubleGene, EnumGene, Gene, IntegerGene

__all__ = [
    "BitChromosome",
    "Chromosome",
    "DoubleChromosome",
    "IntegerChromosome",
    "PermutationChromosome",
]

G = TypeVar("G", bound=Gene)


class Chromosome(Generic[G]):
    """Ordered, immutable sequence of at least one gene of the same variant."""

    def __init__(self, genes: Sequence[G]):
        genes = tuple(genes)
        if not genes:
            raise EncodingError(f"{type(self).__name__} needs at least one gene")
        self._genes: tuple[G, ...] = genes

    # -------------------------- Sequence API --------------------------

    def __len__(self) -> int:
        return len(self._genes)

    def __getitem__(self, index: int) -> G:
        return self._genes[index]

    def __iter__(self) -> Iterator[G]:
        return iter(self._genes)

    def length(self) -> int:
        return len(self._genes)

    def get_gene(self, index: int = 0) -> G:
        return self._genes[index]

    @property
    def gene(self) -> G:
        return self._genes[0]

    def to_seq(self) -> tuple[G, ...]:
        return self._genes

    # -------------------------- Validity --------------------------

    @cached_property
    def _valid(self) -> bool:
        return all(g.is_valid() for g in self._genes) and self._check_invariants()

    def is_valid(self) -> bool:
        """True iff every gene is valid and the variant's own invariants hold."""
        return self._valid

    def _check_invariants(self) -> bool:
        return True

    # -------------------------- Factories --------------------------

    def new_instance(self, rng: Generator) -> "Chromosome[G]":
        """Fresh random chromosome with the same shape and constraints."""
        return self.with_genes([g.new_instance(rng) for g in self._genes])

    def with_genes(self, genes: Sequence[G]) -> "Chromosome[G]":
        """Rebuild this chromosome type from a (possibly altered) gene sequence."""
        return type(self)(genes)

    # -------------------------- Dunder --------------------------

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other._genes == self._genes

    def __hash__(self) -> int:
        return hash((type(self), self._genes))

    def __str__(self) -> str:
        return "[" + "|".join(str(g) for g in self._genes) + "]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class BitChromosome(Chromosome[BitGene]):
    @classmethod
    def of(cls, length: int, rng: Generator, p: float = 0.5) -> "BitChromosome":
        """Random bit chromosome where each bit is set with probability *p*."""
        if length < 1:
            raise EncodingError(f"length must be positive, got {length}")
        bits = rng.random(length) < p
        return cls([BitGene(bool(b)) for b in bits])

    def bit_count(self) -> int:
        return sum(1 for g in self._genes if g.value)

    def __str__(self) -> str:
        return "".join(str(g) for g in self._genes)


class IntegerChromosome(Chromosome[IntegerGene]):
    @classmethod
    def of(cls, min: int, max: int, length: int, rng: Generator) -> "IntegerChromosome":
        if length < 1:
            raise EncodingError(f"length must be positive, got {length}")
        values = rng.integers(min, max, size=length, endpoint=True)
        return cls([IntegerGene(int(v), min, max) for v in values])

    @property
    def min(self) -> int:
        return self.gene.min

    @property
    def max(self) -> int:
        return self.gene.max


class DoubleChromosome(Chromosome[DoubleGene]):
    @classmethod
    def of(cls, min: float, max: float, length: int, rng: Generator) -> "DoubleChromosome":
        if length < 1:
            raise EncodingError(f"length must be positive, got {length}")
        values = rng.uniform(min, max, size=length)
        return cls([DoubleGene(float(v), min, max) for v in values])

    @property
    def min(self) -> float:
        return self.gene.min

    @property
    def max(self) -> float:
        return self.gene.max

    def to_array(self) -> np.ndarray:
        return np.fromiter((g.value for g in self._genes), dtype=np.float64)


class PermutationChromosome(Chromosome[EnumGene]):
    """Permutation of a set of valid alleles; no allele may appear twice."""

    @classmethod
    def of(cls, valid_alleles: Sequence[Any], rng: Generator) -> "PermutationChromosome":
        alleles = tuple(valid_alleles)
        if not alleles:
            raise EncodingError("valid_alleles must not be empty")
        order = rng.permutation(len(alleles))
        return cls([EnumGene(int(i), alleles) for i in order])

    @classmethod
    def of_integer(cls, length: int, rng: Generator) -> "PermutationChromosome":
        return cls.of(range(length), rng)

    @property
    def valid_alleles(self) -> tuple:
        return self.gene.valid_alleles

    def _check_invariants(self) -> bool:
        indexes = [g.allele_index for g in self._genes]
        return len(set(indexes)) == len(indexes)

    def new_instance(self, rng: Generator) -> "PermutationChromosome":
        return PermutationChromosome.of(self.valid_alleles, rng)

    def __str__(self) -> str:
        return "|".join(str(g) for g in self._genes)
