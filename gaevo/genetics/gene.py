"""Gene contract and the minimal concrete encodings used by the core."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from numpy.random import Generator

from gaevo.exceptions import EncodingError

__all__ = [
    "BitGene",
    "DoubleGene",
    "EnumGene",
    "Gene",
    "IntegerGene",
    "NumericGene",
]

A = TypeVar("A")


class Gene(ABC, Generic[A]):
    """Immutable carrier of one allele.

    ``new_instance(rng)`` returns a gene of the same variant with a freshly
    sampled allele, ``with_allele(value)`` the same variant with a fixed one.
    The latter may produce an invalid gene.
    """

    @property
    @abstractmethod
    def allele(self) -> A: ...

    @abstractmethod
    def is_valid(self) -> bool: ...

    @abstractmethod
    def new_instance(self, rng: Generator) -> "Gene[A]": ...

    @abstractmethod
    def with_allele(self, value: A) -> "Gene[A]": ...


@dataclass(frozen=True)
class BitGene(Gene[bool]):
    value: bool = False

    @property
    def allele(self) -> bool:
        return self.value

    def is_valid(self) -> bool:
        return True

    def new_instance(self, rng: Generator) -> "BitGene":
        return BitGene(bool(rng.random() < 0.5))

    def with_allele(self, value: bool) -> "BitGene":
        return BitGene(bool(value))

    def __str__(self) -> str:
        return "1" if self.value else "0"


class NumericGene(Gene[Any]):
    """Gene with an allele inside the closed range ``[min, max]``."""

    value: Any
    min: Any
    max: Any

    @property
    def allele(self):
        return self.value

    def is_valid(self) -> bool:
        return self.min <= self.value <= self.max

    def __float__(self) -> float:
        return float(self.value)

    @abstractmethod
    def mean(self, other: "NumericGene") -> "NumericGene":
        """Gene holding the arithmetic mean of both alleles."""


@dataclass(frozen=True)
class IntegerGene(NumericGene):
    value: int
    min: int
    max: int

    def __post_init__(self):
        if self.min > self.max:
            raise EncodingError(f"min ({self.min}) must be <= max ({self.max})")

    @classmethod
    def of(cls, min: int, max: int, rng: Generator) -> "IntegerGene":
        return cls(int(rng.integers(min, max, endpoint=True)), min, max)

    def new_instance(self, rng: Generator) -> "IntegerGene":
        return IntegerGene.of(self.min, self.max, rng)

    def with_allele(self, value) -> "IntegerGene":
        return IntegerGene(int(round(value)), self.min, self.max)

    def mean(self, other: NumericGene) -> "IntegerGene":
        a, b = self.value, int(other.value)
        return IntegerGene(a + int((b - a) / 2), self.min, self.max)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DoubleGene(NumericGene):
    value: float
    min: float
    max: float

    def __post_init__(self):
        if not self.min < self.max:
            raise EncodingError(f"min ({self.min}) must be < max ({self.max})")

    @classmethod
    def of(cls, min: float, max: float, rng: Generator) -> "DoubleGene":
        """Uniform sample from ``[min, max)``."""
        return cls(float(rng.uniform(min, max)), min, max)

    def new_instance(self, rng: Generator) -> "DoubleGene":
        return DoubleGene.of(self.min, self.max, rng)

    def with_allele(self, value) -> "DoubleGene":
        return DoubleGene(float(value), self.min, self.max)

    def mean(self, other: NumericGene) -> "DoubleGene":
        return DoubleGene(
            self.value + (float(other.value) - self.value) / 2.0, self.min, self.max
        )

    def __str__(self) -> str:
        return f"{self.value:.6g}"


@dataclass(frozen=True)
class EnumGene(Gene[Any]):
    """Index into a shared tuple of valid alleles (used by permutations)."""

    allele_index: int
    valid_alleles: tuple

    def __post_init__(self):
        if not self.valid_alleles:
            raise EncodingError("valid_alleles must not be empty")

    @classmethod
    def of(cls, valid_alleles: Sequence[Any], rng: Generator) -> "EnumGene":
        alleles = tuple(valid_alleles)
        return cls(int(rng.integers(len(alleles))), alleles)

    @property
    def allele(self):
        """The allele value, or ``None`` for an index outside ``valid_alleles``."""
        if not self.is_valid():
            return None
        return self.valid_alleles[self.allele_index]

    def is_valid(self) -> bool:
        return 0 <= self.allele_index < len(self.valid_alleles)

    def new_instance(self, rng: Generator) -> "EnumGene":
        return EnumGene(int(rng.integers(len(self.valid_alleles))), self.valid_alleles)

    def with_allele(self, value) -> "EnumGene":
        try:
            index = self.valid_alleles.index(value)
        except ValueError:
            index = -1
        return EnumGene(index, self.valid_alleles)

    def __str__(self) -> str:
        return str(self.allele) if self.is_valid() else "?"
