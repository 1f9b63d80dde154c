from __future__ import annotations

from functools import cached_property
from typing import Callable, Iterator, Sequence

from numpy.random import Generator

from gaevo.exceptions import EncodingError
from gaevo.genetics.chromosome import Chromosome
from gaevo.genetics.gene import Gene

GenotypeFactory = Callable[[Generator], "Genotype"]


class Genotype:
    """Encoded candidate solution as an ordered, immutable chromosome sequence.

    The structure (number, variant and length of chromosomes) stays fixed for
    a run. Every transformation returns a new genotype.
    """

    def __init__(self, chromosomes: Sequence[Chromosome]):
        chromosomes = tuple(chromosomes)
        if not chromosomes:
            raise EncodingError("Genotype needs at least one chromosome")
        self._chromosomes: tuple[Chromosome, ...] = chromosomes

    @classmethod
    def of(cls, *chromosomes: Chromosome) -> "Genotype":
        return cls(chromosomes)

    def __len__(self) -> int:
        return len(self._chromosomes)

    def __getitem__(self, index: int) -> Chromosome:
        return self._chromosomes[index]

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self._chromosomes)

    def length(self) -> int:
        return len(self._chromosomes)

    @property
    def chromosome(self) -> Chromosome:
        return self._chromosomes[0]

    @property
    def gene(self) -> Gene:
        """First gene of the first chromosome."""
        return self._chromosomes[0].gene

    def to_seq(self) -> tuple[Chromosome, ...]:
        return self._chromosomes

    @cached_property
    def gene_count(self) -> int:
        return sum(len(c) for c in self._chromosomes)

    @cached_property
    def _valid(self) -> bool:
        return all(c.is_valid() for c in self._chromosomes)

    def is_valid(self) -> bool:
        return self._valid

    def new_instance(self, rng: Generator) -> "Genotype":
        """Fresh random genotype with the same structure.

        Bound methods of a template genotype serve as genotype factories.
        """
        return Genotype([c.new_instance(rng) for c in self._chromosomes])

    def factory(self) -> GenotypeFactory:
        return self.new_instance

    def with_chromosomes(self, chromosomes: Sequence[Chromosome]) -> "Genotype":
        return Genotype(chromosomes)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Genotype) and other._chromosomes == self._chromosomes

    def __hash__(self) -> int:
        return hash(self._chromosomes)

    def __str__(self) -> str:
        return ",".join(str(c) for c in self._chromosomes)

    def __repr__(self) -> str:
        return f"Genotype({self})"
