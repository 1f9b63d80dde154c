"""Gene-level mutation operators.

:class:`Mutator` thins the population hierarchically: individuals,
chromosomes and genes are each picked with probability ``q = p**(1/3)``, so
the expected fraction of picked genes is ``p``.
"""

from __future__ import annotations

from numpy.random import Generator

from gaevo.alteration.base import Alterer
from gaevo.genetics.chromosome import Chromosome
from gaevo.genetics.gene import Gene, NumericGene
from gaevo.genetics.genotype import Genotype
from gaevo.population.population import Population
from gaevo.utils.rng import random_indexes, subset

__all__ = ["GaussianMutator", "Mutator", "ShiftMutator", "SwapMutator"]

DEFAULT_MUTATION_PROBABILITY = 0.01


class Mutator(Alterer):
    """Replace every picked gene with ``gene.new_instance(rng)``.

    Subclasses override :meth:`mutate_genes` to change the innermost step.
    """

    def __init__(self, probability: float = DEFAULT_MUTATION_PROBABILITY):
        super().__init__(probability)

    def alter(self, population: Population, generation: int, rng: Generator) -> int:
        q = self.probability ** (1.0 / 3.0)
        alterations = 0
        for i in random_indexes(len(population), q, rng):
            pt = population[i]
            genotype, count = self._mutate_genotype(pt.genotype, q, rng)
            population[i] = pt.new_instance(genotype, generation)
            alterations += count
        return alterations

    def _mutate_genotype(
        self, genotype: Genotype, q: float, rng: Generator
    ) -> tuple[Genotype, int]:
        picked = random_indexes(len(genotype), q, rng)
        if len(picked) == 0:
            return genotype, 0

        chromosomes = list(genotype)
        alterations = 0
        for i in picked:
            mutated, count = self._mutate_chromosome(chromosomes[i], q, rng)
            if count > 0:
                chromosomes[i] = mutated
                alterations += count
        return genotype.with_chromosomes(chromosomes), alterations

    def _mutate_chromosome(
        self, chromosome: Chromosome, q: float, rng: Generator
    ) -> tuple[Chromosome, int]:
        genes = list(chromosome)
        count = self.mutate_genes(genes, q, rng)
        if count == 0:
            return chromosome, 0
        return chromosome.with_genes(genes), count

    def mutate_genes(self, genes: list[Gene], q: float, rng: Generator) -> int:
        """Mutate *genes* in place and return the number of changed genes."""
        indexes = random_indexes(len(genes), q, rng)
        for i in indexes:
            genes[i] = genes[i].new_instance(rng)
        return len(indexes)


class SwapMutator(Mutator):
    """Swap every picked gene with a uniformly chosen gene of the same chromosome.

    Keeps permutation chromosomes valid.
    """

    def mutate_genes(self, genes: list[Gene], q: float, rng: Generator) -> int:
        n = len(genes)
        if n <= 1:
            return 0
        indexes = random_indexes(n, q, rng)
        for i in indexes:
            j = int(rng.integers(n))
            genes[i], genes[j] = genes[j], genes[i]
        return len(indexes)


class GaussianMutator(Mutator):
    """Add ``Normal(0, ((max - min) / 4)^2)`` noise, clamped to ``[min, max]``.

    Numeric genes only.
    """

    def mutate_genes(self, genes: list[Gene], q: float, rng: Generator) -> int:
        indexes = random_indexes(len(genes), q, rng)
        for i in indexes:
            genes[i] = self._mutate_gene(genes[i], rng)
        return len(indexes)

    @staticmethod
    def _mutate_gene(gene: NumericGene, rng: Generator) -> NumericGene:
        lo, hi = float(gene.min), float(gene.max)
        std = (hi - lo) * 0.25
        value = float(gene) + rng.normal(0.0, std)
        return gene.with_allele(min(max(value, lo), hi))


class ShiftMutator(Mutator):
    """Move a random section ``[a, b)`` behind the section ``[b, c)``.

    Applied once per picked chromosome; the count is ``c - a``. Keeps
    permutation chromosomes valid.
    """

    def mutate_genes(self, genes: list[Gene], q: float, rng: Generator) -> int:
        if len(genes) <= 1:
            return 0
        a, b, c = (int(x) for x in subset(len(genes) + 1, 3, rng))
        shift(genes, a, b, c)
        return c - a


def shift(genes: list, a: int, b: int, c: int) -> None:
    """In place: ``genes[a:c] = genes[b:c] + genes[a:b]``."""
    if not 0 <= a < b < c <= len(genes):
        raise ValueError(
            f"invalid shift range [{a}, {b}, {c}] for length {len(genes)}"
        )
    genes[a:c] = genes[b:c] + genes[a:b]
