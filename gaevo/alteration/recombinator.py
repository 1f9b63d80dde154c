from __future__ import annotations

from abc import abstractmethod
from typing import Sequence

from loguru import logger
from numpy.random import Generator

from gaevo.alteration.base import Alterer
from gaevo.alteration.crossover_strategies import (
    CrossoverStrategy,
    SinglePointCrossover,
)
from gaevo.exceptions import ConfigurationError
from gaevo.population.population import Population
from gaevo.utils.rng import distinct_indexes, random_indexes

__all__ = ["Crossover", "MeanAlterer", "Recombinator"]


class Recombinator(Alterer):
    """Driver shared by all recombining alterers.

    Each individual is picked with *probability*; for every pick the picked
    index plus ``order - 1`` distinct random partners are handed to
    :meth:`recombine`.
    """

    def __init__(self, probability: float, order: int):
        super().__init__(probability)
        if order < 2:
            raise ConfigurationError(f"order must be at least 2, got {order}")
        self.order = order

    def alter(self, population: Population, generation: int, rng: Generator) -> int:
        n = len(population)
        if n < 2:
            return 0

        order = min(self.order, n)
        alterations = 0
        for i in random_indexes(n, self.probability, rng):
            indexes = distinct_indexes(n, int(i), order, rng)
            alterations += self.recombine(population, indexes, generation, rng)
        return alterations

    @abstractmethod
    def recombine(
        self,
        population: Population,
        indexes: Sequence[int],
        generation: int,
        rng: Generator,
    ) -> int:
        """Recombine the individuals at *indexes*; return the altered gene count."""


class Crossover(Recombinator):
    """Two-parent crossover on one shared chromosome.

    The chromosome index is drawn uniformly over the shorter genotype. The
    gene lists of both parents are handed to *strategy*, and the rebuilt
    chromosomes replace both parents with new phenotypes of *generation*.
    """

    def __init__(
        self, probability: float = 0.05, strategy: CrossoverStrategy | None = None
    ):
        super().__init__(probability, 2)
        self.strategy = strategy if strategy is not None else SinglePointCrossover()

    def recombine(
        self,
        population: Population,
        indexes: Sequence[int],
        generation: int,
        rng: Generator,
    ) -> int:
        pt1, pt2 = population[indexes[0]], population[indexes[1]]
        gt1, gt2 = pt1.genotype, pt2.genotype

        ch = int(rng.integers(min(len(gt1), len(gt2))))
        chromosomes1, chromosomes2 = list(gt1), list(gt2)
        genes1, genes2 = list(chromosomes1[ch]), list(chromosomes2[ch])

        count = self.strategy.crossover(genes1, genes2, rng)

        chromosomes1[ch] = chromosomes1[ch].with_genes(genes1)
        chromosomes2[ch] = chromosomes2[ch].with_genes(genes2)
        population[indexes[0]] = pt1.new_instance(
            gt1.with_chromosomes(chromosomes1), generation
        )
        population[indexes[1]] = pt2.new_instance(
            gt2.with_chromosomes(chromosomes2), generation
        )
        return count

    def __repr__(self) -> str:
        return f"Crossover(p={self.probability:g}, strategy={self.strategy!r})"


class MeanAlterer(Recombinator):
    """Write the gene-wise mean of two parents into the first one only.

    Numeric genes only. The second parent is left unchanged, so every
    recombination counts as one alteration.
    """

    def __init__(self, probability: float = 0.05):
        super().__init__(probability, 2)

    def recombine(
        self,
        population: Population,
        indexes: Sequence[int],
        generation: int,
        rng: Generator,
    ) -> int:
        pt1, pt2 = population[indexes[0]], population[indexes[1]]
        gt1, gt2 = pt1.genotype, pt2.genotype

        ch = int(rng.integers(min(len(gt1), len(gt2))))
        chromosomes = list(gt1)
        genes = list(chromosomes[ch])
        others = gt2[ch]
        for i in range(min(len(genes), len(others))):
            genes[i] = genes[i].mean(others[i])

        chromosomes[ch] = chromosomes[ch].with_genes(genes)
        population[indexes[0]] = pt1.new_instance(
            gt1.with_chromosomes(chromosomes), generation
        )
        logger.debug("[MeanAlterer] Averaged individuals {} and {}", *indexes[:2])
        return 1
