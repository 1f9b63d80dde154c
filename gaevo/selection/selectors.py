from __future__ import annotations

from loguru import logger
from numpy.random import Generator

from gaevo.exceptions import ConfigurationError
from gaevo.population.optimize import Optimize
from gaevo.population.population import Population
from gaevo.selection.base import Selector

__all__ = ["MonteCarloSelector", "TournamentSelector", "TruncationSelector"]


class TournamentSelector(Selector):
    """Best of *sample_size* uniformly drawn individuals, once per slot.

    Individuals are drawn with replacement, so weak individuals are
    exponentially disadvantaged as the sample size grows.
    """

    def __init__(self, sample_size: int = 2):
        if sample_size < 2:
            raise ConfigurationError(
                f"sample_size must be at least 2, got {sample_size}"
            )
        self.sample_size = sample_size

    def _select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        n = len(population)
        if count > n:
            raise ValueError(
                f"Selection count ({count}) must not exceed population size ({n})"
            )
        if count == 0:
            return Population()
        if self.sample_size > n:
            raise ValueError(
                f"sample_size ({self.sample_size}) must not exceed population size ({n})"
            )

        draws = rng.integers(0, n, size=(count, self.sample_size))
        selection = Population()
        for row in draws:
            winner = population[int(row[0])]
            for index in row[1:]:
                candidate = population[int(index)]
                if optimize.compare(candidate.fitness, winner.fitness) > 0:
                    winner = candidate
            selection.append(winner)

        logger.debug(
            "[TournamentSelector] Selected {} of {} (sample_size={})",
            count,
            n,
            self.sample_size,
        )
        return selection

    def __repr__(self) -> str:
        return f"TournamentSelector(sample_size={self.sample_size})"


class TruncationSelector(Selector):
    """The *count* best individuals, best first. Deterministic."""

    def _select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        n = len(population)
        if count > n:
            raise ValueError(
                f"Selection count ({count}) must not exceed population size ({n})"
            )
        ranked = population.copy().population_sort(optimize)
        return ranked[:count]


class MonteCarloSelector(Selector):
    """Uniform random selection with replacement; fitness is ignored.

    Useful as a baseline for comparing the selection pressure of other
    selectors.
    """

    def _select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        if count == 0 or len(population) == 0:
            return Population()
        return Population(
            population[int(i)] for i in rng.integers(0, len(population), size=count)
        )
