from abc import ABC, abstractmethod

from numpy.random import Generator

from gaevo.population.optimize import Optimize
from gaevo.population.population import Population


class Selector(ABC):
    """Sample a new sub-population of a given size.

    Selection never mutates the input population. The returned population
    holds references to the selected phenotypes; an individual may appear
    more than once.
    """

    def select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        """Select *count* phenotypes from *population*.

        Args:
            population: Phenotypes to select from (left untouched)
            count: Size of the returned population, must be >= 0
            optimize: Optimization direction deciding which fitness is better
            rng: Random generator used for every draw of this call

        Returns:
            A new population with exactly *count* entries (or none, if the
            input is empty and the selector samples with replacement).
        """
        if count < 0:
            raise ValueError(f"Selection count must be >= 0, got {count}")
        return self._select(population, count, optimize, rng)

    @abstractmethod
    def _select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
