"""Fitness-proportional and rank-based selectors.

Each selector turns the population into a probability vector ``p`` computed
as if maximizing. For minimization the vector is rank-inverted (the slot of
the i-th smallest probability receives the i-th largest one) instead of
being transformed with ``1 - p``, which keeps ``sum(p) == 1``. Sampling then
searches the cumulative vector for the first entry >= a uniform draw.
"""

from __future__ import annotations

from abc import abstractmethod

from loguru import logger
import numpy as np
from numpy.random import Generator

from gaevo.exceptions import ConfigurationError
from gaevo.population.optimize import Optimize
from gaevo.population.population import Population
from gaevo.selection.base import Selector
from gaevo.utils.probability import (
    check_and_correct,
    eq,
    incremental,
    index_of,
    revert,
    sort_and_revert,
    sum2one,
)

__all__ = [
    "BoltzmannSelector",
    "ExponentialRankSelector",
    "LinearRankSelector",
    "ProbabilitySelector",
    "RouletteWheelSelector",
    "StochasticUniversalSelector",
]


def _fitness_array(population: Population) -> np.ndarray:
    return np.fromiter(
        (float(pt.fitness) for pt in population),
        dtype=np.float64,
        count=len(population),
    )


def _uniform(n: int) -> np.ndarray:
    return np.full(n, 1.0 / n, dtype=np.float64)


class ProbabilitySelector(Selector):
    """Base class for selectors sampling from a probability vector.

    Subclasses that need the population ranked pass ``sorted=True``; they
    then receive a copy sorted from highest to lowest fitness.
    """

    def __init__(self, sorted: bool = False):
        self._sorted = sorted

    def _select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        selection = Population()
        if count == 0 or len(population) == 0:
            return selection

        pop = self._prepare(population)
        incr = self._cumulative(pop, count, optimize)

        draws = rng.random(count)
        for v in draws:
            selection.append(pop[index_of(incr, v)])
        return selection

    def _prepare(self, population: Population) -> Population:
        if self._sorted:
            return population.copy().population_sort(Optimize.MAXIMUM)
        return population

    def _cumulative(
        self, population: Population, count: int, optimize: Optimize
    ) -> np.ndarray:
        prob = check_and_correct(self.probabilities(population, count, optimize))
        assert len(prob) == len(population), "probability vector has wrong length"
        assert sum2one(prob), "probabilities do not sum to one"
        return incremental(prob)

    def probabilities(
        self, population: Population, count: int, optimize: Optimize = Optimize.MAXIMUM
    ) -> np.ndarray:
        """Selection probability of every individual of *population*.

        A sorted selector expects *population* to be sorted already.
        """
        prob = np.asarray(self._probabilities(population, count), dtype=np.float64)
        if optimize is Optimize.MINIMUM:
            prob = revert(prob) if self._sorted else sort_and_revert(prob)
        return prob

    @abstractmethod
    def _probabilities(self, population: Population, count: int) -> np.ndarray:
        """Probabilities for a maximizing run."""


class RouletteWheelSelector(ProbabilitySelector):
    """Fitness-proportional selection.

    Fitness values are shifted by ``min(0, min(fitness))`` so negative values
    still produce non-negative probabilities.
    """

    def _probabilities(self, population: Population, count: int) -> np.ndarray:
        fitness = _fitness_array(population)
        worst = min(0.0, float(fitness.min()))
        total = float(fitness.sum()) - worst * len(fitness)

        if eq(total, 0.0):
            logger.debug(
                "[RouletteWheelSelector] Zero fitness sum, using uniform distribution"
            )
            return _uniform(len(fitness))
        return (fitness - worst) / total


class StochasticUniversalSelector(RouletteWheelSelector):
    """Roulette probabilities sampled with *count* equally spaced pointers.

    One random offset in ``[0, 1/count)`` places all pointers, which gives
    the minimal spread of selection counts around their expectation.
    """

    def _select(
        self,
        population: Population,
        count: int,
        optimize: Optimize,
        rng: Generator,
    ) -> Population:
        selection = Population()
        if count == 0 or len(population) == 0:
            return selection

        incr = self._cumulative(population, count, optimize)
        delta = 1.0 / count
        offset = rng.random() * delta

        j = 0
        last = len(incr) - 1
        for k in range(count):
            pointer = offset + k * delta
            while j < last and incr[j] < pointer:
                j += 1
            selection.append(population[j])
        return selection


class BoltzmannSelector(ProbabilitySelector):
    """``p[i] ~ exp(b * f[i] / max|f|)``.

    Larger *b* values increase the selection pressure.
    """

    def __init__(self, b: float = 4.0):
        super().__init__(sorted=False)
        self.b = b

    def _probabilities(self, population: Population, count: int) -> np.ndarray:
        fitness = _fitness_array(population)
        scale = float(np.max(np.abs(fitness)))
        if scale > 0.0 and np.isfinite(scale):
            fitness = fitness / scale

        weights = np.exp(self.b * fitness)
        total = float(weights.sum())
        if not np.isfinite(total) or eq(total, 0.0):
            logger.debug("[BoltzmannSelector] Degenerate weights, using uniform")
            return _uniform(len(fitness))
        return weights / total

    def __repr__(self) -> str:
        return f"BoltzmannSelector(b={self.b})"


class LinearRankSelector(ProbabilitySelector):
    """Linear ranking: the best gets ``n_plus / N``, the worst ``n_minus / N``.

    ``n_plus = 2 - n_minus``; *n_minus* must lie in ``[0, 1]``.
    """

    def __init__(self, n_minus: float = 0.5):
        if not 0.0 <= n_minus <= 1.0:
            raise ConfigurationError(f"n_minus must be in [0, 1], got {n_minus}")
        super().__init__(sorted=True)
        self.n_minus = n_minus
        self.n_plus = 2.0 - n_minus

    def _probabilities(self, population: Population, count: int) -> np.ndarray:
        n = len(population)
        if n == 1:
            return np.ones(1, dtype=np.float64)

        # Population is sorted best first; rank N-1 belongs to position 0.
        ranks = np.arange(n - 1, -1, -1, dtype=np.float64)
        return (self.n_minus + (self.n_plus - self.n_minus) * ranks / (n - 1)) / n

    def __repr__(self) -> str:
        return f"LinearRankSelector(n_minus={self.n_minus})"


class ExponentialRankSelector(ProbabilitySelector):
    """``p[i] = c^i (c - 1) / (c^N - 1)`` with ``i = 0`` the best individual."""

    def __init__(self, c: float = 0.975):
        if not 0.0 <= c < 1.0:
            raise ConfigurationError(f"c must be in [0, 1), got {c}")
        super().__init__(sorted=True)
        self.c = c

    def _probabilities(self, population: Population, count: int) -> np.ndarray:
        n = len(population)
        c = self.c
        b = (c - 1.0) / (c**n - 1.0)
        return np.power(c, np.arange(n, dtype=np.float64)) * b

    def __repr__(self) -> str:
        return f"ExponentialRankSelector(c={self.c})"
