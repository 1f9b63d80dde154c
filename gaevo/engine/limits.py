"""Termination predicates for :meth:`EvolutionEngine.evolve_while`.

A predicate receives the latest :class:`Statistics` and returns ``True``
while evolution should continue.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from loguru import logger

from gaevo.engine.statistics import Statistics
from gaevo.exceptions import ConfigurationError

Predicate = Callable[[Statistics], bool]


def by_fixed_generation(generation: int) -> Predicate:
    """Continue until the engine has reached *generation*."""
    if generation < 1:
        raise ConfigurationError(f"generation must be >= 1, got {generation}")
    return lambda statistics: statistics.generation < generation


class SteadyFitnessLimit:
    """Stop after *generations* consecutive generations without improvement."""

    def __init__(self, generations: int):
        if generations < 1:
            raise ConfigurationError(f"generations must be >= 1, got {generations}")
        self.generations = generations
        self._best: Any = None
        self._stable = 0

    def __call__(self, statistics: Statistics) -> bool:
        fitness = statistics.best_fitness
        if self._best is None or statistics.optimize.compare(fitness, self._best) > 0:
            self._best = fitness
            self._stable = 0
        else:
            self._stable += 1

        proceed = self._stable < self.generations
        if not proceed:
            logger.info(
                "[Limits] Fitness steady for {} generations at {}",
                self._stable,
                self._best,
            )
        return proceed


def by_steady_fitness(generations: int) -> Predicate:
    return SteadyFitnessLimit(generations)


def by_fitness_threshold(threshold: Any) -> Predicate:
    """Continue while the generation's best fitness has not reached *threshold*."""
    return (
        lambda statistics: statistics.optimize.compare(
            statistics.best_fitness, threshold
        )
        < 0
    )


class ExecutionTimeLimit:
    """Stop once *seconds* have elapsed since the first call."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        if seconds <= 0:
            raise ConfigurationError(f"seconds must be > 0, got {seconds}")
        self.seconds = seconds
        self._clock = clock
        self._start: float | None = None

    def __call__(self, statistics: Statistics) -> bool:
        now = self._clock()
        if self._start is None:
            self._start = now
        return now - self._start < self.seconds


def by_execution_time(
    seconds: float, clock: Callable[[], float] = time.monotonic
) -> Predicate:
    return ExecutionTimeLimit(seconds, clock)
