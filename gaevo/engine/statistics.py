"""Per-generation population summary."""

from __future__ import annotations

import math
import numbers
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gaevo.engine.metrics import EvolutionDurations
from gaevo.population.optimize import Optimize
from gaevo.population.phenotype import Phenotype
from gaevo.population.population import Population

__all__ = ["Statistics", "compute_statistics"]


class _RunningStats(BaseModel):
    n: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def update(self, x: float) -> None:
        self.n += 1
        delta = x - self.mean
        self.mean = self.mean + delta * (1.0 / self.n)
        delta2 = x - self.mean
        self.m2 = self.m2 + delta * delta2

    def mean_value(self) -> float:
        return self.mean if self.n > 0 else 0.0

    def variance_value(self) -> float:
        if self.n <= 1:
            return 0.0
        return self.m2 / (self.n - 1)


class Statistics(BaseModel):
    """Immutable snapshot of one generation."""

    optimize: Optimize
    generation: int = Field(ge=0)
    best_phenotype: Phenotype | None = None
    worst_phenotype: Phenotype | None = None
    samples: int = Field(default=0, ge=0)
    age_mean: float = 0.0
    age_variance: float = 0.0
    fitness_mean: float = math.nan
    fitness_variance: float = math.nan
    standard_error: float = math.nan
    killed: int = Field(default=0, ge=0)
    invalid: int = Field(default=0, ge=0)
    alterations: int = Field(default=0, ge=0)
    durations: EvolutionDurations = Field(default_factory=EvolutionDurations)
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def best_fitness(self) -> Any:
        return self.best_phenotype.fitness if self.best_phenotype is not None else None

    @property
    def worst_fitness(self) -> Any:
        return (
            self.worst_phenotype.fitness if self.worst_phenotype is not None else None
        )

    def to_dict(self) -> dict[str, Any]:
        """Flat scalar view for logging and trackers."""
        return {
            "generation": self.generation,
            "optimize": self.optimize.value,
            "samples": self.samples,
            "best_fitness": self.best_fitness,
            "worst_fitness": self.worst_fitness,
            "age_mean": self.age_mean,
            "age_variance": self.age_variance,
            "fitness_mean": self.fitness_mean,
            "fitness_variance": self.fitness_variance,
            "standard_error": self.standard_error,
            "killed": self.killed,
            "invalid": self.invalid,
            "alterations": self.alterations,
            "evolve_seconds": self.durations.evolve,
        }


def compute_statistics(
    population: Population,
    generation: int,
    optimize: Optimize,
    *,
    killed: int = 0,
    invalid: int = 0,
    alterations: int = 0,
    durations: EvolutionDurations | None = None,
) -> Statistics:
    """Stream once over *population*; every phenotype must be evaluated.

    Fitness moments are only computed when all fitness values are real
    numbers; otherwise they are NaN.
    """
    best: Phenotype | None = None
    worst: Phenotype | None = None
    ages = _RunningStats()
    fitness = _RunningStats()
    numeric = True

    for pt in population:
        value = pt.fitness
        if best is None or optimize.compare(value, best.fitness) > 0:
            best = pt
        if worst is None or optimize.compare(value, worst.fitness) < 0:
            worst = pt

        ages.update(pt.age(generation))
        if numeric and isinstance(value, numbers.Real):
            fitness.update(float(value))
        else:
            numeric = False

    if numeric and fitness.n > 0:
        fitness_mean = fitness.mean_value()
        fitness_variance = fitness.variance_value()
        standard_error = math.sqrt(fitness_variance / fitness.n)
    else:
        fitness_mean = fitness_variance = standard_error = math.nan

    return Statistics(
        optimize=optimize,
        generation=generation,
        best_phenotype=best,
        worst_phenotype=worst,
        samples=len(population),
        age_mean=ages.mean_value(),
        age_variance=ages.variance_value(),
        fitness_mean=fitness_mean,
        fitness_variance=fitness_variance,
        standard_error=standard_error,
        killed=killed,
        invalid=invalid,
        alterations=alterations,
        durations=durations or EvolutionDurations(),
    )
