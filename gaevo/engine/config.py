from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from gaevo.alteration.base import Alterer, CompositeAlterer
from gaevo.alteration.crossover_strategies import SinglePointCrossover
from gaevo.alteration.mutators import Mutator
from gaevo.alteration.recombinator import Crossover
from gaevo.population.optimize import Optimize
from gaevo.population.phenotype import FitnessScaler, identity
from gaevo.selection.base import Selector
from gaevo.selection.selectors import TournamentSelector


def default_alterer() -> Alterer:
    return CompositeAlterer(Crossover(0.1, SinglePointCrossover()), Mutator(0.05))


class EngineConfig(BaseModel):
    """Configuration options controlling EvolutionEngine behaviour.

    Assignments are validated, so the engine's setters can update a running
    configuration between generations.
    """

    population_size: int = Field(default=50, gt=0)
    offspring_fraction: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Share of each new generation produced by selection + alteration",
    )
    maximal_phenotype_age: int = Field(
        default=70, gt=0, description="Survivors older than this are replaced"
    )
    optimize: Optimize = Field(default=Optimize.MAXIMUM)
    max_workers: int | None = Field(
        default=None,
        gt=0,
        description="Worker threads for selection and evaluation (None = serial)",
    )
    seed: int | None = Field(
        default=None, description="Root seed of all random streams (None = entropy)"
    )
    survivor_selector: Selector = Field(
        default_factory=lambda: TournamentSelector(sample_size=3)
    )
    offspring_selector: Selector = Field(
        default_factory=lambda: TournamentSelector(sample_size=3)
    )
    alterer: Alterer = Field(default_factory=default_alterer)
    fitness_scaler: FitnessScaler = Field(default=identity)
    log_interval: int = Field(
        default=10, gt=0, description="Generations between INFO progress logs"
    )
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    @property
    def offspring_count(self) -> int:
        # Half-up rounding.
        return int(self.offspring_fraction * self.population_size + 0.5)

    @property
    def survivor_count(self) -> int:
        return self.population_size - self.offspring_count
