from __future__ import annotations

from pydantic import BaseModel, Field


class EvolutionDurations(BaseModel):
    """Wall-clock seconds spent in the phases of one generation."""

    offspring_selection: float = Field(default=0.0, ge=0)
    survivor_selection: float = Field(default=0.0, ge=0)
    offspring_alter: float = Field(default=0.0, ge=0)
    evaluation: float = Field(default=0.0, ge=0)
    statistics: float = Field(default=0.0, ge=0)
    evolve: float = Field(default=0.0, ge=0, description="Whole generation")

    def plus(self, other: "EvolutionDurations") -> "EvolutionDurations":
        return EvolutionDurations(
            **{
                name: getattr(self, name) + getattr(other, name)
                for name in type(self).model_fields
            }
        )


class EngineMetrics(BaseModel):
    """Cumulative counters over the lifetime of an engine."""

    total_generations: int = Field(
        default=0, description="Total number of evolve() calls completed"
    )
    phenotypes_created: int = Field(
        default=0, description="Phenotypes created by setup and replacement"
    )
    alterations: int = Field(default=0, description="Total number of altered genes")
    killed: int = Field(default=0, description="Survivors replaced for exceeding max age")
    invalid: int = Field(default=0, description="Survivors replaced for invalidity")
    best_improvements: int = Field(
        default=0, description="Generations that improved the best-so-far fitness"
    )
    durations: EvolutionDurations = Field(default_factory=EvolutionDurations)

    def record_generation(
        self,
        alterations: int,
        killed: int,
        invalid: int,
        durations: EvolutionDurations,
        improved: bool,
    ) -> None:
        """Record metrics from one evolve() call."""
        self.total_generations += 1
        self.alterations += alterations
        self.killed += killed
        self.invalid += invalid
        self.phenotypes_created += killed + invalid
        self.best_improvements += int(improved)
        self.durations = self.durations.plus(durations)

    def record_setup(self, created: int) -> None:
        self.phenotypes_created += created
