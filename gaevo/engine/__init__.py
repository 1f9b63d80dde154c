from gaevo.engine.config import EngineConfig
from gaevo.engine.core import EvolutionEngine
from gaevo.engine.limits import (
    by_execution_time,
    by_fitness_threshold,
    by_fixed_generation,
    by_steady_fitness,
)
from gaevo.engine.metrics import EngineMetrics, EvolutionDurations
from gaevo.engine.statistics import Statistics, compute_statistics

__all__ = [
    "EngineConfig",
    "EngineMetrics",
    "EvolutionDurations",
    "EvolutionEngine",
    "Statistics",
    "by_execution_time",
    "by_fitness_threshold",
    "by_fixed_generation",
    "by_steady_fitness",
    "compute_statistics",
]
