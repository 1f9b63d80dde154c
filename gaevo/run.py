"""Run a complete evolution experiment with a run log.

``python -m gaevo.run`` evolves a 64-bit ones-counting problem as a smoke run.
"""

from __future__ import annotations

from datetime import datetime, timezone
import time

from loguru import logger
import numpy as np

from gaevo.engine.config import EngineConfig
from gaevo.engine.core import EvolutionEngine
from gaevo.engine.limits import by_fixed_generation, by_steady_fitness
from gaevo.engine.statistics import Statistics
from gaevo.genetics.chromosome import BitChromosome
from gaevo.genetics.genotype import Genotype, GenotypeFactory
from gaevo.population.phenotype import FitnessFunction
from gaevo.utils.logger_setup import setup_logger


def run_experiment(
    fitness_function: FitnessFunction,
    genotype: GenotypeFactory | Genotype,
    config: EngineConfig | None = None,
    *,
    max_generations: int = 100,
    steady_generations: int | None = None,
    log_dir: str = "logs",
    log_level: str = "INFO",
) -> Statistics:
    """Set up logging, evolve until a limit stops the run, return the best statistics.

    The run stops at *max_generations* or, when *steady_generations* is
    given, after that many generations without improvement.
    """
    log_file = setup_logger(log_dir=log_dir, level=log_level, run_name="experiment")
    start_time = time.time()

    logger.info("=" * 60)
    logger.info("[Experiment] Start {}", datetime.now(timezone.utc).isoformat())
    logger.info("[Experiment] Log file: {}", log_file)

    fixed = by_fixed_generation(max_generations)
    steady = by_steady_fitness(steady_generations) if steady_generations else None

    def proceed(statistics: Statistics) -> bool:
        # Both limits see every generation so the steady counter stays current.
        keep = fixed(statistics)
        if steady is not None:
            keep = steady(statistics) and keep
        return keep

    with EvolutionEngine(fitness_function, genotype, config) as engine:
        engine.setup()
        best = engine.evolve_while(proceed)
        metrics = engine.metrics

    logger.info(
        "[Experiment] Done | generations={}, best={}, alterations={}, killed={}, "
        "invalid={}, took {:.2f}s",
        engine.generation,
        best.best_fitness,
        metrics.alterations,
        metrics.killed,
        metrics.invalid,
        time.time() - start_time,
    )
    logger.info("[Experiment] Best phenotype: {}", best.best_phenotype)
    return best


def _ones(genotype: Genotype) -> int:
    return genotype.chromosome.bit_count()


if __name__ == "__main__":
    run_experiment(
        _ones,
        Genotype.of(BitChromosome.of(64, np.random.default_rng(0))),
        EngineConfig(population_size=100, seed=42),
        max_generations=200,
        steady_generations=30,
    )
