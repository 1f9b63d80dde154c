from __future__ import annotations

import threading
import time
from typing import Any, Callable, Iterable

from loguru import logger
from numpy.random import Generator

from gaevo.alteration.base import Alterer
from gaevo.engine.config import EngineConfig
from gaevo.engine.metrics import EngineMetrics, EvolutionDurations
from gaevo.engine.statistics import Statistics, compute_statistics
from gaevo.exceptions import ConfigurationError, EngineStateError
from gaevo.genetics.genotype import Genotype, GenotypeFactory
from gaevo.population.phenotype import FitnessFunction, FitnessScaler, Phenotype
from gaevo.population.population import Population
from gaevo.selection.base import Selector
from gaevo.utils.concurrency import Concurrency, create_executor
from gaevo.utils.rng import RandomSource

__all__ = ["EvolutionEngine"]


class EvolutionEngine:
    """
    Generational loop:
    - setup() creates and evaluates the first population (generation 1).
    - evolve() selects survivors and offspring, alters the offspring,
      replaces too old or invalid survivors, evaluates and summarizes.
    - All engine state is mutated only while holding ``lock``.
    """

    def __init__(
        self,
        fitness_function: FitnessFunction,
        genotype_factory: GenotypeFactory | Genotype,
        config: EngineConfig | None = None,
    ):
        if isinstance(genotype_factory, Genotype):
            genotype_factory = genotype_factory.factory()

        self.fitness_function = fitness_function
        self.genotype_factory = genotype_factory
        # Setters mutate this copy only.
        self.config = config.model_copy() if config is not None else EngineConfig()

        self.lock = threading.RLock()
        self.metrics = EngineMetrics()

        self._random = RandomSource(self.config.seed)
        self._executor = create_executor(self.config.max_workers)

        self._population: Population | None = None
        self._generation = 0
        self._statistics: Statistics | None = None
        self._best_statistics: Statistics | None = None

        logger.info(
            "[EvolutionEngine] Init | population_size={}, offspring_fraction={}, "
            "optimize={}, alterer={}, workers={}",
            self.config.population_size,
            self.config.offspring_fraction,
            self.config.optimize.value,
            self.config.alterer,
            self.config.max_workers or 1,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._population is not None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def population(self) -> Population:
        """Copy of the current population."""
        with self.lock:
            self._require_setup("population")
            return self._population.copy()

    @property
    def statistics(self) -> Statistics | None:
        return self._statistics

    @property
    def best_statistics(self) -> Statistics | None:
        return self._best_statistics

    @property
    def best_phenotype(self) -> Phenotype | None:
        best = self._best_statistics
        return best.best_phenotype if best is not None else None

    # ------------------------------------------------------------------
    # Configuration setters (applied from the next generation on)
    # ------------------------------------------------------------------

    def set_survivor_selector(self, selector: Selector) -> None:
        with self.lock:
            self.config.survivor_selector = selector

    def set_offspring_selector(self, selector: Selector) -> None:
        with self.lock:
            self.config.offspring_selector = selector

    def set_selectors(self, selector: Selector) -> None:
        with self.lock:
            self.config.survivor_selector = selector
            self.config.offspring_selector = selector

    def set_alterer(self, alterer: Alterer) -> None:
        with self.lock:
            self.config.alterer = alterer

    def set_fitness_scaler(self, scaler: FitnessScaler) -> None:
        """Scaler for phenotypes created from now on."""
        with self.lock:
            self.config.fitness_scaler = scaler

    def set_population_size(self, size: int) -> None:
        with self.lock:
            self.config.population_size = size

    def set_offspring_fraction(self, fraction: float) -> None:
        with self.lock:
            self.config.offspring_fraction = fraction

    def set_maximal_phenotype_age(self, age: int) -> None:
        with self.lock:
            self.config.maximal_phenotype_age = age

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup(self, genotypes: Iterable[Genotype] | None = None) -> Statistics:
        """Create and evaluate the initial population.

        Caller supplied *genotypes* are padded with random ones up to the
        population size. May only be called once.
        """
        with self.lock:
            if self._population is not None:
                raise EngineStateError(
                    "setup() was already called; call evolve() to continue"
                )

            start = time.perf_counter()
            generation = 1
            size = self.config.population_size

            population = Population(
                self._phenotype(gt, generation) for gt in (genotypes or ())
            )
            if len(population) > size:
                raise ConfigurationError(
                    f"got {len(population)} genotypes for population_size {size}"
                )

            missing = size - len(population)
            rngs = self._random.spawn(missing)
            population.fill(
                lambda slot: self._random_phenotype(generation, rngs[slot]),
                missing,
                Concurrency.start(self._executor),
            )

            evaluation_start = time.perf_counter()
            self._evaluate(population)
            evaluation = time.perf_counter() - evaluation_start

            statistics_start = time.perf_counter()
            statistics = compute_statistics(
                population, generation, self.config.optimize
            )
            end = time.perf_counter()
            durations = EvolutionDurations(
                evaluation=evaluation,
                statistics=end - statistics_start,
                evolve=end - start,
            )
            statistics = statistics.model_copy(update={"durations": durations})

            self._population = population
            self._generation = generation
            self._statistics = self._best_statistics = statistics
            self.metrics.record_setup(missing)

            logger.info(
                "[EvolutionEngine] Setup | size={}, supplied={}, best={}, took {:.3f}s",
                size,
                size - missing,
                statistics.best_fitness,
                durations.evolve,
            )
            return statistics

    def evolve(self) -> Statistics:
        """Run one generation and return its statistics."""
        with self.lock:
            self._require_setup("evolve()")

            start = time.perf_counter()
            generation = self._generation + 1
            config = self.config
            population = self._population

            survivor_rng, offspring_rng, alter_rng, filter_rng = self._random.spawn(4)

            # Selection: survivors in a task, offspring in this thread.
            with Concurrency.start(self._executor) as concurrency:
                survivors_future = concurrency.submit(
                    _timed,
                    config.survivor_selector.select,
                    population,
                    config.survivor_count,
                    config.optimize,
                    survivor_rng,
                )
                offspring, offspring_selection = _timed(
                    config.offspring_selector.select,
                    population,
                    config.offspring_count,
                    config.optimize,
                    offspring_rng,
                )
            survivors, survivor_selection = survivors_future.result()

            alter_start = time.perf_counter()
            alterations = config.alterer.alter(offspring, generation, alter_rng)
            offspring_alter = time.perf_counter() - alter_start

            # Survivor replacement and offspring evaluation in parallel; each
            # side writes only its own population.
            evaluation_start = time.perf_counter()
            with Concurrency.start(self._executor) as concurrency:
                filter_future = concurrency.submit(
                    self._filter_survivors, survivors, generation, filter_rng
                )
                concurrency.execute_all([pt.evaluate for pt in offspring])
            killed, invalid = filter_future.result()
            evaluation = time.perf_counter() - evaluation_start

            next_population = Population([*survivors, *offspring])

            statistics_start = time.perf_counter()
            statistics = compute_statistics(
                next_population,
                generation,
                config.optimize,
                killed=killed,
                invalid=invalid,
                alterations=alterations,
            )
            end = time.perf_counter()
            durations = EvolutionDurations(
                offspring_selection=offspring_selection,
                survivor_selection=survivor_selection,
                offspring_alter=offspring_alter,
                evaluation=evaluation,
                statistics=end - statistics_start,
                evolve=end - start,
            )
            statistics = statistics.model_copy(update={"durations": durations})

            improved = self._update_best(statistics)
            self._population = next_population
            self._generation = generation
            self._statistics = statistics
            self.metrics.record_generation(
                alterations, killed, invalid, durations, improved
            )
            self._log_generation(statistics, improved)
            return statistics

    def evolve_n(self, generations: int) -> Statistics:
        """Run *generations* generations; return the best statistics so far."""
        if generations < 0:
            raise ValueError(f"generations must be >= 0, got {generations}")
        with self.lock:
            for _ in range(generations):
                self.evolve()
            return self._checked_best()

    def evolve_while(self, predicate: Callable[[Statistics], bool]) -> Statistics:
        """Call evolve() while *predicate* holds for the latest statistics.

        The predicate is first evaluated against the setup statistics.
        Returns the best statistics seen.
        """
        with self.lock:
            self._require_setup("evolve_while()")
            while predicate(self._statistics):
                self.evolve()
            return self._checked_best()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            logger.debug("[EvolutionEngine] Executor shut down")

    def __enter__(self) -> "EvolutionEngine":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_setup(self, operation: str) -> None:
        if self._population is None:
            raise EngineStateError(
                f"{operation} requires an initialized engine; call setup() first"
            )

    def _checked_best(self) -> Statistics:
        assert self._best_statistics is not None
        return self._best_statistics

    def _phenotype(self, genotype: Genotype, generation: int) -> Phenotype:
        return Phenotype(
            genotype, generation, self.fitness_function, self.config.fitness_scaler
        )

    def _random_phenotype(self, generation: int, rng: Generator) -> Phenotype:
        return self._phenotype(self.genotype_factory(rng), generation)

    def _evaluate(self, population: Population) -> None:
        with Concurrency.start(self._executor) as concurrency:
            concurrency.execute_all([pt.evaluate for pt in population])

    def _filter_survivors(
        self, survivors: Population, generation: int, rng: Generator
    ) -> tuple[int, int]:
        """Replace too old (killed) or invalid survivors with evaluated randoms."""
        max_age = self.config.maximal_phenotype_age
        killed = invalid = 0
        for i, pt in enumerate(survivors):
            if pt.age(generation) > max_age:
                killed += 1
            elif not pt.is_valid():
                invalid += 1
            else:
                continue
            survivors[i] = self._random_phenotype(generation, rng).evaluate()
        return killed, invalid

    def _update_best(self, statistics: Statistics) -> bool:
        best = self._best_statistics
        if best is None or (
            statistics.best_phenotype is not None
            and self.config.optimize.compare(
                statistics.best_fitness, best.best_fitness
            )
            > 0
        ):
            self._best_statistics = statistics
            return best is not None
        return False

    def _log_generation(self, statistics: Statistics, improved: bool) -> None:
        if improved:
            logger.info(
                "[EvolutionEngine] Gen {} | new best fitness {}",
                statistics.generation,
                statistics.best_fitness,
            )
        if statistics.killed or statistics.invalid:
            logger.debug(
                "[EvolutionEngine] Gen {} | replaced killed={}, invalid={}",
                statistics.generation,
                statistics.killed,
                statistics.invalid,
            )

        level = (
            "INFO" if statistics.generation % self.config.log_interval == 0 else "DEBUG"
        )
        logger.log(
            level,
            "[EvolutionEngine] Gen {} | best={}, mean={:.6g}, alterations={}, took {:.3f}s",
            statistics.generation,
            statistics.best_fitness,
            statistics.fitness_mean,
            statistics.alterations,
            statistics.durations.evolve,
        )


def _timed(fn: Callable[..., Any], *args: Any) -> tuple[Any, float]:
    start = time.perf_counter()
    result = fn(*args)
    return result, time.perf_counter() - start
