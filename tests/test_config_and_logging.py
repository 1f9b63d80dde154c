from pathlib import Path

from loguru import logger
import numpy as np
from pydantic import ValidationError
import pytest

from gaevo.alteration import CompositeAlterer, Crossover, Mutator
from gaevo.engine import EngineConfig
from gaevo.exceptions import ConfigurationError, GaEvoError
from gaevo.genetics import BitChromosome, Genotype
from gaevo.population import Optimize, identity
from gaevo.run import run_experiment
from gaevo.selection import TournamentSelector
from gaevo.utils.logger_setup import setup_logger


def test_engine_config_defaults():
    config = EngineConfig()
    assert config.population_size == 50
    assert config.offspring_fraction == 0.6
    assert config.maximal_phenotype_age == 70
    assert config.optimize is Optimize.MAXIMUM
    assert config.max_workers is None
    assert config.fitness_scaler is identity
    assert isinstance(config.survivor_selector, TournamentSelector)
    assert config.survivor_selector.sample_size == 3
    assert config.survivor_selector is not config.offspring_selector

    alterers = config.alterer.alterers
    assert isinstance(config.alterer, CompositeAlterer)
    assert isinstance(alterers[0], Crossover) and alterers[0].probability == 0.1
    assert isinstance(alterers[1], Mutator) and alterers[1].probability == 0.05
    assert config.offspring_count == 30
    assert config.survivor_count == 20


@pytest.mark.parametrize(
    "kwargs",
    [
        {"population_size": 0},
        {"offspring_fraction": -0.1},
        {"offspring_fraction": 1.1},
        {"maximal_phenotype_age": 0},
        {"max_workers": 0},
        {"survivor_selector": "tournament"},
        {"log_interval": 0},
    ],
)
def test_engine_config_validation(kwargs):
    with pytest.raises(ValidationError):
        EngineConfig(**kwargs)


def test_configuration_errors_are_value_errors():
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(ConfigurationError, GaEvoError)


def test_setup_logger_writes_file(tmp_path):
    log_file = setup_logger(log_dir=str(tmp_path), level="DEBUG", enable_colors=False)
    try:
        logger.info("[Test] hello {}", "world")
    finally:
        logger.remove()

    path = Path(log_file)
    assert path.parent == tmp_path
    assert path.name.startswith("evolution_")
    assert "[Test] hello world" in path.read_text(encoding="utf-8")


def test_run_experiment_writes_run_log(tmp_path):
    def ones(genotype):
        return genotype.chromosome.bit_count()

    template = Genotype.of(BitChromosome.of(16, np.random.default_rng(0)))
    try:
        best = run_experiment(
            ones,
            template,
            EngineConfig(population_size=10, seed=5),
            max_generations=5,
            log_dir=str(tmp_path),
            log_level="DEBUG",
        )
    finally:
        logger.remove()

    assert 0 <= best.best_fitness <= 16
    (log_file,) = tmp_path.glob("experiment_*.log")
    text = log_file.read_text(encoding="utf-8")
    assert "[EvolutionEngine] Setup" in text
    assert "[Experiment] Done | generations=5" in text


def test_run_experiment_stops_on_steady_fitness(tmp_path):
    template = Genotype.of(BitChromosome.of(8, np.random.default_rng(0)))
    try:
        run_experiment(
            lambda genotype: 0,
            template,
            EngineConfig(population_size=6, seed=1),
            max_generations=100,
            steady_generations=3,
            log_dir=str(tmp_path),
        )
    finally:
        logger.remove()

    (log_file,) = tmp_path.glob("experiment_*.log")
    assert "[Experiment] Done | generations=4," in log_file.read_text(encoding="utf-8")
