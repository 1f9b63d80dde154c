from typing import Sequence

from loguru import logger
import numpy as np
import pytest

from gaevo.genetics import DoubleChromosome, DoubleGene, Genotype
from gaevo.population import Phenotype, Population

FITNESS_BOUND = 1e9


def first_gene(genotype: Genotype) -> float:
    return genotype.gene.value


def make_phenotype(fitness: float, generation: int = 1) -> Phenotype:
    """Phenotype whose fitness is the value of its single double gene."""
    gene = DoubleGene(float(fitness), -FITNESS_BOUND, FITNESS_BOUND)
    return Phenotype(Genotype.of(DoubleChromosome([gene])), generation, first_gene)


def make_population(values: Sequence[float], generation: int = 1) -> Population:
    return Population(make_phenotype(v, generation) for v in values)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def population_factory():
    return make_population


@pytest.fixture
def log_messages():
    """Messages logged at DEBUG and above while the test runs."""
    messages: list[str] = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)
