from concurrent.futures import ThreadPoolExecutor
import threading
import time

import numpy as np
import pytest

from gaevo.genetics import Genotype, IntegerChromosome
from gaevo.population import Optimize, Phenotype, Population
from gaevo.utils.concurrency import Concurrency

from tests.conftest import make_phenotype, make_population


def test_optimize_compare():
    assert Optimize.MAXIMUM.compare(2, 1) > 0
    assert Optimize.MINIMUM.compare(2, 1) < 0
    assert Optimize.MAXIMUM.compare(3, 3) == 0


def test_optimize_best_and_worst():
    assert Optimize.MAXIMUM.best(1, 5) == 5
    assert Optimize.MINIMUM.best(1, 5) == 1
    assert Optimize.MAXIMUM.worst(1, 5) == 1
    assert Optimize.MINIMUM.best(None, 4) == 4
    assert Optimize.MINIMUM.worst(4, None) == 4


def test_fitness_is_computed_once():
    calls = []

    def fitness(gt):
        calls.append(gt)
        return gt.gene.value

    gt = Genotype.of(IntegerChromosome.of(0, 9, 1, np.random.default_rng(0)))
    pt = Phenotype(gt, 1, fitness, lambda f: f * 10)

    assert not pt.is_evaluated
    assert pt.evaluate() is pt
    assert pt.fitness == pt.raw_fitness * 10
    pt.evaluate()
    assert len(calls) == 1


def test_concurrent_evaluation_computes_once():
    calls = []
    lock = threading.Lock()

    def slow_fitness(gt):
        with lock:
            calls.append(1)
        time.sleep(0.05)
        return 1.0

    pt = make_phenotype(0.0)
    pt = Phenotype(pt.genotype, 1, slow_fitness)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: pt.fitness, range(8)))

    assert results == [1.0] * 8
    assert len(calls) == 1


def test_failed_fitness_leaves_cell_empty():
    attempts = []

    def flaky(gt):
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("boom")
        return 2.0

    pt = Phenotype(make_phenotype(0.0).genotype, 1, flaky)
    with pytest.raises(RuntimeError):
        pt.evaluate()
    assert pt.fitness == 2.0


def test_phenotype_age_and_new_instance():
    pt = make_phenotype(3.0, generation=2)
    assert pt.age(7) == 5
    with pytest.raises(ValueError):
        make_phenotype(1.0, generation=-1)

    child = pt.new_instance(pt.genotype, 7)
    assert child.generation == 7
    assert child.fitness_function is pt.fitness_function
    assert not child.is_evaluated


def test_population_sort_and_copy():
    population = make_population([3, 1, 4, 2])
    copy = population.copy()

    population.population_sort(Optimize.MAXIMUM)
    assert population.fitness_values() == [4, 3, 2, 1]
    assert copy.fitness_values() == [3, 1, 4, 2]

    population.population_sort(Optimize.MINIMUM)
    assert population.fitness_values() == [1, 2, 3, 4]

    population.reverse()
    assert population.fitness_values() == [4, 3, 2, 1]


def test_population_sort_with_comparator():
    population = make_population([5, -7, 2])
    population.sort_with(lambda a, b: abs(a.fitness) - abs(b.fitness))
    assert population.fitness_values() == [2, 5, -7]


def test_population_slicing_returns_population():
    population = make_population([1, 2, 3])
    head = population[:2]
    assert isinstance(head, Population)
    assert head.fitness_values() == [1, 2]


@pytest.mark.parametrize("parallel", [False, True])
def test_population_fill_writes_each_slot(parallel):
    population = make_population([0])
    if parallel:
        with ThreadPoolExecutor(max_workers=4) as pool:
            population.fill(
                lambda slot: make_phenotype(slot + 1), 20, Concurrency(pool)
            )
    else:
        population.fill(lambda slot: make_phenotype(slot + 1), 20)

    assert len(population) == 21
    assert population.fitness_values() == list(range(21))


def test_population_shuffle_is_a_permutation(rng):
    population = make_population(range(30))
    population.shuffle(rng)
    assert sorted(population.fitness_values()) == list(range(30))
