import numpy as np
import pytest

from gaevo.alteration import (
    Alterer,
    CompositeAlterer,
    Crossover,
    GaussianMutator,
    MeanAlterer,
    Mutator,
    Recombinator,
    ShiftMutator,
    SinglePointCrossover,
    SwapMutator,
)
from gaevo.alteration.mutators import shift
from gaevo.exceptions import ConfigurationError
from gaevo.genetics import (
    DoubleChromosome,
    DoubleGene,
    Genotype,
    IntegerChromosome,
    PermutationChromosome,
)
from gaevo.population import Phenotype, Population


def _fitness(gt):
    return 0.0


def _population(rng, size, chromosome_factory, chromosomes=1, generation=1):
    return Population(
        Phenotype(
            Genotype([chromosome_factory(rng) for _ in range(chromosomes)]),
            generation,
            _fitness,
        )
        for _ in range(size)
    )


def _double_population(rng, size, length=10, chromosomes=1, generation=1):
    return _population(
        rng,
        size,
        lambda r: DoubleChromosome.of(0.0, 1.0, length, r),
        chromosomes,
        generation,
    )


def _count_changed_genes(before: Population, after: Population) -> int:
    changed = 0
    for pt1, pt2 in zip(before, after):
        for ch1, ch2 in zip(pt1.genotype, pt2.genotype):
            changed += sum(g1 != g2 for g1, g2 in zip(ch1, ch2))
    return changed


class _CountingAlterer(Alterer):
    def __init__(self, result):
        super().__init__(1.0)
        self.result = result
        self.calls = []

    def alter(self, population, generation, rng):
        self.calls.append(generation)
        return self.result


@pytest.mark.parametrize("probability", [-0.1, 1.5])
def test_probability_is_validated(probability):
    with pytest.raises(ConfigurationError):
        Mutator(probability)
    with pytest.raises(ConfigurationError):
        Crossover(probability)


class _NoopRecombinator(Recombinator):
    def recombine(self, population, indexes, generation, rng):
        return 0


def test_recombination_order_is_validated():
    with pytest.raises(ConfigurationError):
        _NoopRecombinator(0.5, 1)
    assert _NoopRecombinator(0.5, 3).order == 3


def test_composite_alterer_flattens_and_sums(rng):
    a, b, c = _CountingAlterer(1), _CountingAlterer(2), _CountingAlterer(4)
    composite = CompositeAlterer(a, CompositeAlterer(b, c))

    assert composite.alterers == (a, b, c)
    assert composite.alter(Population(), 3, rng) == 7
    assert a.calls == b.calls == c.calls == [3]
    assert composite.append(a).alterers == (a, b, c, a)


@pytest.mark.parametrize("p", [0.01, 0.05, 0.2])
def test_mutator_gene_fraction_tracks_probability(p):
    rng = np.random.default_rng(1234)
    total = changed = 0
    for _ in range(20):
        population = _double_population(rng, 200, length=10, chromosomes=3)
        before = population.copy()
        count = Mutator(p).alter(population, 2, rng)

        assert count == _count_changed_genes(before, population)
        changed += count
        total += 200 * 3 * 10

    assert abs(changed / total - p) < max(0.2 * p, 0.003)


def test_mutator_replaces_altered_phenotypes_with_new_generation(rng):
    population = _double_population(rng, 50, generation=1)
    before = list(population)
    Mutator(1.0).alter(population, 5, rng)

    for old, new in zip(before, population):
        assert new is not old
        assert new.generation == 5
        assert len(new.genotype) == len(old.genotype)


def test_mutator_with_zero_probability_does_nothing(rng):
    population = _double_population(rng, 20)
    before = list(population)
    assert Mutator(0.0).alter(population, 2, rng) == 0
    assert list(population) == before


def test_swap_and_shift_mutators_keep_permutations_valid(rng):
    for mutator in (SwapMutator(0.5), ShiftMutator(0.5)):
        population = _population(
            rng, 40, lambda r: PermutationChromosome.of_integer(12, r)
        )
        assert mutator.alter(population, 2, rng) > 0
        assert all(pt.is_valid() for pt in population)


def test_shift_moves_section():
    genes = list("abcdefg")
    shift(genes, 1, 3, 6)
    assert "".join(genes) == "adefbcg"
    with pytest.raises(ValueError):
        shift(genes, 2, 2, 3)


def test_gaussian_mutator_stays_in_bounds(rng):
    population = _population(
        rng, 100, lambda r: IntegerChromosome.of(-5, 5, 8, r)
    )
    GaussianMutator(0.8).alter(population, 2, rng)
    assert all(pt.is_valid() for pt in population)

    doubles = _double_population(rng, 100)
    GaussianMutator(0.8).alter(doubles, 2, rng)
    assert all(0.0 <= g.value <= 1.0 for pt in doubles for g in pt.genotype[0])


def test_crossover_replaces_both_parents(rng):
    population = _double_population(rng, 2)
    first, second = list(population)
    crossover = Crossover(1.0, SinglePointCrossover())

    crossover.alter(population, 4, rng)

    assert population[0] is not first and population[1] is not second
    assert {pt.generation for pt in population} == {4}
    alleles_before = sorted(g.value for pt in (first, second) for g in pt.genotype[0])
    alleles_after = sorted(g.value for pt in population for g in pt.genotype[0])
    assert alleles_before == alleles_after


def test_crossover_on_single_individual_is_noop(rng):
    population = _double_population(rng, 1)
    assert Crossover(1.0).alter(population, 2, rng) == 0


def test_crossover_picks_chromosome_within_shorter_genotype(rng):
    short = Phenotype(Genotype.of(DoubleChromosome.of(0, 1, 4, rng)), 1, _fitness)
    long = Phenotype(
        Genotype.of(
            DoubleChromosome.of(0, 1, 4, rng), DoubleChromosome.of(0, 1, 4, rng)
        ),
        1,
        _fitness,
    )
    population = Population([short, long])
    for _ in range(20):
        Crossover(1.0).alter(population, 2, rng)
    assert len(population[0].genotype) == 1
    assert len(population[1].genotype) == 2
    assert population[1].genotype[1] == long.genotype[1]


def _doubles(*values):
    genes = [DoubleGene(v, 0, 10) for v in values]
    return Phenotype(Genotype.of(DoubleChromosome(genes)), 1, _fitness)


def test_mean_alterer_changes_only_first_individual():
    population = Population([_doubles(2.0, 4.0), _doubles(4.0, 8.0)])
    alterer = MeanAlterer(1.0)
    second = population[1]

    rng = np.random.default_rng(0)
    count = alterer.recombine(population, [0, 1], 3, rng)

    assert count == 1
    assert [g.value for g in population[0].genotype[0]] == [3.0, 6.0]
    assert population[0].generation == 3
    assert population[1] is second


def test_mean_alterer_logs_with_component_prefix(log_messages):
    population = Population([_doubles(2.0, 4.0), _doubles(4.0, 8.0)])
    MeanAlterer(1.0).recombine(population, [0, 1], 2, np.random.default_rng(0))
    assert "[MeanAlterer] Averaged individuals 0 and 1" in log_messages
