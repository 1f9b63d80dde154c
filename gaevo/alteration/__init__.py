from gaevo.alteration.base import Alterer, CompositeAlterer
from gaevo.alteration.crossover_strategies import (
    CrossoverStrategy,
    IntermediateCrossover,
    LineCrossover,
    MultiPointCrossover,
    PartiallyMatchedCrossover,
    SinglePointCrossover,
    UniformCrossover,
)
from gaevo.alteration.mutators import (
    GaussianMutator,
    Mutator,
    ShiftMutator,
    SwapMutator,
)
from gaevo.alteration.recombinator import Crossover, MeanAlterer, Recombinator

__all__ = [
    "Alterer",
    "CompositeAlterer",
    "Crossover",
    "CrossoverStrategy",
    "GaussianMutator",
    "IntermediateCrossover",
    "LineCrossover",
    "MeanAlterer",
    "MultiPointCrossover",
    "Mutator",
    "PartiallyMatchedCrossover",
    "Recombinator",
    "ShiftMutator",
    "SinglePointCrossover",
    "SwapMutator",
    "UniformCrossover",
]
