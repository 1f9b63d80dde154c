from __future__ import annotations

from gaevo.genetics.chromosome import (
    BitChromosome,
    Chromosome,
    DoubleChromosome,
    IntegerChromosome,
    PermutationChromosome,
)
from gaevo.genetics.gene import (
    BitGene,
    DoubleGene,
    EnumGene,
    Gene,
    IntegerGene,
    NumericGene,
)
from gaevo.genetics.genotype import Genotype, GenotypeFactory
