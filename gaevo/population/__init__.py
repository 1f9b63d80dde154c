from gaevo.population.optimize import Optimize
from gaevo.population.phenotype import (
    FitnessFunction,
    FitnessScaler,
    Phenotype,
    identity,
)
from gaevo.population.population import Population

__all__ = [
    "FitnessFunction",
    "FitnessScaler",
    "Optimize",
    "Phenotype",
    "Population",
    "identity",
]
