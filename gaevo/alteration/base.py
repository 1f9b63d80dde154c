from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from numpy.random import Generator

from gaevo.exceptions import ConfigurationError
from gaevo.population.population import Population

__all__ = ["Alterer", "CompositeAlterer", "check_probability"]


def check_probability(p: float, name: str = "probability") -> float:
    if not 0.0 <= p <= 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1], got {p}")
    return float(p)


class Alterer(ABC):
    """Alter a population in place.

    Altered entries are replaced by new phenotypes carrying the altered
    genotype and the given birth generation. Entries not picked by the
    alterer's own index stream stay untouched.
    """

    def __init__(self, probability: float):
        self.probability = check_probability(probability)

    @abstractmethod
    def alter(self, population: Population, generation: int, rng: Generator) -> int:
        """Alter *population* and return the number of altered genes."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(p={self.probability:g})"


class CompositeAlterer(Alterer):
    """Chain of alterers applied in order. Nested composites are flattened."""

    def __init__(self, *alterers: Alterer):
        super().__init__(1.0)
        self._alterers: tuple[Alterer, ...] = tuple(_flatten(alterers))

    @classmethod
    def of(cls, *alterers: Alterer) -> "CompositeAlterer":
        return cls(*alterers)

    @property
    def alterers(self) -> tuple[Alterer, ...]:
        return self._alterers

    def append(self, alterer: Alterer) -> "CompositeAlterer":
        return CompositeAlterer(self, alterer)

    def alter(self, population: Population, generation: int, rng: Generator) -> int:
        return sum(a.alter(population, generation, rng) for a in self._alterers)

    def __repr__(self) -> str:
        return f"CompositeAlterer({', '.join(repr(a) for a in self._alterers)})"


def _flatten(alterers: Iterable[Alterer]) -> list[Alterer]:
    flat: list[Alterer] = []
    for alterer in alterers:
        if isinstance(alterer, CompositeAlterer):
            flat.extend(alterer.alterers)
        else:
            flat.append(alterer)
    return flat
