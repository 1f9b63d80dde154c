"""Phenotype: a genotype bound to its birth generation and a cached fitness."""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, TypeVar

from gaevo.genetics.genotype import Genotype

__all__ = ["FitnessFunction", "FitnessScaler", "Phenotype", "identity"]

T = TypeVar("T")

FitnessFunction = Callable[[Genotype], Any]
FitnessScaler = Callable[[Any], Any]


def identity(value: Any) -> Any:
    return value


class _ComputeOnce(Generic[T]):
    """Single-assignment cell.

    The first caller computes the value; concurrent callers block on the lock
    until it is set. A failed computation leaves the cell empty.
    """

    __slots__ = ("_lock", "_value", "_done")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T | None = None
        self._done = False

    @property
    def is_set(self) -> bool:
        return self._done

    def get(self, compute: Callable[[], T]) -> T:
        if self._done:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._done:
                self._value = compute()
                self._done = True
        return self._value  # type: ignore[return-value]


class Phenotype:
    """Immutable apart from the two fitness cells, each filled at most once."""

    def __init__(
        self,
        genotype: Genotype,
        generation: int,
        fitness_function: FitnessFunction,
        fitness_scaler: FitnessScaler = identity,
    ):
        if generation < 0:
            raise ValueError(f"generation must be >= 0, got {generation}")
        self._genotype = genotype
        self._generation = generation
        self._fitness_function = fitness_function
        self._fitness_scaler = fitness_scaler

        self._raw_fitness: _ComputeOnce[Any] = _ComputeOnce()
        self._fitness: _ComputeOnce[Any] = _ComputeOnce()

    @classmethod
    def of(
        cls,
        genotype: Genotype,
        generation: int,
        fitness_function: FitnessFunction,
        fitness_scaler: FitnessScaler = identity,
    ) -> "Phenotype":
        return cls(genotype, generation, fitness_function, fitness_scaler)

    @property
    def genotype(self) -> Genotype:
        return self._genotype

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def fitness_function(self) -> FitnessFunction:
        return self._fitness_function

    @property
    def fitness_scaler(self) -> FitnessScaler:
        return self._fitness_scaler

    @property
    def raw_fitness(self) -> Any:
        return self._raw_fitness.get(lambda: self._fitness_function(self._genotype))

    @property
    def fitness(self) -> Any:
        """Scaled fitness; computes the raw fitness first if necessary."""
        return self._fitness.get(lambda: self._fitness_scaler(self.raw_fitness))

    @property
    def is_evaluated(self) -> bool:
        return self._fitness.is_set

    def evaluate(self) -> "Phenotype":
        """Fill both fitness cells. Safe to call repeatedly and concurrently."""
        self.fitness
        return self

    def age(self, current_generation: int) -> int:
        return current_generation - self._generation

    def is_valid(self) -> bool:
        return self._genotype.is_valid()

    def new_instance(self, genotype: Genotype, generation: int) -> "Phenotype":
        """Phenotype with the same fitness function and scaler, not yet evaluated."""
        return Phenotype(
            genotype, generation, self._fitness_function, self._fitness_scaler
        )

    def with_fitness_scaler(self, fitness_scaler: FitnessScaler) -> "Phenotype":
        return Phenotype(
            self._genotype, self._generation, self._fitness_function, fitness_scaler
        )

    def __str__(self) -> str:
        fitness = self.fitness if self.is_evaluated else "?"
        return f"{self._genotype} --> {fitness}"

    def __repr__(self) -> str:
        return f"Phenotype(generation={self._generation}, genotype={self._genotype!r})"
