from __future__ import annotations

from collections.abc import MutableSequence
from functools import cmp_to_key
from typing import Callable, Iterable, overload

from numpy.random import Generator

from gaevo.population.optimize import Comparator, Optimize
from gaevo.population.phenotype import Phenotype
from gaevo.utils.concurrency import Concurrency

__all__ = ["Population"]


class Population(MutableSequence):
    """Ordered, mutable list of phenotypes.

    Not synchronized: concurrent mutation needs an external lock. Parallel
    code writes into private slot arrays and merges them afterwards.
    """

    def __init__(self, phenotypes: Iterable[Phenotype] = ()):
        self._items: list[Phenotype] = list(phenotypes)

    @overload
    def __getitem__(self, index: int) -> Phenotype: ...

    @overload
    def __getitem__(self, index: slice) -> "Population": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Population(self._items[index])
        return self._items[index]

    def __setitem__(self, index, value) -> None:
        self._items[index] = value

    def __delitem__(self, index) -> None:
        del self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def insert(self, index: int, value: Phenotype) -> None:
        self._items.insert(index, value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Population) and other._items == self._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Population(size={len(self._items)})"

    # ------------------------------------------------------------------

    def copy(self) -> "Population":
        """Shallow copy; phenotypes are shared."""
        return Population(self._items)

    def fill(
        self,
        factory: Callable[[int], Phenotype],
        count: int,
        concurrency: Concurrency | None = None,
    ) -> "Population":
        """Append *count* phenotypes created by ``factory(slot)``.

        *slot* runs from 0 to ``count - 1``. With a *concurrency* scope the
        factory calls run as parallel tasks, each writing its own slot.
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")

        slots: list[Phenotype | None] = [None] * count

        def create(slot: int) -> None:
            slots[slot] = factory(slot)

        if concurrency is None:
            for i in range(count):
                create(i)
        else:
            with concurrency:
                concurrency.execute_all([lambda i=i: create(i) for i in range(count)])

        self._items.extend(slots)  # type: ignore[arg-type]
        return self

    def sort_with(self, comparator: Comparator) -> "Population":
        """Stable in-place sort of the phenotypes with a ``cmp``-style function."""
        self._items.sort(key=cmp_to_key(comparator))
        return self

    def population_sort(self, optimize: Optimize = Optimize.MAXIMUM) -> "Population":
        """Sort in place from best to worst fitness."""
        self._items.sort(key=cmp_to_key(_by_fitness(optimize.descending())))
        return self

    def shuffle(self, rng: Generator) -> "Population":
        order = rng.permutation(len(self._items))
        self._items = [self._items[i] for i in order]
        return self

    def fitness_values(self) -> list:
        return [pt.fitness for pt in self._items]


def _by_fitness(comparator: Comparator) -> Comparator:
    return lambda a, b: comparator(a.fitness, b.fitness)
