from __future__ import annotations

from enum import Enum
from typing import Any, Callable

Comparator = Callable[[Any, Any], int]


class Optimize(Enum):
    """Optimization direction of a run."""

    MINIMUM = "minimum"
    MAXIMUM = "maximum"

    def compare(self, a: Any, b: Any) -> int:
        """Positive if *a* is better than *b*, negative if worse, 0 if equal."""
        cmp = (a > b) - (a < b)
        return cmp if self is Optimize.MAXIMUM else -cmp

    def descending(self) -> Comparator:
        """Comparator ordering fitness values from best to worst."""
        return lambda a, b: self.compare(b, a)

    def ascending(self) -> Comparator:
        """Comparator ordering fitness values from worst to best."""
        return self.compare

    def best(self, a: Any, b: Any) -> Any:
        """The better of two values; ``None`` counts as missing."""
        if a is None:
            return b
        if b is None:
            return a
        return b if self.compare(b, a) > 0 else a

    def worst(self, a: Any, b: Any) -> Any:
        if a is None:
            return b
        if b is None:
            return a
        return b if self.compare(b, a) < 0 else a
