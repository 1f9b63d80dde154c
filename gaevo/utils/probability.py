"""Helpers for turning probability vectors into reproducible samples."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

__all__ = [
    "MAX_ULP_DISTANCE",
    "SERIAL_INDEX_THRESHOLD",
    "check_and_correct",
    "eq",
    "incremental",
    "index_of",
    "index_of_binary",
    "index_of_serial",
    "revert",
    "sort_and_revert",
    "sum2one",
    "ulp_distance",
]

# Arrays up to this length are scanned linearly.
SERIAL_INDEX_THRESHOLD = 35

MAX_ULP_DISTANCE = 10**10

_MAGNITUDE_MASK = 0x7FFFFFFFFFFFFFFF


def _ordered_bits(value: float) -> int:
    bits = int(np.array([value], dtype=np.float64).view(np.int64)[0])
    return bits if bits >= 0 else -(bits & _MAGNITUDE_MASK)


def ulp_distance(a: float, b: float) -> int:
    """Number of representable doubles between *a* and *b*."""
    return abs(_ordered_bits(a) - _ordered_bits(b))


def eq(a: float, b: float) -> bool:
    return ulp_distance(a, b) < MAX_ULP_DISTANCE


def sum2one(probabilities: Sequence[float]) -> bool:
    """True if *probabilities* sum to one within the ULP tolerance."""
    total = math.fsum(probabilities) if len(probabilities) > 0 else 1.0
    return eq(total, 1.0)


def check_and_correct(probabilities: np.ndarray) -> np.ndarray:
    """Replace the whole vector by a uniform one if any entry is not finite."""
    if len(probabilities) > 0 and not np.all(np.isfinite(probabilities)):
        probabilities[:] = 1.0 / len(probabilities)
    return probabilities


def incremental(probabilities: np.ndarray) -> np.ndarray:
    """Cumulative sums of *probabilities*, last entry pinned to exactly 1.0."""
    cumulative = np.minimum(np.cumsum(probabilities, dtype=np.float64), 1.0)
    if len(cumulative) > 0:
        cumulative[-1] = 1.0
    return cumulative


def index_of_serial(incr: Sequence[float], v: float) -> int:
    for i, value in enumerate(incr):
        if value >= v:
            return i
    raise ArithmeticError(f"No cumulative probability >= {v}")


def index_of_binary(incr: Sequence[float], v: float) -> int:
    """Smallest index ``i`` with ``incr[i] >= v``.

    *incr* must be sorted ascending. Raises :class:`ArithmeticError` if every
    entry is smaller than *v*.
    """
    lo, hi = 0, len(incr)
    while lo < hi:
        mid = (lo + hi) // 2
        if incr[mid] < v:
            lo = mid + 1
        else:
            hi = mid

    if lo == len(incr):
        raise ArithmeticError(f"No cumulative probability >= {v}")
    return lo


def index_of(incr: Sequence[float], v: float) -> int:
    if len(incr) <= SERIAL_INDEX_THRESHOLD:
        return index_of_serial(incr, v)
    return index_of_binary(incr, v)


def revert(probabilities: np.ndarray) -> np.ndarray:
    return probabilities[::-1].copy()


def sort_and_revert(probabilities: np.ndarray) -> np.ndarray:
    """Give the ``i``-th smallest value's slot the ``i``-th largest value.

    Used to invert probabilities computed for maximization when minimizing.
    Unlike ``1 - p`` this keeps the vector summing to one.
    """
    indexes = np.argsort(probabilities, kind="stable")
    result = np.empty_like(probabilities)
    result[indexes[::-1]] = probabilities[indexes]
    return result
