from gaevo.selection.base import Selector
from gaevo.selection.probability_selectors import (
    BoltzmannSelector,
    ExponentialRankSelector,
    LinearRankSelector,
    ProbabilitySelector,
    RouletteWheelSelector,
    StochasticUniversalSelector,
)
from gaevo.selection.selectors import (
    MonteCarloSelector,
    TournamentSelector,
    TruncationSelector,
)

__all__ = [
    "BoltzmannSelector",
    "ExponentialRankSelector",
    "LinearRankSelector",
    "MonteCarloSelector",
    "ProbabilitySelector",
    "RouletteWheelSelector",
    "Selector",
    "StochasticUniversalSelector",
    "TournamentSelector",
    "TruncationSelector",
]
