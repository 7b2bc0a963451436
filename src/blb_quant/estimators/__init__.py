"""Weighted estimators and the multinomial resampler."""

from .resampling import iter_weight_vectors, multinomial_weights
from .weighted import (
    STATISTICS,
    DegenerateVarianceError,
    WeightedMoments,
    complete_cases,
    drop_incomplete,
    expand_rows,
    get_statistic,
    weighted_correlation,
    weighted_mean,
)

__all__ = [
    "DegenerateVarianceError",
    "WeightedMoments",
    "complete_cases",
    "drop_incomplete",
    "expand_rows",
    "get_statistic",
    "STATISTICS",
    "weighted_correlation",
    "weighted_mean",
    "multinomial_weights",
    "iter_weight_vectors",
]
