"""Evaluation layer: bootstrap summaries and their aggregation."""

from .stats import (
    AggregationError,
    FinalEstimate,
    InsufficientDataError,
    SubsampleSummary,
    aggregate_summaries,
    bootstrap_subsample,
    run_subsamples,
)

__all__ = [
    "AggregationError",
    "FinalEstimate",
    "InsufficientDataError",
    "SubsampleSummary",
    "aggregate_summaries",
    "bootstrap_subsample",
    "run_subsamples",
]
