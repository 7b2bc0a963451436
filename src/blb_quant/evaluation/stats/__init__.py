"""Bootstrap replication and BLB aggregation."""

from .aggregate import AggregationError, FinalEstimate, aggregate_summaries, run_subsamples
from .bootstrap import (
    InsufficientDataError,
    ReplicateBatch,
    SubsampleSummary,
    bootstrap_subsample,
    quantile_summary,
    replicate_statistics,
)

__all__ = [
    "AggregationError",
    "FinalEstimate",
    "aggregate_summaries",
    "run_subsamples",
    "InsufficientDataError",
    "ReplicateBatch",
    "SubsampleSummary",
    "bootstrap_subsample",
    "quantile_summary",
    "replicate_statistics",
]
