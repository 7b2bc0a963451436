"""Averaging of per-subsample bootstrap summaries into the BLB estimate.

Every subsample summary is already a consistent estimate of the same
population quantiles (the ``n``-sized resamples restore the full-data variance
scale), so the final estimate is their componentwise arithmetic mean.

Failure policy
--------------
``"abort"`` (default)
    Any failed subsample raises :class:`AggregationError`; nothing is averaged.
``"exclude"``
    Failed subsamples are dropped, logged at WARNING and listed in
    ``FinalEstimate.excluded_subsamples``. At least one subsample must remain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Hashable, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

from blb_quant.config.constants import DEFAULT_QUANTILES, FAILURE_POLICIES
from blb_quant.data.dataset import Subsample
from blb_quant.estimators.weighted import weighted_correlation
from blb_quant.utils.logging_config import get_logger
from blb_quant.utils.seed import task_seed_sequences

from .bootstrap import InsufficientDataError, SubsampleSummary, bootstrap_subsample

__all__ = [
    "AggregationError",
    "FinalEstimate",
    "aggregate_summaries",
    "run_subsamples",
]

logger = get_logger(__name__)

Failure = tuple[Hashable, BaseException]


class AggregationError(RuntimeError):
    """Raised when one or more subsamples fail and the estimate cannot be formed."""

    def __init__(self, failures: Sequence[Failure], message: str | None = None) -> None:
        self.failures = list(failures)
        if message is None:
            details = "; ".join(
                f"subsample {sid!r} failed: {type(exc).__name__}: {exc}"
                for sid, exc in self.failures
            )
            message = f"BLB estimate aborted ({len(self.failures)} failure(s)): {details}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class FinalEstimate:
    """Componentwise mean of the subsample summaries."""

    quantiles: Mapping[float, float]
    center: float
    std_error: float
    n_subsamples: int
    degraded_subsamples: tuple[Hashable, ...] = ()
    excluded_subsamples: tuple[Hashable, ...] = ()
    summaries: tuple[SubsampleSummary, ...] = field(default=(), repr=False)

    @property
    def lower(self) -> float:
        return self.quantiles[min(self.quantiles)]

    @property
    def upper(self) -> float:
        return self.quantiles[max(self.quantiles)]

    @property
    def interval(self) -> tuple[float, float]:
        return self.lower, self.upper

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def to_dict(self) -> dict[str, object]:
        return {
            "quantiles": {str(k): v for k, v in self.quantiles.items()},
            "lower": self.lower,
            "upper": self.upper,
            "center": self.center,
            "std_error": self.std_error,
            "n_subsamples": self.n_subsamples,
            "degraded_subsamples": list(self.degraded_subsamples),
            "excluded_subsamples": list(self.excluded_subsamples),
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per subsample summary, indexed by subsample id."""
        rows = []
        for summary in self.summaries:
            row = {f"q{prob:g}": value for prob, value in summary.quantiles.items()}
            row.update(
                center=summary.center,
                std_error=summary.std_error,
                n_rows=summary.n_rows,
                effective_replicates=summary.effective_replicates,
                degenerate_replicates=summary.degenerate_replicates,
            )
            rows.append(pd.Series(row, name=summary.subsample_id))
        frame = pd.DataFrame(rows)
        frame.index.name = "subsample_id"
        return frame


def _mean_ignoring_nan(values: Iterable[float]) -> float:
    array = np.asarray(list(values), dtype=float)
    finite = array[np.isfinite(array)]
    return float(finite.mean()) if finite.size else float("nan")


def aggregate_summaries(
    summaries: Sequence[SubsampleSummary],
    failures: Sequence[Failure] = (),
    *,
    on_failure: str = "abort",
) -> FinalEstimate:
    """Average ``summaries`` into a :class:`FinalEstimate`.

    Parameters
    ----------
    summaries:
        Successful subsample summaries, all sharing the same quantile set.
    failures:
        ``(subsample_id, exception)`` pairs for subsamples that failed.
    on_failure:
        ``"abort"`` raises :class:`AggregationError` when ``failures`` is not
        empty; ``"exclude"`` drops them visibly.
    """
    if on_failure not in FAILURE_POLICIES:
        raise ValueError(f"on_failure must be one of {', '.join(FAILURE_POLICIES)}")

    failures = list(failures)
    if failures:
        if on_failure == "abort":
            raise AggregationError(failures) from failures[0][1]
        for sid, exc in failures:
            logger.warning("Subsample %r excluded from the average: %s", sid, exc)

    if not summaries:
        raise AggregationError(failures, "No subsample summary available to average")

    keys = tuple(summaries[0].quantiles)
    for summary in summaries[1:]:
        if tuple(summary.quantiles) != keys:
            raise ValueError(
                f"Subsample {summary.subsample_id!r} reports quantiles "
                f"{tuple(summary.quantiles)}, expected {keys}"
            )

    quantiles = {
        prob: float(np.mean([summary.quantiles[prob] for summary in summaries]))
        for prob in keys
    }
    return FinalEstimate(
        quantiles=quantiles,
        center=float(np.mean([summary.center for summary in summaries])),
        std_error=_mean_ignoring_nan(summary.std_error for summary in summaries),
        n_subsamples=len(summaries),
        degraded_subsamples=tuple(s.subsample_id for s in summaries if s.degraded),
        excluded_subsamples=tuple(sid for sid, _ in failures),
        summaries=tuple(summaries),
    )


def run_subsamples(
    subsamples: Sequence[Subsample],
    *,
    n: int,
    r: int,
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    seed: int | None = None,
    statistic: Callable[[np.ndarray, np.ndarray, np.ndarray], float] = weighted_correlation,
    on_failure: str = "abort",
) -> FinalEstimate:
    """Bootstrap every subsample in turn and average the summaries.

    Each subsample gets its own generator spawned from ``seed`` in list
    order, which is the same stream the parallel orchestrator hands to its
    workers.
    """
    seeds = task_seed_sequences(seed, len(subsamples))
    summaries: list[SubsampleSummary] = []
    failures: list[Failure] = []
    for subsample, (_, boot_seq) in zip(subsamples, seeds):
        try:
            summaries.append(
                bootstrap_subsample(
                    subsample,
                    n=n,
                    r=r,
                    rng=np.random.default_rng(boot_seq),
                    quantiles=quantiles,
                    statistic=statistic,
                )
            )
        except InsufficientDataError as exc:
            failures.append((subsample.subsample_id, exc))
    return aggregate_summaries(summaries, failures, on_failure=on_failure)
