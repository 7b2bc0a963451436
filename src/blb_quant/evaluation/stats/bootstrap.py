"""Bootstrap replication over one subsample.

Each replicate draws a fresh multinomial weight vector of length ``b`` summing
to ``n`` and evaluates a weighted statistic on the subsample. The ``r``
replicate values are then reduced to the requested quantiles.

Quantiles use linear interpolation between order statistics (numpy
``method="linear"``, Hyndman & Fan type 7): for sorted values ``v`` and
probability ``q`` the position is ``h = (r - 1) * q`` and the result is
``v[floor(h)] + (h - floor(h)) * (v[floor(h) + 1] - v[floor(h)])``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable, Mapping, Sequence

import numpy as np

from blb_quant.config.constants import DEFAULT_QUANTILES, QUANTILE_METHOD
from blb_quant.data.dataset import Subsample
from blb_quant.estimators.resampling import iter_weight_vectors
from blb_quant.estimators.weighted import (
    DegenerateVarianceError,
    drop_incomplete,
    weighted_correlation,
)
from blb_quant.utils.logging_config import get_logger

__all__ = [
    "InsufficientDataError",
    "SubsampleSummary",
    "ReplicateBatch",
    "replicate_statistics",
    "quantile_summary",
    "bootstrap_subsample",
]

logger = get_logger(__name__)

StatisticFn = Callable[[np.ndarray, np.ndarray, np.ndarray], float]


class InsufficientDataError(ValueError):
    """Raised when a subsample yields no usable bootstrap replicate."""

    def __init__(self, subsample_id: Hashable, reason: str) -> None:
        super().__init__(f"subsample {subsample_id!r}: {reason}")
        self.subsample_id = subsample_id
        self.reason = reason

    def __reduce__(self):
        # Rebuilt from both fields when crossing a process pool.
        return type(self), (self.subsample_id, self.reason)


def _quantile(array: np.ndarray, q: float) -> float:
    return float(np.quantile(array, q, method=QUANTILE_METHOD))


def _check_quantiles(quantiles: Sequence[float]) -> tuple[float, ...]:
    probs = tuple(float(q) for q in quantiles)
    if not probs:
        raise ValueError("quantiles must not be empty")
    for prob in probs:
        if not 0.0 <= prob <= 1.0:
            raise ValueError(f"quantile {prob} outside [0, 1]")
    return probs


def quantile_summary(values: Sequence[float] | np.ndarray, quantiles: Sequence[float]) -> dict[float, float]:
    """Map each probability in ``quantiles`` to its linearly interpolated quantile."""
    array = np.asarray(values, dtype=float)
    if array.size == 0:
        raise ValueError("No values to summarise")
    return {prob: _quantile(array, prob) for prob in _check_quantiles(quantiles)}


@dataclass(frozen=True, slots=True)
class ReplicateBatch:
    """Raw replicate statistics of one subsample plus the skipped count."""

    values: np.ndarray
    degenerate: int

    @property
    def requested(self) -> int:
        return int(self.values.size) + self.degenerate


def replicate_statistics(
    x: np.ndarray,
    y: np.ndarray,
    *,
    n: int,
    r: int,
    rng: np.random.Generator,
    statistic: StatisticFn = weighted_correlation,
) -> ReplicateBatch:
    """Evaluate ``statistic`` under ``r`` fresh multinomial weight vectors.

    ``x`` and ``y`` must already be free of missing values. Replicates raising
    :class:`DegenerateVarianceError` are skipped and counted.
    """
    if r < 1:
        raise ValueError("r must be at least 1")
    b = int(np.asarray(x).shape[0])
    values = np.empty(r, dtype=float)
    kept = 0
    degenerate = 0
    for weights in iter_weight_vectors(b, n, r, rng):
        try:
            values[kept] = statistic(x, y, weights)
        except DegenerateVarianceError:
            degenerate += 1
            continue
        kept += 1
    return ReplicateBatch(values=values[:kept], degenerate=degenerate)


@dataclass(frozen=True)
class SubsampleSummary:
    """Quantiles of the bootstrap distribution obtained from one subsample.

    ``center`` and ``std_error`` are the mean and sample standard deviation of
    the replicate statistics (``std_error`` is NaN with a single replicate).
    """

    subsample_id: Hashable
    quantiles: Mapping[float, float]
    center: float
    std_error: float
    n_rows: int
    requested_replicates: int
    effective_replicates: int

    @property
    def degenerate_replicates(self) -> int:
        return self.requested_replicates - self.effective_replicates

    @property
    def degraded(self) -> bool:
        return self.degenerate_replicates > 0

    @property
    def lower(self) -> float:
        return self.quantiles[min(self.quantiles)]

    @property
    def upper(self) -> float:
        return self.quantiles[max(self.quantiles)]

    def to_dict(self) -> dict[str, object]:
        return {
            "subsample_id": self.subsample_id,
            "quantiles": {str(k): v for k, v in self.quantiles.items()},
            "center": self.center,
            "std_error": self.std_error,
            "n_rows": self.n_rows,
            "requested_replicates": self.requested_replicates,
            "effective_replicates": self.effective_replicates,
            "degenerate_replicates": self.degenerate_replicates,
        }


def bootstrap_subsample(
    subsample: Subsample,
    *,
    n: int,
    r: int,
    rng: np.random.Generator,
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    statistic: StatisticFn = weighted_correlation,
) -> SubsampleSummary:
    """Run ``r`` bootstrap replicates on ``subsample`` and summarise them.

    Rows with a missing field are removed once, before any weight vector is
    drawn, so the weights are aligned with the usable rows.

    Raises
    ------
    InsufficientDataError
        If no row is usable or every replicate is degenerate.
    """
    probs = _check_quantiles(quantiles)
    x, y = drop_incomplete(subsample.x, subsample.y)
    dropped = len(subsample) - x.shape[0]
    if dropped:
        logger.debug(
            "%d row(s) with missing fields excluded",
            dropped,
            extra={"subsample_id": subsample.subsample_id},
        )
    if x.shape[0] == 0:
        raise InsufficientDataError(subsample.subsample_id, "no complete rows")
    if n < 1:
        raise ValueError("n must be at least 1")

    batch = replicate_statistics(x, y, n=n, r=r, rng=rng, statistic=statistic)
    if batch.values.size == 0:
        raise InsufficientDataError(
            subsample.subsample_id, f"all {r} replicates had degenerate variance"
        )
    if batch.degenerate:
        logger.warning(
            "%d of %d replicates skipped (degenerate variance)",
            batch.degenerate,
            r,
            extra={"subsample_id": subsample.subsample_id},
        )

    std_error = float(np.std(batch.values, ddof=1)) if batch.values.size > 1 else float("nan")
    return SubsampleSummary(
        subsample_id=subsample.subsample_id,
        quantiles=quantile_summary(batch.values, probs),
        center=float(np.mean(batch.values)),
        std_error=std_error,
        n_rows=int(x.shape[0]),
        requested_replicates=r,
        effective_replicates=int(batch.values.size),
    )
