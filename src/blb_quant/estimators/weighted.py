"""Weighted statistics computed from integer resampling weights.

A weight vector ``w`` stands for a dataset in which row ``i`` appears ``w[i]``
times. Every statistic here is computed from weighted sufficient statistics
(``Σw``, ``Σwx``, ``Σwy``, ``Σwx²``, ``Σwy²``, ``Σwxy``, with ``x`` and ``y``
measured from the first complete row), so the result equals the unweighted
statistic of the expanded dataset without ever building it.

Rows with a missing field are dropped *before* weighting: callers that draw
weight vectors should filter first (see :func:`drop_incomplete`) so that the
weight length matches the number of usable rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

import numpy as np

from blb_quant.config.constants import SMALL_EPS

__all__ = [
    "DegenerateVarianceError",
    "WeightedMoments",
    "complete_cases",
    "drop_incomplete",
    "weighted_mean",
    "weighted_correlation",
    "expand_rows",
    "STATISTICS",
    "get_statistic",
]

Statistic = Callable[[np.ndarray, np.ndarray, np.ndarray], float]


class DegenerateVarianceError(ValueError):
    """Raised when a weighted variance is zero, making correlation undefined."""


def _as_float(values, name: str) -> np.ndarray:
    array = np.asarray(values, dtype=float)
    if array.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional")
    return array


def _as_weights(weights, length: int) -> np.ndarray:
    w = np.asarray(weights)
    if w.ndim != 1 or w.shape[0] != length:
        raise ValueError(f"weights must have length {length}, got shape {w.shape}")
    if np.any(w < 0):
        raise ValueError("weights must be non-negative")
    return w.astype(float, copy=False)


def complete_cases(x, y) -> np.ndarray:
    """Boolean mask of rows where both ``x`` and ``y`` are present."""
    x_arr = _as_float(x, "x")
    y_arr = _as_float(y, "y")
    if x_arr.shape != y_arr.shape:
        raise ValueError("x and y must have the same length")
    return ~(np.isnan(x_arr) | np.isnan(y_arr))


def drop_incomplete(x, y) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(x, y)`` restricted to the complete rows."""
    mask = complete_cases(x, y)
    return np.asarray(x, dtype=float)[mask], np.asarray(y, dtype=float)[mask]


@dataclass(frozen=True, slots=True)
class WeightedMoments:
    """Weighted sums needed for means, variances and the correlation.

    The sums are taken around ``origin`` (the first complete row) instead of
    zero. Shifting by a constant leaves every centred sum unchanged, but keeps
    ``Σw·dx²`` on the scale of the spread rather than of the level, so data
    with a large offset (prices, timestamps) does not lose its variance to
    cancellation.
    """

    total_weight: float
    sum_x: float
    sum_y: float
    sum_xx: float
    sum_yy: float
    sum_xy: float
    origin_x: float = 0.0
    origin_y: float = 0.0

    @classmethod
    def from_arrays(cls, x, y, weights) -> "WeightedMoments":
        mask = complete_cases(x, y)
        x_arr = np.asarray(x, dtype=float)
        y_arr = np.asarray(y, dtype=float)
        w = _as_weights(weights, x_arr.shape[0])
        if not mask.all():
            x_arr, y_arr, w = x_arr[mask], y_arr[mask], w[mask]

        origin_x = float(x_arr[0]) if x_arr.size else 0.0
        origin_y = float(y_arr[0]) if y_arr.size else 0.0
        dx = x_arr - origin_x
        dy = y_arr - origin_y
        wdx = w * dx
        wdy = w * dy
        return cls(
            total_weight=float(w.sum()),
            sum_x=float(wdx.sum()),
            sum_y=float(wdy.sum()),
            sum_xx=float(np.dot(wdx, dx)),
            sum_yy=float(np.dot(wdy, dy)),
            sum_xy=float(np.dot(wdx, dy)),
            origin_x=origin_x,
            origin_y=origin_y,
        )

    def _require_weight(self) -> None:
        if self.total_weight <= 0:
            raise DegenerateVarianceError("total weight is zero")

    @property
    def mean_x(self) -> float:
        self._require_weight()
        return self.origin_x + self.sum_x / self.total_weight

    @property
    def mean_y(self) -> float:
        self._require_weight()
        return self.origin_y + self.sum_y / self.total_weight

    def centered(self) -> tuple[float, float, float]:
        """Return ``(sxx, syy, sxy)``: centred sums of squares and cross products."""
        self._require_weight()
        n = self.total_weight
        sxx = self.sum_xx - self.sum_x * self.sum_x / n
        syy = self.sum_yy - self.sum_y * self.sum_y / n
        sxy = self.sum_xy - self.sum_x * self.sum_y / n
        return sxx, syy, sxy

    def correlation(self) -> float:
        sxx, syy, sxy = self.centered()
        # Rounding residue stays below SMALL_EPS of the shifted sum of squares.
        if sxx <= SMALL_EPS * self.sum_xx:
            raise DegenerateVarianceError("x has zero weighted variance")
        if syy <= SMALL_EPS * self.sum_yy:
            raise DegenerateVarianceError("y has zero weighted variance")
        rho = sxy / np.sqrt(sxx * syy)
        return float(np.clip(rho, -1.0, 1.0))


def weighted_mean(x, weights) -> float:
    """``Σ(w·x) / Σw`` over the non-missing entries of ``x``."""
    x_arr = _as_float(x, "x")
    w = _as_weights(weights, x_arr.shape[0])
    mask = ~np.isnan(x_arr)
    total = float(w[mask].sum())
    if total <= 0:
        raise DegenerateVarianceError("total weight is zero")
    return float(np.dot(w[mask], x_arr[mask]) / total)


def weighted_correlation(x, y, weights) -> float:
    """Pearson correlation of the dataset where row ``i`` is repeated ``w[i]`` times.

    Raises
    ------
    DegenerateVarianceError
        If either column has zero weighted variance.
    """
    return WeightedMoments.from_arrays(x, y, weights).correlation()


def expand_rows(x, y, weights) -> tuple[np.ndarray, np.ndarray]:
    """Materialise the duplicated dataset a weight vector stands for.

    Only meant as a reference for checking the weighted statistics on small
    inputs; the estimators never call it.
    """
    x_arr = _as_float(x, "x")
    y_arr = _as_float(y, "y")
    counts = np.asarray(weights, dtype=np.int64)
    return np.repeat(x_arr, counts), np.repeat(y_arr, counts)


def _mean_of_x(x, y, weights) -> float:
    return weighted_mean(x, weights)


STATISTICS: Mapping[str, Statistic] = {
    "correlation": weighted_correlation,
    "mean": _mean_of_x,
}


def get_statistic(name: str) -> Statistic:
    """Resolve a statistic by name; unknown names raise ``KeyError``."""
    try:
        return STATISTICS[name]
    except KeyError:
        raise KeyError(
            f"Unknown statistic '{name}'. Available: {', '.join(sorted(STATISTICS))}"
        ) from None
