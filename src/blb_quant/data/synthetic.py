"""Synthetic populations with a known correlation."""

from __future__ import annotations

import numpy as np

from .dataset import Dataset

__all__ = ["simulate_bivariate_normal"]


def simulate_bivariate_normal(
    n_rows: int,
    rho: float,
    rng: np.random.Generator,
    *,
    means: tuple[float, float] = (0.0, 0.0),
    stds: tuple[float, float] = (1.0, 1.0),
) -> Dataset:
    """Draw ``n_rows`` pairs from a bivariate normal with correlation ``rho``."""
    if n_rows < 1:
        raise ValueError("n_rows must be positive")
    if not -1.0 <= rho <= 1.0:
        raise ValueError("rho must lie in [-1, 1]")
    cov = np.array(
        [
            [stds[0] ** 2, rho * stds[0] * stds[1]],
            [rho * stds[0] * stds[1], stds[1] ** 2],
        ]
    )
    draws = rng.multivariate_normal(np.asarray(means, dtype=float), cov, size=n_rows)
    return Dataset(draws[:, 0], draws[:, 1])
