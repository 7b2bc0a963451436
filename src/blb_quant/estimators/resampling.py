"""Multinomial resampling weights.

Sampling ``n`` rows with replacement from ``b`` distinct rows and counting how
often each row was picked is the same as one draw from a multinomial with
``b`` equally likely categories and ``n`` trials. Drawing the counts directly
avoids generating the ``n`` sampled rows.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np

__all__ = ["multinomial_weights", "iter_weight_vectors"]


def _check_sizes(b: int, n: int) -> None:
    if b < 1:
        raise ValueError("b must be at least 1")
    if n < 0:
        raise ValueError("n must be non-negative")


def multinomial_weights(b: int, n: int, rng: np.random.Generator) -> np.ndarray:
    """Draw one length-``b`` integer weight vector summing exactly to ``n``.

    Parameters
    ----------
    b:
        Number of distinct rows available (vector length).
    n:
        Number of virtual draws, conventionally the population size so the
        bootstrap variance matches the full-data estimator.
    rng:
        Explicit random source; pass a seeded ``numpy.random.Generator`` for
        reproducible sequences.
    """
    _check_sizes(b, n)
    pvals = np.full(b, 1.0 / b)
    return rng.multinomial(n, pvals).astype(np.int64, copy=False)


def iter_weight_vectors(
    b: int, n: int, r: int, rng: np.random.Generator
) -> Iterator[np.ndarray]:
    """Yield ``r`` independent weight vectors from ``rng``."""
    _check_sizes(b, n)
    if r < 0:
        raise ValueError("r must be non-negative")
    for _ in range(r):
        yield multinomial_weights(b, n, rng)
