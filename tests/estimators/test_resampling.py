from __future__ import annotations

import numpy as np
import pytest

from blb_quant.estimators.resampling import iter_weight_vectors, multinomial_weights


@pytest.mark.parametrize("b,n", [(1, 10), (5, 5), (50, 100_000), (200, 3)])
def test_weights_sum_to_n_and_have_length_b(b: int, n: int) -> None:
    rng = np.random.default_rng(0)
    for _ in range(20):
        weights = multinomial_weights(b, n, rng)
        assert weights.shape == (b,)
        assert weights.dtype == np.int64
        assert weights.sum() == n
        assert (weights >= 0).all()


def test_same_seed_gives_same_sequence() -> None:
    first = list(iter_weight_vectors(8, 40, 5, np.random.default_rng(9)))
    second = list(iter_weight_vectors(8, 40, 5, np.random.default_rng(9)))
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)


def test_weights_are_roughly_uniform_across_rows() -> None:
    rng = np.random.default_rng(1)
    totals = sum(multinomial_weights(4, 1000, rng) for _ in range(50))
    assert totals.sum() == 50_000
    assert np.allclose(totals / totals.sum(), 0.25, atol=0.01)


def test_invalid_sizes_raise() -> None:
    rng = np.random.default_rng(0)
    with pytest.raises(ValueError):
        multinomial_weights(0, 10, rng)
    with pytest.raises(ValueError):
        multinomial_weights(3, -1, rng)
    with pytest.raises(ValueError):
        list(iter_weight_vectors(3, 3, -1, rng))
