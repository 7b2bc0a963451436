from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from blb_quant.data import Dataset, draw_subsample, simulate_bivariate_normal, to_dataset


def test_dataset_is_read_only():
    data = Dataset([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
    with pytest.raises(ValueError):
        data.x[0] = 10.0
    with pytest.raises(AttributeError):
        data.x = np.zeros(3)  # type: ignore[misc]


def test_dataset_requires_aligned_columns():
    with pytest.raises(ValueError, match="aligned"):
        Dataset([1.0, 2.0], [1.0])


def test_to_dataset_from_tuples_maps_none_to_nan():
    data = to_dataset([(1, 2), (None, 3.5), (4.0, None), (5, 6, "extra")])
    assert len(data) == 4
    assert data.n_missing == 2
    assert data.x[3] == 5.0


def test_to_dataset_from_frame_coerces_text():
    frame = pd.DataFrame({"a": ["1.5", "oops", "3"], "b": [1, 2, 3]})
    data = to_dataset(frame, ("a", "b"))
    assert np.isnan(data.x[1])
    assert data.y.tolist() == [1.0, 2.0, 3.0]

    with pytest.raises(KeyError, match="c"):
        to_dataset(frame, ("a", "c"))


def test_draw_subsample_without_replacement():
    data = Dataset(np.arange(100.0), np.arange(100.0) * 2)
    sub = draw_subsample(data, 30, np.random.default_rng(0), subsample_id="s0")

    assert sub.subsample_id == "s0"
    assert len(sub) == 30
    assert len(np.unique(sub.x)) == 30
    np.testing.assert_array_equal(sub.y, sub.x * 2)


def test_draw_subsample_bounds():
    data = Dataset(np.arange(5.0), np.arange(5.0))
    rng = np.random.default_rng(0)
    assert draw_subsample(data, None, rng).data is data
    assert draw_subsample(data, 5, rng).data is data
    with pytest.raises(ValueError):
        draw_subsample(data, 6, rng)
    with pytest.raises(ValueError):
        draw_subsample(data, 0, rng)


def test_simulated_population_has_requested_correlation():
    data = simulate_bivariate_normal(20_000, -0.4, np.random.default_rng(1))
    assert np.corrcoef(data.x, data.y)[0, 1] == pytest.approx(-0.4, abs=0.02)
    with pytest.raises(ValueError):
        simulate_bivariate_normal(10, 1.5, np.random.default_rng(1))


def test_to_frame_round_trips_columns():
    data = Dataset([1.0, np.nan], [2.0, 3.0])
    frame = data.to_frame()
    assert list(frame.columns) == ["x", "y"]
    assert frame["y"].tolist() == [2.0, 3.0]
