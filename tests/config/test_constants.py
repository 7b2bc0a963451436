from __future__ import annotations

import pytest

from blb_quant.config import constants


def test_subsample_size_for_follows_power_rule():
    assert constants.subsample_size_for(1000) == 63
    assert constants.subsample_size_for(1) == 1
    assert constants.subsample_size_for(100, gamma=1.0) == 100
    assert constants.subsample_size_for(10_000, gamma=0.5) == 100


def test_subsample_size_for_validates_arguments():
    with pytest.raises(ValueError):
        constants.subsample_size_for(0)
    with pytest.raises(ValueError):
        constants.subsample_size_for(10, gamma=0.0)


def test_default_interval_is_two_sided():
    low, high = constants.DEFAULT_QUANTILES
    assert low + high == pytest.approx(1.0)
    assert "sequential" in constants.PARALLEL_BACKENDS
    assert constants.FAILURE_POLICIES[0] == "abort"
