from __future__ import annotations

import pytest

from blb_quant.config import DEFAULT_PARAMS, BLBParams, merge_params


def test_defaults():
    params = BLBParams()
    assert params == DEFAULT_PARAMS
    assert params.n_subsamples == 20
    assert params.n_replicates == 200
    assert params.quantiles == (0.025, 0.975)
    assert params.on_subsample_failure == "abort"


def test_merge_params_overrides_and_normalises_quantiles():
    params = merge_params({"n_replicates": 50, "quantiles": [0.1, 0.9]})
    assert params.n_replicates == 50
    assert params.quantiles == (0.1, 0.9)
    assert params.n_subsamples == DEFAULT_PARAMS.n_subsamples

    based = merge_params({"random_seed": 3}, base=params)
    assert based.n_replicates == 50
    assert based.random_seed == 3


def test_merge_params_rejects_unknown_keys():
    with pytest.raises(KeyError, match="n_boot"):
        merge_params({"n_boot": 10})


@pytest.mark.parametrize(
    "overrides",
    [
        {"n_subsamples": 0},
        {"subsample_size": 0},
        {"n_replicates": 0},
        {"quantiles": ()},
        {"quantiles": (0.5, 1.2)},
        {"worker_count": 0},
        {"backend": "gpu"},
        {"on_subsample_failure": "ignore"},
    ],
)
def test_validate_rejects_invalid_parameters(overrides):
    with pytest.raises(ValueError):
        merge_params(overrides).validate()


def test_to_dict_round_trip():
    params = BLBParams(subsample_size=100, resample_size=1000, random_seed=9)
    assert BLBParams.from_mapping(params.to_dict()) == params
