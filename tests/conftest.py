from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from blb_quant.config.settings import reset_settings_cache
from blb_quant.data.dataset import Dataset
from blb_quant.data.synthetic import simulate_bivariate_normal


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep settings, log files and root handlers local to each test."""

    monkeypatch.setenv("BLB_QUANT_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("BLB_QUANT_LOGS_DIR", str(tmp_path / "logs"))
    reset_settings_cache()
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    reset_settings_cache()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20240101)


@pytest.fixture
def correlated_dataset() -> Dataset:
    return simulate_bivariate_normal(400, 0.5, np.random.default_rng(7))


@pytest.fixture
def correlated_frame(correlated_dataset: Dataset) -> pd.DataFrame:
    return correlated_dataset.to_frame()
