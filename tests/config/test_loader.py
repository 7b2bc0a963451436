"""Tests for configuration loading and validation module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import BaseModel

from blb_quant.config.loader import ConfigError, _resolve_config_path, load_config, save_config
from blb_quant.config.schemas import BLBConfig, RunConfig


class SimpleConfig(BaseModel):
    name: str
    value: int = 10


@pytest.fixture
def blb_config_file(tmp_path: Path) -> Path:
    config_file = tmp_path / "blb.yaml"
    data = {
        "run": {"subsamples": 8, "replicates": 50, "quantiles": [0.975, 0.025], "seed": 3},
        "data": {"path": "pairs.csv", "x_column": "a", "y_column": "b"},
    }
    with open(config_file, "w") as f:
        yaml.dump(data, f)
    return config_file


def test_load_config_validates_against_blb_schema(blb_config_file: Path):
    config = load_config(blb_config_file)

    assert isinstance(config, BLBConfig)
    assert config.run.subsamples == 8
    assert config.run.quantiles == [0.025, 0.975]
    assert config.data is not None
    assert config.data.x_column == "a"


def test_load_config_with_custom_schema(tmp_path: Path):
    path = tmp_path / "simple.yaml"
    path.write_text("name: demo\n", encoding="utf-8")
    config = load_config(path, SimpleConfig)
    assert config == SimpleConfig(name="demo", value=10)


def test_relative_paths_resolve_against_project_root(tmp_path: Path, blb_config_file: Path):
    assert _resolve_config_path("blb.yaml", project_root=tmp_path) == tmp_path / "blb.yaml"
    with pytest.raises(FileNotFoundError):
        _resolve_config_path("nope.yaml", project_root=tmp_path)
    with pytest.raises(FileNotFoundError):
        _resolve_config_path(tmp_path / "nope.yaml")


def test_missing_file_raises_config_error(tmp_path: Path):
    with pytest.raises(ConfigError, match="nope.yaml"):
        load_config(tmp_path / "nope.yaml")


def test_invalid_yaml_raises_config_error(tmp_path: Path):
    path = tmp_path / "invalid.yaml"
    path.write_text("run: [unclosed list\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(path)
    assert isinstance(excinfo.value.__cause__, yaml.YAMLError)


def test_validation_failure_raises_config_error(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("run:\n  replicates: 0\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="replicates"):
        load_config(path)


def test_empty_file(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.touch()
    with pytest.raises(ConfigError, match="Empty"):
        load_config(path)
    assert load_config(path, strict=False) == BLBConfig()


def test_non_strict_returns_defaults_on_validation_error(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("run:\n  subsamples: -1\n", encoding="utf-8")
    assert load_config(path, strict=False) == BLBConfig()


def test_save_then_load(tmp_path: Path):
    original = BLBConfig(run=RunConfig(subsamples=4, seed=10))
    path = save_config(original, tmp_path / "nested" / "out.yaml")

    assert path.exists()
    assert "data" not in yaml.safe_load(path.read_text(encoding="utf-8"))
    assert load_config(path) == original
