from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
import yaml

from blb_quant import cli
from blb_quant.data.synthetic import simulate_bivariate_normal


def _write_pairs(path: Path, rows: int = 300, seed: int = 0) -> Path:
    frame = simulate_bivariate_normal(rows, 0.5, np.random.default_rng(seed)).to_frame()
    frame.rename(columns={"x": "a", "y": "b"}).to_csv(path, index=False)
    return path


def _write_config(path: Path, **run: object) -> Path:
    run = {"subsamples": 3, "subsample_size": 40, "replicates": 20, "backend": "sequential", **run}
    path.write_text(yaml.safe_dump({"run": run}), encoding="utf-8")
    return path


def test_show_settings_json(capsys, tmp_path: Path):
    assert cli.main(["show-settings", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["project_root"] == str(tmp_path.resolve())
    assert payload["random_seed"] == 42


def test_run_with_config_and_data(capsys, tmp_path: Path):
    data = _write_pairs(tmp_path / "pairs.csv")
    config = _write_config(tmp_path / "blb.yaml", seed=4)

    argv = ["run", "--config", str(config), "--data", str(data), "--x-col", "a", "--y-col", "b"]
    assert cli.main([*argv, "--json"]) == 0
    first = json.loads(capsys.readouterr().out)

    assert cli.main([*argv, "--json"]) == 0
    second = json.loads(capsys.readouterr().out)

    assert first == second
    assert first["n_subsamples"] == 3
    assert first["lower"] <= first["upper"]
    assert set(first["quantiles"]) == {"0.025", "0.975"}


def test_run_uses_settings_seed_when_config_has_none(capsys, tmp_path: Path, monkeypatch):
    data = _write_pairs(tmp_path / "pairs.csv")
    config = _write_config(tmp_path / "blb.yaml")
    argv = ["run", "--config", str(config), "--data", str(data), "--x-col", "a", "--y-col", "b"]

    assert cli.main([*argv, "--json"]) == 0
    from_settings = json.loads(capsys.readouterr().out)
    assert cli.main([*argv, "--seed", "42", "--json"]) == 0
    explicit = json.loads(capsys.readouterr().out)

    assert from_settings == explicit


def test_run_prints_per_subsample_table(capsys, tmp_path: Path):
    data = _write_pairs(tmp_path / "pairs.csv")
    config = _write_config(tmp_path / "blb.yaml", seed=1)

    code = cli.main(
        ["run", "--config", str(config), "--data", str(data), "--x-col", "a", "--y-col", "b",
         "--per-subsample"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "n_subsamples: 3" in out
    assert "subsample_id" in out


def test_run_without_data_returns_2(capsys, tmp_path: Path):
    config = _write_config(tmp_path / "blb.yaml")
    assert cli.main(["run", "--config", str(config)]) == 2
    assert "--data" in capsys.readouterr().err


def test_run_with_missing_csv_returns_2(tmp_path: Path):
    config = _write_config(tmp_path / "blb.yaml")
    assert cli.main(["run", "--config", str(config), "--data", str(tmp_path / "none.csv")]) == 2


def test_run_with_invalid_config_returns_1(capsys, tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("run:\n  replicates: 0\n", encoding="utf-8")
    assert cli.main(["run", "--config", str(path), "--data", "x.csv"]) == 1
    assert "ConfigError" in capsys.readouterr().err


def test_run_with_degenerate_partition_returns_1(capsys, tmp_path: Path):
    parts = tmp_path / "parts"
    parts.mkdir()
    _write_pairs(parts / "good.csv")
    flat = parts / "flat.csv"
    flat.write_text("a,b\n" + "".join(f"1.0,{i}\n" for i in range(50)), encoding="utf-8")
    config = _write_config(tmp_path / "blb.yaml", seed=0)

    code = cli.main(
        ["run", "--config", str(config), "--data", str(parts), "--x-col", "a", "--y-col", "b"]
    )
    assert code == 1
    err = capsys.readouterr().err
    assert "AggregationError" in err
    assert "'flat'" in err


def test_run_with_missing_column_returns_1(capsys, tmp_path: Path):
    data = _write_pairs(tmp_path / "pairs.csv")
    config = _write_config(tmp_path / "blb.yaml", seed=0)

    code = cli.main(
        ["run", "--config", str(config), "--data", str(data), "--x-col", "a", "--y-col", "c"]
    )
    assert code == 1
    err = capsys.readouterr().err
    assert "PartitionSchemaError: " in err
    assert "Traceback" not in err


def test_simulate_with_invalid_rho_returns_1(capsys):
    assert cli.main(["simulate", "--rho", "1.5", "--rows", "50", "-r", "5"]) == 1
    err = capsys.readouterr().err
    assert "ValueError" in err
    assert "rho" in err


def test_simulate_reports_coverage(capsys):
    code = cli.main(
        ["simulate", "--rows", "500", "-s", "4", "-b", "100", "-r", "50", "--seed", "3",
         "--workers", "1", "--json"]
    )
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["true_rho"] == pytest.approx(0.6)
    assert payload["n_subsamples"] == 4
    assert isinstance(payload["covers_true_rho"], bool)
    assert abs(payload["sample_rho"] - 0.6) < 0.15


def test_structured_logs_flag_writes_json_log(tmp_path: Path, capsys):
    argv = ["--structured-logs", "simulate", "--rows", "200", "-s", "2", "-b", "50", "-r", "10",
            "--workers", "1"]
    assert cli.main(argv) == 0
    capsys.readouterr()

    lines = (tmp_path / "logs" / "blb_quant.log").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert records
    assert all(record["command"] == "simulate" for record in records)
    assert any(record["message"].startswith("Starting BLB run") for record in records)
