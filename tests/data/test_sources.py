from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from blb_quant.data.sources import (
    CSVPartitionSource,
    InMemorySource,
    PartitionSchemaError,
    PartitionSource,
    load_csv_dataset,
)


def _write_csv(tmp_path: Path, filename: str, rows: list[dict[str, object]]) -> Path:
    df = pd.DataFrame(rows)
    path = tmp_path / filename
    df.to_csv(path, index=False)
    return path


def test_load_csv_dataset_success(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "pairs.csv",
        [
            {"date": "2024-01-01", "spy": 0.01, "qqq": 0.02},
            {"date": "2024-01-02", "spy": -0.005, "qqq": None},
        ],
    )

    data = load_csv_dataset(csv_path, x_column="spy", y_column="qqq")

    assert len(data) == 2
    assert data.x.tolist() == [0.01, -0.005]
    assert data.n_missing == 1


def test_load_csv_dataset_missing_column(tmp_path: Path):
    csv_path = _write_csv(tmp_path, "pairs.csv", [{"x": 1.0, "z": 2.0}])
    with pytest.raises(PartitionSchemaError, match="y"):
        load_csv_dataset(csv_path)


def test_load_csv_dataset_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_csv_dataset(tmp_path / "absent.csv")


def test_csv_partition_source_lists_sorted_stems(tmp_path: Path):
    for name in ("b.csv", "a.csv", "notes.txt"):
        _write_csv(tmp_path, name, [{"x": 1.0, "y": 2.0}, {"x": 2.0, "y": 3.0}])

    source = CSVPartitionSource(tmp_path)

    assert isinstance(source, PartitionSource)
    assert source.partition_ids() == ["a", "b"]
    assert len(source.load_partition("b")) == 2


def test_csv_partition_source_follows_its_pattern(tmp_path: Path):
    _write_csv(tmp_path, "p2.txt", [{"x": 1.0, "y": 2.0}, {"x": 2.0, "y": 3.5}])
    _write_csv(tmp_path, "p1.txt", [{"x": 0.5, "y": 1.0}])
    _write_csv(tmp_path, "ignored.csv", [{"x": 9.0, "y": 9.0}])
    source = CSVPartitionSource(tmp_path, pattern="*.txt")

    assert source.partition_ids() == ["p1", "p2"]
    dataset = source.load_partition("p2")
    assert dataset.x.tolist() == [1.0, 2.0]
    assert dataset.y.tolist() == [2.0, 3.5]

    with pytest.raises(FileNotFoundError, match="ignored"):
        source.load_partition("ignored")


def test_csv_partition_source_requires_directory(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        CSVPartitionSource(tmp_path / "missing")


def test_in_memory_source_splits_frame():
    frame = pd.DataFrame({"x": range(10), "y": range(10)})
    source = InMemorySource.from_frame(frame, 3)

    sizes = [len(source.load_partition(pid)) for pid in source.partition_ids()]
    assert sum(sizes) == 10
    assert source.partition_ids() == [0, 1, 2]

    with pytest.raises(ValueError):
        InMemorySource.from_frame(frame, 11)


def test_in_memory_source_reports_schema_and_unknown_ids():
    source = InMemorySource({"p": pd.DataFrame({"x": [1.0], "w": [2.0]})})
    with pytest.raises(PartitionSchemaError):
        source.load_partition("p")
    with pytest.raises(KeyError):
        source.load_partition("q")
