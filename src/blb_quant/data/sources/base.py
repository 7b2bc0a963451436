"""Partition sources: the loader side of the pipeline.

A source maps partition ids to :class:`~blb_quant.data.dataset.Dataset`
values. The orchestrator only needs ``partition_ids()`` and
``load_partition(id)``, so any object with those two methods can feed a run,
including one that reads from a database or object store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Mapping, Protocol, runtime_checkable

import pandas as pd

from blb_quant.config.constants import COLUMN_X, COLUMN_Y

from ..dataset import Dataset, to_dataset

__all__ = ["PartitionSource", "PartitionSchemaError", "InMemorySource"]


class PartitionSchemaError(ValueError):
    """Raise when a partition does not expose the expected columns."""


@runtime_checkable
class PartitionSource(Protocol):
    def partition_ids(self) -> list[Hashable]:
        ...

    def load_partition(self, partition_id: Hashable) -> Dataset:
        ...


@dataclass(frozen=True)
class InMemorySource:
    """Partitions already held in memory (DataFrames, datasets or tuples)."""

    partitions: Mapping[Hashable, object]
    columns: tuple[str, str] = field(default=(COLUMN_X, COLUMN_Y))

    def partition_ids(self) -> list[Hashable]:
        return list(self.partitions)

    def load_partition(self, partition_id: Hashable) -> Dataset:
        try:
            records = self.partitions[partition_id]
        except KeyError:
            raise KeyError(f"Unknown partition '{partition_id}'") from None
        try:
            return to_dataset(records, self.columns)  # type: ignore[arg-type]
        except KeyError as exc:
            raise PartitionSchemaError(f"Partition '{partition_id}': {exc}") from exc

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        n_partitions: int,
        columns: tuple[str, str] = (COLUMN_X, COLUMN_Y),
    ) -> "InMemorySource":
        """Split ``frame`` row-wise into ``n_partitions`` contiguous chunks."""
        if n_partitions < 1:
            raise ValueError("n_partitions must be at least 1")
        if n_partitions > len(frame):
            raise ValueError("more partitions than rows")
        bounds = [round(i * len(frame) / n_partitions) for i in range(n_partitions + 1)]
        chunks = {
            i: frame.iloc[bounds[i] : bounds[i + 1]].reset_index(drop=True)
            for i in range(n_partitions)
        }
        return cls(chunks, columns)
