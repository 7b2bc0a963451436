"""Data sources yielding named partitions of (x, y) records."""

from .base import InMemorySource, PartitionSchemaError, PartitionSource
from .csv import CSVPartitionSource, load_csv_dataset

__all__ = [
    "PartitionSource",
    "PartitionSchemaError",
    "InMemorySource",
    "CSVPartitionSource",
    "load_csv_dataset",
]
