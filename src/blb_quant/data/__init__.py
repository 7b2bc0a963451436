"""Data layer: record containers, partition sources and synthetic data."""

from .dataset import Dataset, Subsample, draw_subsample, to_dataset
from .sources import (
    CSVPartitionSource,
    InMemorySource,
    PartitionSchemaError,
    PartitionSource,
    load_csv_dataset,
)
from .synthetic import simulate_bivariate_normal

__all__ = [
    "Dataset",
    "Subsample",
    "draw_subsample",
    "to_dataset",
    "PartitionSource",
    "PartitionSchemaError",
    "InMemorySource",
    "CSVPartitionSource",
    "load_csv_dataset",
    "simulate_bivariate_normal",
]
