"""Ingestão de partições locais em CSV.

`CSVPartitionSource(directory, x_column, y_column, pattern="*.csv")`
    - Cada arquivo do diretório que casa com ``pattern`` é uma partição; o id
      é o *stem* (``part_01.txt`` vira ``part_01``).
    - Lê com pandas e exige as duas colunas configuradas.
    - Converte células não numéricas em NaN (tratadas como ausentes).
    - Ids sem arquivo correspondente resultam em ``FileNotFoundError``;
      colunas ausentes em ``PartitionSchemaError``.

`load_csv_dataset(path, x_column, y_column)`
    Lê um único CSV como `Dataset` (subamostragem em memória).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Hashable

import pandas as pd

from blb_quant.config.constants import COLUMN_X, COLUMN_Y

from ..dataset import Dataset, to_dataset
from .base import PartitionSchemaError

__all__ = ["CSVPartitionSource", "load_csv_dataset"]


def load_csv_dataset(
    path: str | Path,
    *,
    x_column: str = COLUMN_X,
    y_column: str = COLUMN_Y,
) -> Dataset:
    """Load two numeric columns of a CSV file into a :class:`Dataset`."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Arquivo CSV não encontrado: {csv_path}")

    df = pd.read_csv(csv_path)
    missing = [col for col in (x_column, y_column) if col not in df.columns]
    if missing:
        raise PartitionSchemaError(
            f"Colunas esperadas ausentes em {csv_path.name}: {', '.join(missing)}"
        )
    return to_dataset(df, (x_column, y_column))


@dataclass(frozen=True)
class CSVPartitionSource:
    """Directory of CSV files, one partition per file."""

    directory: Path
    x_column: str = COLUMN_X
    y_column: str = COLUMN_Y
    pattern: str = "*.csv"

    def __post_init__(self) -> None:
        object.__setattr__(self, "directory", Path(self.directory))
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Diretório de partições não encontrado: {self.directory}")

    def _paths(self) -> dict[str, Path]:
        return {path.stem: path for path in self.directory.glob(self.pattern) if path.is_file()}

    def partition_ids(self) -> list[Hashable]:
        return sorted(self._paths())

    def load_partition(self, partition_id: Hashable) -> Dataset:
        try:
            path = self._paths()[str(partition_id)]
        except KeyError:
            raise FileNotFoundError(
                f"Partição '{partition_id}' não encontrada em {self.directory} ({self.pattern})"
            ) from None
        return load_csv_dataset(path, x_column=self.x_column, y_column=self.y_column)
