"""Record containers consumed by the BLB pipeline.

`Dataset`
    Duas colunas numéricas (``x``, ``y``) imutáveis, possivelmente com valores
    ausentes (NaN). Criado pelos carregadores, lido apenas para extrair
    subamostras.

`Subsample`
    ``b`` linhas de um `Dataset` sorteadas sem reposição, identificadas por
    ``subsample_id`` para que falhas possam ser atribuídas à subamostra certa.

`to_dataset(records, columns)`
    Converte ``DataFrame`` ou iteráveis de tuplas em `Dataset`.

`draw_subsample(dataset, b, rng, subsample_id)`
    Sorteio sem reposição com gerador explícito.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, Sequence

import numpy as np
import pandas as pd

from blb_quant.config.constants import COLUMN_X, COLUMN_Y

__all__ = ["Dataset", "Subsample", "to_dataset", "draw_subsample"]


def _frozen(values) -> np.ndarray:
    array = np.array(values, dtype=float)
    if array.ndim != 1:
        raise ValueError("columns must be one-dimensional")
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Dataset:
    """Immutable pair of aligned float columns."""

    x: np.ndarray
    y: np.ndarray

    def __post_init__(self) -> None:
        x = _frozen(self.x)
        y = _frozen(self.y)
        if x.shape != y.shape:
            raise ValueError(f"x and y must be aligned, got {x.shape} and {y.shape}")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __len__(self) -> int:
        return int(self.x.shape[0])

    @property
    def n_missing(self) -> int:
        return int(np.count_nonzero(np.isnan(self.x) | np.isnan(self.y)))

    def take(self, indices: Sequence[int] | np.ndarray) -> "Dataset":
        idx = np.asarray(indices, dtype=np.int64)
        return Dataset(self.x[idx], self.y[idx])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({COLUMN_X: self.x, COLUMN_Y: self.y})


@dataclass(frozen=True, eq=False)
class Subsample:
    """Rows handed to one bootstrap replicator invocation."""

    subsample_id: Hashable
    data: Dataset

    @property
    def x(self) -> np.ndarray:
        return self.data.x

    @property
    def y(self) -> np.ndarray:
        return self.data.y

    def __len__(self) -> int:
        return len(self.data)


def to_dataset(
    records: pd.DataFrame | Dataset | Iterable[Sequence[float]],
    columns: tuple[str, str] = (COLUMN_X, COLUMN_Y),
) -> Dataset:
    """Build a :class:`Dataset` from a DataFrame or an iterable of tuples.

    DataFrames must contain both ``columns``; non-numeric cells become NaN.
    Tuples contribute their first two fields; ``None`` becomes NaN.
    """
    if isinstance(records, Dataset):
        return records
    if isinstance(records, pd.DataFrame):
        missing = [col for col in columns if col not in records.columns]
        if missing:
            raise KeyError(f"Missing column(s): {', '.join(missing)}")
        x = pd.to_numeric(records[columns[0]], errors="coerce").to_numpy(dtype=float)
        y = pd.to_numeric(records[columns[1]], errors="coerce").to_numpy(dtype=float)
        return Dataset(x, y)

    xs: list[float] = []
    ys: list[float] = []
    for row in records:
        if len(row) < 2:
            raise ValueError("each record needs at least two fields")
        xs.append(np.nan if row[0] is None else float(row[0]))
        ys.append(np.nan if row[1] is None else float(row[1]))
    return Dataset(np.asarray(xs, dtype=float), np.asarray(ys, dtype=float))


def draw_subsample(
    dataset: Dataset,
    b: int | None,
    rng: np.random.Generator,
    subsample_id: Hashable = 0,
) -> Subsample:
    """Draw ``b`` rows without replacement; ``b=None`` keeps every row.

    Raises
    ------
    ValueError
        If ``b`` exceeds the number of rows or is not positive.
    """
    size = len(dataset)
    if b is None or b == size:
        return Subsample(subsample_id, dataset)
    if b < 1:
        raise ValueError("b must be at least 1")
    if b > size:
        raise ValueError(f"Cannot draw {b} rows without replacement from {size}")
    indices = rng.choice(size, size=b, replace=False)
    return Subsample(subsample_id, dataset.take(indices))
