"""Constantes centrais utilizadas em múltiplos módulos.

O arquivo consolida os *defaults* numéricos do procedimento BLB e os nomes de
colunas esperados pelos carregadores de dados, evitando literais mágicos
espalhados pelo projeto.
"""

from __future__ import annotations

from typing import Final

__all__ = [
    "COLUMN_X",
    "COLUMN_Y",
    "DEFAULT_QUANTILES",
    "DEFAULT_REPLICATES",
    "DEFAULT_SUBSAMPLES",
    "FAILURE_POLICIES",
    "LOG_FILE_NAME",
    "PARALLEL_BACKENDS",
    "QUANTILE_METHOD",
    "SMALL_EPS",
    "subsample_size_for",
]


# Numeric constants ---------------------------------------------------------

DEFAULT_QUANTILES: Final[tuple[float, float]] = (0.025, 0.975)
"""Intervalo bilateral de 95% (percentis 2.5 e 97.5)."""

DEFAULT_REPLICATES: Final[int] = 200
DEFAULT_SUBSAMPLES: Final[int] = 20

SMALL_EPS: Final[float] = 1e-12
"""Épsilon numérico para detectar variância degenerada após cancelamento."""

QUANTILE_METHOD: Final[str] = "linear"
"""Interpolação linear entre estatísticas de ordem (Hyndman-Fan tipo 7)."""


# String constants ----------------------------------------------------------

COLUMN_X: Final[str] = "x"
COLUMN_Y: Final[str] = "y"

LOG_FILE_NAME: Final[str] = "blb_quant.log"

PARALLEL_BACKENDS: Final[tuple[str, ...]] = ("process", "thread", "joblib", "sequential")
FAILURE_POLICIES: Final[tuple[str, ...]] = ("abort", "exclude")


def subsample_size_for(population_size: int, gamma: float = 0.6) -> int:
    """Return the conventional BLB subsample size ``b = N ** gamma``.

    Kleiner et al. recommend ``gamma`` in ``[0.5, 0.9]``; the result is clipped
    to ``[1, N]``.
    """

    if population_size <= 0:
        raise ValueError("population_size must be positive")
    if not 0 < gamma <= 1:
        raise ValueError("gamma must lie in (0, 1]")
    size = int(round(population_size**gamma))
    return max(1, min(population_size, size))
