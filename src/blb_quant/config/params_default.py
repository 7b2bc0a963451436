"""Parâmetros padrão do procedimento BLB.

O módulo centraliza *defaults* utilizados em testes, scripts e na CLI,
evitando a duplicação dos mesmos números mágicos em vários pontos do código.
Os valores podem ser facilmente sobrescritos via ``merge_params``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .constants import (
    DEFAULT_QUANTILES,
    DEFAULT_REPLICATES,
    DEFAULT_SUBSAMPLES,
    FAILURE_POLICIES,
    PARALLEL_BACKENDS,
)

__all__ = [
    "BLBParams",
    "DEFAULT_PARAMS",
    "merge_params",
]


@dataclass(frozen=True, slots=True)
class BLBParams:
    """Container for the run parameters of one BLB estimate.

    ``n_subsamples`` is ``s``, ``subsample_size`` is ``b`` (``None`` keeps the
    whole partition), ``resample_size`` is ``n`` (``None`` means the population
    size) and ``n_replicates`` is ``r``.
    """

    n_subsamples: int = DEFAULT_SUBSAMPLES
    subsample_size: int | None = None
    resample_size: int | None = None
    n_replicates: int = DEFAULT_REPLICATES
    quantiles: tuple[float, ...] = field(default=DEFAULT_QUANTILES)
    statistic: str = "correlation"
    worker_count: int = 1
    backend: str = "process"
    random_seed: int | None = None
    on_subsample_failure: str = "abort"

    def to_dict(self) -> dict[str, Any]:
        return {
            "n_subsamples": self.n_subsamples,
            "subsample_size": self.subsample_size,
            "resample_size": self.resample_size,
            "n_replicates": self.n_replicates,
            "quantiles": list(self.quantiles),
            "statistic": self.statistic,
            "worker_count": self.worker_count,
            "backend": self.backend,
            "random_seed": self.random_seed,
            "on_subsample_failure": self.on_subsample_failure,
        }

    def validate(self) -> "BLBParams":
        """Raise ``ValueError`` when the parameters cannot describe a BLB run."""

        if self.n_subsamples < 1:
            raise ValueError("n_subsamples must be at least 1")
        if self.subsample_size is not None and self.subsample_size < 1:
            raise ValueError("subsample_size must be at least 1")
        if self.resample_size is not None and self.resample_size < 1:
            raise ValueError("resample_size must be at least 1")
        if self.n_replicates < 1:
            raise ValueError("n_replicates must be at least 1")
        if not self.quantiles:
            raise ValueError("quantiles must not be empty")
        for prob in self.quantiles:
            if not 0.0 <= float(prob) <= 1.0:
                raise ValueError(f"quantile {prob} outside [0, 1]")
        if self.worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        if self.backend not in PARALLEL_BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'")
        if self.on_subsample_failure not in FAILURE_POLICIES:
            raise ValueError(
                f"on_subsample_failure must be one of {', '.join(FAILURE_POLICIES)}"
            )
        return self

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "BLBParams":
        base = cls()
        base_dict = base.to_dict()
        merged = {**base_dict, **{k: mapping[k] for k in mapping if k in base_dict}}
        merged["quantiles"] = tuple(float(q) for q in merged["quantiles"])
        return cls(**merged)


DEFAULT_PARAMS = BLBParams()


def merge_params(
    overrides: Mapping[str, Any] | None = None,
    *,
    base: BLBParams | None = None,
) -> BLBParams:
    """Merge ``overrides`` with ``base`` returning a new :class:`BLBParams`.

    Parameters
    ----------
    overrides:
        Valores a substituir. Chaves desconhecidas geram ``KeyError`` para
        evitar erros silenciosos.
    base:
        Instância de referência; quando ``None`` usa :data:`DEFAULT_PARAMS`.
    """

    base_params = base or DEFAULT_PARAMS
    data = base_params.to_dict()

    if not overrides:
        return BLBParams.from_mapping(data)

    unknown = sorted(set(overrides) - set(data))
    if unknown:
        raise KeyError(f"Unknown parameter(s): {', '.join(unknown)}")

    data.update(overrides)
    return BLBParams.from_mapping(data)
