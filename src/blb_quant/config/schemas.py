"""Pydantic schemas for configuration validation.

This module defines typed configuration schemas using Pydantic v2 for:
- BLB run parameters (subsamples, replicates, quantiles, parallelism)
- Data source location and column mapping

All YAML configuration files in configs/ should validate against these schemas.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import COLUMN_X, COLUMN_Y, DEFAULT_QUANTILES
from .params_default import BLBParams

__all__ = [
    "RunConfig",
    "DataSourceConfig",
    "BLBConfig",
]


class RunConfig(BaseModel):
    """Bag of Little Bootstraps run parameters.

    Attributes
    ----------
    subsamples : int
        Number of subsamples ``s``
    subsample_size : Optional[int]
        Rows per subsample ``b``; None keeps each partition whole
    resample_size : Optional[int]
        Resample target ``n``; None uses the population size
    replicates : int
        Bootstrap replicates ``r`` per subsample
    quantiles : List[float]
        Probabilities in [0, 1] reported by the interval
    """

    subsamples: int = Field(default=20, gt=0, description="Number of subsamples (s)")
    subsample_size: int | None = Field(
        default=None, gt=0, description="Rows per subsample (b)"
    )
    resample_size: int | None = Field(
        default=None, gt=0, description="Resample target size (n)"
    )
    replicates: int = Field(default=200, gt=0, description="Replicates per subsample (r)")
    quantiles: list[float] = Field(
        default_factory=lambda: list(DEFAULT_QUANTILES),
        min_length=1,
        description="Quantile probabilities in [0, 1]",
    )
    statistic: Literal["correlation", "mean"] = Field(
        default="correlation", description="Estimator applied per replicate"
    )
    workers: int = Field(default=1, gt=0, description="Worker pool size")
    backend: Literal["process", "thread", "joblib", "sequential"] = Field(
        default="process", description="Parallel backend"
    )
    seed: int | None = Field(default=None, description="Random seed (None = entropy)")
    on_subsample_failure: Literal["abort", "exclude"] = Field(
        default="abort", description="Policy when a subsample has no usable replicate"
    )

    @field_validator("quantiles")
    @classmethod
    def validate_quantile_range(cls, v: list[float]) -> list[float]:
        """Ensure all probabilities lie in [0, 1] and are sorted."""
        for prob in v:
            if not 0.0 <= prob <= 1.0:
                raise ValueError(f"Quantile {prob} outside [0, 1]")
        return sorted(v)

    @model_validator(mode="after")
    def validate_b_not_above_n(self) -> "RunConfig":
        """Ensure b <= n when both are given."""
        if (
            self.subsample_size is not None
            and self.resample_size is not None
            and self.subsample_size > self.resample_size
        ):
            raise ValueError("subsample_size must be <= resample_size")
        return self


class DataSourceConfig(BaseModel):
    """Location of the input records.

    ``path`` is either a single CSV file (subsamples drawn in memory) or a
    directory of ``<partition>.csv`` files (one subsample per partition).
    """

    path: str = Field(description="CSV file or directory of CSV partitions")
    x_column: str = Field(default=COLUMN_X, description="Column holding x")
    y_column: str = Field(default=COLUMN_Y, description="Column holding y")
    partitions: list[str] | None = Field(
        default=None, description="Partition ids to use (default: all files)"
    )


class BLBConfig(BaseModel):
    """Top-level configuration file for ``blb-quant run``."""

    run: RunConfig = Field(default_factory=RunConfig, description="Run parameters")
    data: DataSourceConfig | None = Field(default=None, description="Input data")

    def to_params(self) -> BLBParams:
        run = self.run
        return BLBParams(
            n_subsamples=run.subsamples,
            subsample_size=run.subsample_size,
            resample_size=run.resample_size,
            n_replicates=run.replicates,
            quantiles=tuple(run.quantiles),
            statistic=run.statistic,
            worker_count=run.workers,
            backend=run.backend,
            random_seed=run.seed,
            on_subsample_failure=run.on_subsample_failure,
        )
