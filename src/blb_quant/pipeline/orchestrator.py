"""BLB run orchestrator.

This module turns an input (one in-memory dataset, a partition source or a
list of pre-drawn subsamples) into one task per subsample, runs the tasks on a
bounded worker pool and averages the results:

1. Seeds: one ``(draw, bootstrap)`` pair of ``SeedSequence`` per task, spawned
   from ``random_seed`` in task order
2. Subsamples: drawn inside the worker, from the shared in-memory population
   or from a partition loaded by the worker itself
3. Replication: ``r`` multinomial replicates per subsample
4. Join: all tasks complete before the summaries are averaged

Each task owns its rows and its generator, so the result does not depend on
the backend, the worker count or the completion order.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Sequence, Union

import numpy as np
import pandas as pd

from blb_quant.config import DEFAULT_PARAMS, BLBConfig, BLBParams, merge_params
from blb_quant.config.constants import subsample_size_for
from blb_quant.config.logging_conf import subsample_context
from blb_quant.data.dataset import Dataset, Subsample, draw_subsample, to_dataset
from blb_quant.data.sources import CSVPartitionSource, PartitionSource, load_csv_dataset
from blb_quant.estimators.weighted import drop_incomplete, get_statistic
from blb_quant.evaluation.stats.aggregate import FinalEstimate, aggregate_summaries
from blb_quant.evaluation.stats.bootstrap import (
    InsufficientDataError,
    SubsampleSummary,
    bootstrap_subsample,
)
from blb_quant.utils.logging_config import get_logger, log_dict
from blb_quant.utils.parallel import parallel_map
from blb_quant.utils.seed import register_seed_logging, task_seed_sequences
from blb_quant.utils.timing import time_block

__all__ = [
    "SubsampleTask",
    "run_subsample_task",
    "build_dataset_tasks",
    "build_partition_tasks",
    "build_subsample_tasks",
    "run_blb",
    "run_from_config",
]

logger = get_logger(__name__)

BLBInput = Union[Dataset, pd.DataFrame, PartitionSource, Sequence[Subsample]]


def _complete(dataset: Dataset) -> Dataset:
    if dataset.n_missing == 0:
        return dataset
    x, y = drop_incomplete(dataset.x, dataset.y)
    return Dataset(x, y)


@dataclass(frozen=True)
class SubsampleTask:
    """Everything one worker needs to process one subsample end-to-end.

    Exactly one of ``subsample`` (rows already drawn), ``population`` (complete
    rows to draw from) or ``source`` (partition loaded in the worker) is set.
    ``resample_size=None`` means "the number of usable rows of the partition".
    """

    subsample_id: Hashable
    n_replicates: int
    quantiles: tuple[float, ...]
    statistic: str
    boot_seed: np.random.SeedSequence
    resample_size: int | None = None
    subsample: Subsample | None = None
    population: Dataset | None = None
    source: PartitionSource | None = None
    subsample_size: int | None = None
    draw_seed: np.random.SeedSequence | None = None

    def materialize(self) -> tuple[Subsample, int]:
        """Return the subsample and the resample size ``n`` to use for it."""
        if self.subsample is not None:
            if self.resample_size is None:
                raise ValueError("resample_size is required for pre-drawn subsamples")
            return self.subsample, self.resample_size

        if self.draw_seed is None:
            raise ValueError(f"Task {self.subsample_id!r} has no draw seed")
        if self.population is not None:
            partition = self.population
        elif self.source is not None:
            partition = _complete(self.source.load_partition(self.subsample_id))
        else:
            raise ValueError(f"Task {self.subsample_id!r} has neither rows nor a source")

        if len(partition) == 0:
            raise InsufficientDataError(self.subsample_id, "partition has no complete rows")
        if self.subsample_size is not None and self.subsample_size > len(partition):
            raise InsufficientDataError(
                self.subsample_id,
                f"only {len(partition)} complete row(s) for b={self.subsample_size}",
            )
        n = self.resample_size if self.resample_size is not None else len(partition)
        subsample = draw_subsample(
            partition,
            self.subsample_size,
            np.random.default_rng(self.draw_seed),
            subsample_id=self.subsample_id,
        )
        return subsample, n


def run_subsample_task(task: SubsampleTask) -> SubsampleSummary:
    """Worker entry point: materialize the subsample and bootstrap it.

    Records logged while the task runs carry its ``subsample_id``.
    """
    with subsample_context(task.subsample_id):
        subsample, n = task.materialize()
        logger.debug("Bootstrapping %d row(s) with n=%d", len(subsample), n)
        return bootstrap_subsample(
            subsample,
            n=n,
            r=task.n_replicates,
            rng=np.random.default_rng(task.boot_seed),
            quantiles=task.quantiles,
            statistic=get_statistic(task.statistic),
        )


def build_dataset_tasks(dataset: Dataset, params: BLBParams) -> list[SubsampleTask]:
    """Plan ``s`` subsamples of size ``b`` over one in-memory dataset.

    Rows with missing fields are dropped from the population first, so every
    subsample holds exactly ``b`` usable rows. ``b`` defaults to ``N ** 0.6``
    and ``n`` to the number of usable rows ``N``. Each task carries the
    population and its own draw seed; the rows are drawn in the worker.
    """
    population = _complete(dataset)
    if len(population) == 0:
        raise ValueError("Dataset has no complete rows")
    if population is not dataset:
        logger.info("Dropped %d incomplete row(s) from the population", dataset.n_missing)

    b = params.subsample_size or subsample_size_for(len(population))
    if b > len(population):
        raise ValueError(f"Cannot draw {b} rows without replacement from {len(population)}")
    n = params.resample_size or len(population)
    return [
        SubsampleTask(
            subsample_id=index,
            n_replicates=params.n_replicates,
            quantiles=tuple(params.quantiles),
            statistic=params.statistic,
            boot_seed=boot_seq,
            resample_size=n,
            population=population,
            subsample_size=b,
            draw_seed=draw_seq,
        )
        for index, (draw_seq, boot_seq) in enumerate(
            task_seed_sequences(params.random_seed, params.n_subsamples)
        )
    ]


def build_partition_tasks(
    source: PartitionSource,
    params: BLBParams,
    partition_ids: Sequence[Hashable] | None = None,
) -> list[SubsampleTask]:
    """One task per partition, at most ``n_subsamples`` of them.

    Partitions are loaded inside the workers so the parent never holds more
    than the task descriptions.
    """
    ids = list(partition_ids) if partition_ids is not None else list(source.partition_ids())
    if not ids:
        raise ValueError("Partition source has no partitions")
    if len(ids) < params.n_subsamples:
        logger.warning(
            "Only %d partition(s) available for %d requested subsamples",
            len(ids),
            params.n_subsamples,
        )
    ids = ids[: params.n_subsamples]
    return [
        SubsampleTask(
            subsample_id=pid,
            n_replicates=params.n_replicates,
            quantiles=tuple(params.quantiles),
            statistic=params.statistic,
            boot_seed=boot_seq,
            resample_size=params.resample_size,
            source=source,
            subsample_size=params.subsample_size,
            draw_seed=draw_seq,
        )
        for pid, (draw_seq, boot_seq) in zip(ids, task_seed_sequences(params.random_seed, len(ids)))
    ]


def build_subsample_tasks(
    subsamples: Sequence[Subsample], params: BLBParams
) -> list[SubsampleTask]:
    """Wrap pre-drawn subsamples; ``params.resample_size`` is required."""
    if params.resample_size is None:
        raise ValueError("resample_size must be given for pre-drawn subsamples")
    return [
        SubsampleTask(
            subsample_id=subsample.subsample_id,
            n_replicates=params.n_replicates,
            quantiles=tuple(params.quantiles),
            statistic=params.statistic,
            boot_seed=boot_seq,
            resample_size=params.resample_size,
            subsample=subsample,
        )
        for subsample, (_, boot_seq) in zip(
            subsamples, task_seed_sequences(params.random_seed, len(subsamples))
        )
    ]


def _build_tasks(
    data: BLBInput, params: BLBParams, partition_ids: Sequence[Hashable] | None
) -> list[SubsampleTask]:
    if isinstance(data, PartitionSource):
        return build_partition_tasks(data, params, partition_ids)
    if isinstance(data, (Dataset, pd.DataFrame)):
        return build_dataset_tasks(to_dataset(data), params)
    subsamples = list(data)
    if not all(isinstance(item, Subsample) for item in subsamples):
        raise TypeError(
            "data must be a Dataset, a DataFrame, a PartitionSource or a sequence of Subsample"
        )
    return build_subsample_tasks(subsamples, params)


def run_blb(
    data: BLBInput,
    params: BLBParams | None = None,
    *,
    partition_ids: Sequence[Hashable] | None = None,
    **overrides: object,
) -> FinalEstimate:
    """Compute the Bag of Little Bootstraps estimate for ``data``.

    Args:
        data: In-memory dataset/DataFrame, partition source or pre-drawn subsamples
        params: Run parameters (defaults to :data:`DEFAULT_PARAMS`)
        partition_ids: Restrict a partition source to these ids
        **overrides: Individual :class:`BLBParams` fields to replace

    Returns:
        FinalEstimate averaged over all successful subsamples

    Raises:
        AggregationError: If a subsample fails under the ``"abort"`` policy,
            or every subsample fails under ``"exclude"``
    """
    base = params or DEFAULT_PARAMS
    params = (merge_params(overrides, base=base) if overrides else base).validate()

    log_dict(logger, "Starting BLB run", params.to_dict())
    register_seed_logging(logger, params.random_seed)

    with time_block("blb_run", logger=logger):
        tasks = _build_tasks(data, params, partition_ids)
        results = parallel_map(
            run_subsample_task,
            tasks,
            backend=params.backend,
            max_workers=params.worker_count,
        )

    summaries: list[SubsampleSummary] = []
    failures: list[tuple[Hashable, BaseException]] = []
    for task, result in zip(tasks, results):
        if isinstance(result, BaseException):
            logger.error(
                "Subsample failed: %s", result, extra={"subsample_id": task.subsample_id}
            )
            failures.append((task.subsample_id, result))
        else:
            summaries.append(result)

    estimate = aggregate_summaries(summaries, failures, on_failure=params.on_subsample_failure)
    logger.info(
        "BLB estimate over %d subsample(s): %s (degraded: %d, excluded: %d)",
        estimate.n_subsamples,
        {k: round(v, 6) for k, v in estimate.quantiles.items()},
        len(estimate.degraded_subsamples),
        len(estimate.excluded_subsamples),
    )
    return estimate


def run_from_config(config: BLBConfig, **overrides: object) -> FinalEstimate:
    """Run BLB on the data described by ``config.data``.

    A file path is read as one in-memory dataset; a directory is read as one
    CSV partition per file.
    """
    if config.data is None:
        raise ValueError("Configuration has no 'data' section")
    params = merge_params(overrides, base=config.to_params()) if overrides else config.to_params()

    path = Path(config.data.path).expanduser()
    if path.is_dir():
        source = CSVPartitionSource(
            path, x_column=config.data.x_column, y_column=config.data.y_column
        )
        return run_blb(source, params, partition_ids=config.data.partitions)
    dataset = load_csv_dataset(path, x_column=config.data.x_column, y_column=config.data.y_column)
    return run_blb(dataset, params)
