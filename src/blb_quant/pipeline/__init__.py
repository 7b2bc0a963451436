"""Pipeline orchestration: task building, worker pool dispatch and reduction."""

from __future__ import annotations

from .orchestrator import (
    SubsampleTask,
    build_dataset_tasks,
    build_partition_tasks,
    build_subsample_tasks,
    run_blb,
    run_from_config,
    run_subsample_task,
)

__all__ = [
    "SubsampleTask",
    "build_dataset_tasks",
    "build_partition_tasks",
    "build_subsample_tasks",
    "run_blb",
    "run_from_config",
    "run_subsample_task",
]
