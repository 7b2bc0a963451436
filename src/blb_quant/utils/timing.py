"""Medição de tempo de execução de trechos críticos."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .logging_config import get_logger

__all__ = ["time_block"]

default_logger = get_logger(__name__)


@contextmanager
def time_block(
    name: str,
    logger: Optional[logging.Logger] = None,
    collect_metrics: Optional[Dict[str, float]] = None,
) -> Iterator[None]:
    """
    Context manager para medir e registrar o tempo de execução de um bloco.

    Args:
        name (str): Nome descritivo do bloco medido.
        logger (Optional[logging.Logger]): Logger a ser usado. Se None, usa o
                                           logger do módulo.
        collect_metrics (Optional[Dict]): Dicionário onde a duração é gravada
                                          sob a chave ``timing.<name>``.
    """
    log = logger or default_logger
    start_time = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start_time
        log.info("Block '%s' executed in %.4fs", name, duration)
        if collect_metrics is not None:
            metric_name = f"timing.{name.replace(' ', '_').lower()}"
            collect_metrics[metric_name] = duration
