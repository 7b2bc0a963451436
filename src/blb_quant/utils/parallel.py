"""Execução paralela de tarefas independentes.

Cada tarefa do BLB ("processar uma subamostra de ponta a ponta") é
independente das demais, então o *pool* apenas distribui, espera todas
terminarem (barreira) e devolve os resultados na ordem de entrada. Exceções
levantadas por um worker são capturadas e guardadas na posição do resultado,
para que o chamador decida a política (abortar ou excluir).
"""

from __future__ import annotations

import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Iterable, List, Optional

from joblib import Parallel, delayed

from .logging_config import get_logger

__all__ = ["parallel_map"]

logger = get_logger(__name__)

_EXECUTORS = {
    "thread": ThreadPoolExecutor,
    "process": ProcessPoolExecutor,
}


def _capture(func: Callable, item: Any) -> Any:
    try:
        return func(item)
    except Exception as exc:  # stored in place; re-raised by the caller's policy
        return exc


def parallel_map(
    func: Callable,
    iterable: Iterable,
    backend: str = "process",
    max_workers: Optional[int] = None,
) -> List[Any]:
    """
    Interface semelhante a `map` para execução paralela de tarefas.

    Args:
        func (Callable): A função aplicada a cada item. Para o backend
                         'process' precisa ser definida no nível do módulo.
        iterable (Iterable): Os itens a processar.
        backend (str): 'process' (padrão), 'thread', 'joblib' (loky) ou
                       'sequential' para debug.
        max_workers (Optional[int]): Tamanho máximo do *pool*. ``1`` força
                                     execução sequencial.

    Returns:
        List[Any]: Resultados na mesma ordem do iterável de entrada. Quando
        uma tarefa falha, a exceção ocupa a posição do resultado.
    """
    items = list(iterable)
    job_name = getattr(func, "__name__", "anonymous_job")
    logger.info(
        "Iniciando job '%s' com backend '%s' (%d tarefas, max_workers=%s)",
        job_name,
        backend,
        len(items),
        max_workers,
    )
    start_time = time.perf_counter()

    if backend == "sequential" or max_workers == 1 or len(items) <= 1:
        results = [_capture(func, item) for item in items]
    elif backend in _EXECUTORS:
        results = [None] * len(items)
        with _EXECUTORS[backend](max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(func, item): index for index, item in enumerate(items)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as exc:
                    logger.error("Worker da tarefa %d gerou uma exceção: %s", index, exc)
                    results[index] = exc
    elif backend == "joblib":
        tasks = [delayed(_capture)(func, item) for item in items]
        results = Parallel(n_jobs=max_workers or -1, backend="loky")(tasks)
    else:
        raise ValueError(
            f"Backend '{backend}' não reconhecido. Use 'process', 'thread', 'joblib' ou 'sequential'."
        )

    logger.info("Job '%s' concluído em %.2fs.", job_name, time.perf_counter() - start_time)
    return results
