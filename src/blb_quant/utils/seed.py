"""Gerenciamento determinístico de seeds.

Cada subamostra do BLB recebe o seu próprio ``numpy.random.Generator``,
derivado de uma única seed via ``SeedSequence.spawn``. Assim os resultados não
dependem da ordem de execução nem do backend do *pool* (processos, threads ou
sequencial), e nenhuma tarefa toca o estado global de ``numpy.random``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

__all__ = [
    "MAX_SEED_VALUE",
    "normalize_seed",
    "rng_factory",
    "spawn_seed_sequences",
    "task_seed_sequences",
    "register_seed_logging",
]

# Constante para normalização da seed
MAX_SEED_VALUE = 2**32


def normalize_seed(seed: int) -> int:
    """Map any integer (negative or > 2**32 - 1) into ``[0, 2**32 - 1]``."""
    return abs(int(seed)) % MAX_SEED_VALUE


def rng_factory(seed: Optional[int] = None) -> np.random.Generator:
    """
    Cria um gerador isolado (PCG64) que não afeta o estado global ``np.random``.

    Args:
        seed (Optional[int]): A seed para o gerador. Se None, a inicialização
                              será não-determinística.
    """
    return np.random.default_rng(None if seed is None else normalize_seed(seed))


def spawn_seed_sequences(seed: Optional[int], count: int) -> List[np.random.SeedSequence]:
    """
    Deriva ``count`` sequências independentes a partir de ``seed``.

    As sequências são picklable, então podem atravessar a fronteira de um
    ``ProcessPoolExecutor`` e virar geradores dentro do worker.
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    root = np.random.SeedSequence(None if seed is None else normalize_seed(seed))
    return root.spawn(count)


def register_seed_logging(logger: logging.Logger, seed: Optional[int]) -> None:
    """Loga a seed utilizada para fins de auditoria e reprodutibilidade."""
    if seed is None:
        logger.info("Execução sem seed fixa (entropia do sistema)")
    else:
        logger.info("Execução utilizando a seed: %s", seed)


def task_seed_sequences(
    seed: Optional[int], count: int
) -> List[Tuple[np.random.SeedSequence, np.random.SeedSequence]]:
    """
    Para cada tarefa, devolve ``(seq_sorteio, seq_bootstrap)``.

    A primeira sequência sorteia as linhas da subamostra; a segunda alimenta
    os vetores de pesos. Separá-las garante que subamostras pré-sorteadas e
    subamostras sorteadas no worker usem o mesmo fluxo de bootstrap.
    """
    return [tuple(child.spawn(2)) for child in spawn_seed_sequences(seed, count)]  # type: ignore[misc]
