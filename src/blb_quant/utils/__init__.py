"""Shared utilities: logging, parallelism, seeds, timing.

Componentes expostos
--------------------
- `logging_config` → loggers de módulo e serialização de dicionários.
- `parallel` → *pool* de workers com preservação de ordem e captura de exceções.
- `seed` → geradores determinísticos por tarefa (``SeedSequence.spawn``).
- `timing` → medição de tempo de blocos críticos.

Importe via ``from blb_quant.utils import ...`` para manter acoplamento baixo.
"""
