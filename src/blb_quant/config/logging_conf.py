"""Configuração padronizada de *logging* para o projeto.

Além do formato (texto ou JSON), os *handlers* instalados aqui carimbam cada
registro com a subamostra em processamento. O orquestrador abre
:func:`subsample_context` em volta de cada tarefa, de modo que mensagens
emitidas pelo bootstrap de um worker carregam ``subsample_id`` sem que o
código de estatística precise conhecê-lo.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Hashable, Iterator, Mapping

from .constants import LOG_FILE_NAME
from .settings import Settings, get_settings

__all__ = [
    "JSONFormatter",
    "SubsampleFilter",
    "configure_logging",
    "subsample_context",
]

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s%(subsample_tag)s | %(message)s"

_SUBSAMPLE: ContextVar[Hashable | None] = ContextVar("blb_subsample_id", default=None)


_RESERVED = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    # written by SubsampleFilter
    "subsample_id",
    "subsample_tag",
}


@contextmanager
def subsample_context(subsample_id: Hashable) -> Iterator[None]:
    """Marca os registros emitidos dentro do bloco com ``subsample_id``."""
    token = _SUBSAMPLE.set(subsample_id)
    try:
        yield
    finally:
        _SUBSAMPLE.reset(token)


class SubsampleFilter(logging.Filter):
    """Anexa ``subsample_id`` e a etiqueta de texto ``subsample_tag`` ao registro.

    Um ``subsample_id`` passado via ``extra=`` é mantido quando não há contexto
    ativo.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        active = _SUBSAMPLE.get()
        if active is not None or not hasattr(record, "subsample_id"):
            record.subsample_id = active
        subsample_id = record.subsample_id
        record.subsample_tag = "" if subsample_id is None else f" [subsample {subsample_id!r}]"
        return True


class JSONFormatter(logging.Formatter):
    """Formatador que serializa ``LogRecord`` em JSON."""

    def __init__(self, *, default_context: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._default_context = dict(default_context or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        payload.update(self._default_context)
        subsample_id = getattr(record, "subsample_id", None)
        if subsample_id is not None:
            payload["subsample_id"] = subsample_id

        for key, value in record.__dict__.items():
            if key in _RESERVED:
                continue
            payload.setdefault(key, value)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _ensure_log_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def configure_logging(
    *,
    settings: Settings | None = None,
    level: int | str = logging.INFO,
    structured: bool | None = None,
    stream: IO[str] | None = None,
    context: Mapping[str, Any] | None = None,
    log_file: Path | None = None,
) -> None:
    """Configure the root logger using the project defaults.

    Both handlers carry a :class:`SubsampleFilter`, so records emitted inside
    :func:`subsample_context` show the subsample id in either format.

    Parameters
    ----------
    settings:
        Instância de :class:`Settings` a ser utilizada. Quando ``None`` o
        *singleton* de :func:`get_settings` é empregado.
    level:
        Nível padrão para o *root logger*.
    structured:
        Se ``True`` utiliza :class:`JSONFormatter`. Quando ``None`` utiliza o
        valor padrão definido em ``settings.structured_logging``.
    stream:
        Alvo para o ``StreamHandler`` principal; por padrão ``sys.stderr``.
    context:
        Campos extras aplicados a todos os registros (ex.: ``{"seed": 42}``).
    log_file:
        Caminho alternativo para escrever uma cópia dos logs (append). Caso
        ``None`` utiliza ``settings.logs_dir / 'blb_quant.log'``.
    """

    settings = settings or get_settings()
    structured = settings.structured_logging if structured is None else structured

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    formatter: logging.Formatter
    if structured:
        formatter = JSONFormatter(default_context=context)
    else:
        formatter = logging.Formatter(fmt=PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    subsample_filter = SubsampleFilter()

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(subsample_filter)
    root_logger.addHandler(stream_handler)

    file_target = log_file or (settings.logs_dir / LOG_FILE_NAME)
    try:
        _ensure_log_dir(file_target.parent)
        file_handler = logging.FileHandler(file_target, encoding="utf-8")
    except OSError:  # pragma: no cover - filesystem issues exercised indirectly
        root_logger.warning("Could not open log file %s; logging to stream only", file_target)
    else:
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(subsample_filter)
        root_logger.addHandler(file_handler)
