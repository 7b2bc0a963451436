"""Configuration loading and validation utilities.

YAML files are parsed with PyYAML and validated against the Pydantic schemas
in :mod:`blb_quant.config.schemas`. Relative paths are resolved against the
project root first and the working directory second.

Example
-------
>>> from blb_quant.config.loader import load_config
>>> config = load_config("configs/blb_default.yaml")
>>> config.run.replicates
200
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .schemas import BLBConfig

__all__ = ["load_config", "save_config", "ConfigError"]

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""


def _default_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(file_path: str | Path, project_root: Path | None = None) -> Path:
    """Resolve ``file_path`` to an existing file or raise ``FileNotFoundError``."""
    path = Path(file_path).expanduser()
    if path.is_absolute():
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {file_path}")

    candidate = (project_root or _default_root()) / path
    if candidate.exists():
        return candidate
    if path.exists():
        return path.resolve()
    raise FileNotFoundError(f"Config file not found: {file_path}")


def load_config(
    file_path: str | Path,
    schema: Type[T] = BLBConfig,  # type: ignore[assignment]
    *,
    project_root: Path | None = None,
    strict: bool = True,
) -> T:
    """Load and validate a YAML configuration file.

    Parameters
    ----------
    file_path : str or Path
        Path to YAML configuration file
    schema : Type[BaseModel], default=BLBConfig
        Pydantic model class to validate against
    project_root : Path, optional
        Project root directory for relative path resolution
    strict : bool, default=True
        If True, raise ``ConfigError`` on any failure. If False, log a warning
        and return ``schema()`` built from its defaults.

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, is empty or fails
        validation (only when ``strict=True``)
    """
    try:
        resolved = _resolve_config_path(file_path, project_root)
        logger.debug("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        if data is None:
            raise ConfigError(f"Empty configuration file: {file_path}")
        config = schema.model_validate(data)
    except ConfigError:
        if strict:
            raise
        logger.warning("Empty config %s, using defaults", file_path)
        return schema()
    except (FileNotFoundError, yaml.YAMLError, ValidationError) as exc:
        message = f"Could not load configuration {file_path}: {exc}"
        if strict:
            raise ConfigError(message) from exc
        logger.warning("%s; using defaults", message)
        return schema()

    logger.info("Loaded config: %s", resolved.name)
    return config


def save_config(config: BaseModel, file_path: str | Path) -> Path:
    """Write ``config`` as YAML, creating parent directories. Returns the path."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, default_flow_style=False, sort_keys=False, indent=2)

    logger.info("Saved configuration to: %s", path)
    return path
