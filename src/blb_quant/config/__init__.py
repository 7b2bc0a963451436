"""Convenience exports for the configuration package."""

from .constants import *  # noqa: F401,F403
from .loader import ConfigError, load_config, save_config
from .logging_conf import JSONFormatter, SubsampleFilter, configure_logging, subsample_context
from .params_default import DEFAULT_PARAMS, BLBParams, merge_params
from .schemas import BLBConfig, DataSourceConfig, RunConfig
from .settings import ENV_PREFIX, Settings, get_settings, reset_settings_cache

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "SubsampleFilter",
    "subsample_context",
    "DEFAULT_PARAMS",
    "BLBParams",
    "merge_params",
    "ENV_PREFIX",
    "Settings",
    "get_settings",
    "reset_settings_cache",
    # Schema classes
    "BLBConfig",
    "DataSourceConfig",
    "RunConfig",
    # Loader functions
    "load_config",
    "save_config",
    "ConfigError",
]
