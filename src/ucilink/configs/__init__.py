"""Configuration management utilities."""

from ucilink.configs.loader import load_config, save_config
from ucilink.configs.schema import (
    EngineConfig,
    SearchConfig,
    SessionConfig,
    config_from_dict,
    config_to_dict,
)

__all__ = [
    "EngineConfig",
    "SearchConfig",
    "SessionConfig",
    "config_from_dict",
    "config_to_dict",
    "load_config",
    "save_config",
]
