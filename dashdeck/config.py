# dashdeck/config.py
"""
Configuration for the console host.
Provides centralized configuration loaded from the environment or a dictionary.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List

from dashdeck.observability.logging import ALL_LOGGERS

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _split_paths(raw: str) -> List[str]:
    return [p for p in raw.split(":") if p]


def _flag(raw: str) -> bool:
    return raw.lower() in ("1", "true", "yes")


@dataclass
class ConsoleConfig:
    """Configuration for the console host and its extension loader."""

    # Extension discovery
    extension_dirs: List[str] = field(default_factory=lambda: ["extensions"])
    extension_paths: List[str] = field(default_factory=list)
    entry_point_group: str = "dashdeck.extensions"

    # Mounting
    mount_root: str = "/ext"
    require_scopes: bool = False
    freeze_registry: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    @classmethod
    def from_environment(cls) -> "ConsoleConfig":
        """Create configuration from environment variables."""
        return cls(
            extension_dirs=_split_paths(os.environ.get("DASHDECK_EXT_DIRS", "extensions")),
            extension_paths=_split_paths(os.environ.get("DASHDECK_EXT_PATHS", "")),
            entry_point_group=os.environ.get("DASHDECK_ENTRY_POINT_GROUP", "dashdeck.extensions"),
            mount_root=os.environ.get("DASHDECK_MOUNT_ROOT", "/ext"),
            require_scopes=_flag(os.environ.get("DASHDECK_REQUIRE_SCOPES", "false")),
            freeze_registry=_flag(os.environ.get("DASHDECK_FREEZE_REGISTRY", "true")),
            log_level=os.environ.get("DASHDECK_LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ConsoleConfig":
        """Create configuration from dictionary."""
        return cls(
            extension_dirs=list(config_dict.get("extension_dirs", ["extensions"])),
            extension_paths=list(config_dict.get("extension_paths", [])),
            entry_point_group=config_dict.get("entry_point_group", "dashdeck.extensions"),
            mount_root=config_dict.get("mount_root", "/ext"),
            require_scopes=bool(config_dict.get("require_scopes", False)),
            freeze_registry=bool(config_dict.get("freeze_registry", True)),
            log_level=config_dict.get("log_level", "INFO"),
            log_format=config_dict.get("log_format", DEFAULT_LOG_FORMAT),
        )


def setup_logging(config: ConsoleConfig) -> None:
    """Apply the configured level to the console's structured loggers."""
    level = getattr(logging, config.log_level.upper())
    logging.basicConfig(level=level, format=config.log_format)
    for structured in ALL_LOGGERS:
        structured.set_level(level)
