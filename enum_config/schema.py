"""
EnumKernelConfig schema.

Human-authored YAML is parsed into this frozen dataclass by the loader and
consumed by ``enum_config.bootstrap``.
"""

from __future__ import annotations

from dataclasses import dataclass

# Sentinel warm-up entry: every mapped class of the declarative base.
WARM_UP_ALL = "*"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EnumKernelConfig:
    """Settings for the enum post-load listener."""

    annotation_key: str = "enum"
    listen_refresh: bool = True
    warm_up: tuple[str, ...] = ()  # dotted record type paths, or ("*",)
    log_level: str = "INFO"

    @property
    def warm_up_all(self) -> bool:
        return WARM_UP_ALL in self.warm_up
