"""
Configuration Loader (``enum_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the frozen
``enum_config.schema.EnumKernelConfig``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; unknown keys are rejected rather than ignored.
* The parsed object is a frozen dataclass.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``enum_kernel`` section  -> ``KeyError``.
* Wrong value types / unknown keys / unknown log level  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from enum_config.schema import LOG_LEVELS, WARM_UP_ALL, EnumKernelConfig

ROOT_KEY = "enum_kernel"

_KNOWN_KEYS = frozenset({"annotation_key", "listen_refresh", "warm_up", "log_level"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_config(data: dict[str, Any]) -> EnumKernelConfig:
    """
    Parse an ``EnumKernelConfig`` from the top-level YAML mapping.

    Preconditions:
        - ``data`` has an ``enum_kernel`` mapping (it may be empty).
    Postconditions:
        - Returns a frozen ``EnumKernelConfig``; absent keys take defaults.
    Raises:
        KeyError: if the ``enum_kernel`` section is missing.
        ValueError: on unknown keys or values of the wrong type.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")
    section = data[ROOT_KEY]
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ValueError(f"'{ROOT_KEY}' must be a mapping, got {type(section).__name__}")

    unknown = set(section) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown keys in '{ROOT_KEY}': {', '.join(sorted(unknown))}")

    defaults = EnumKernelConfig()

    annotation_key = section.get("annotation_key", defaults.annotation_key)
    if not isinstance(annotation_key, str) or not annotation_key:
        raise ValueError(f"annotation_key must be a non-empty string, got {annotation_key!r}")

    listen_refresh = section.get("listen_refresh", defaults.listen_refresh)
    if not isinstance(listen_refresh, bool):
        raise ValueError(f"listen_refresh must be a boolean, got {listen_refresh!r}")

    log_level = str(section.get("log_level", defaults.log_level)).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    return EnumKernelConfig(
        annotation_key=annotation_key,
        listen_refresh=listen_refresh,
        warm_up=parse_warm_up(section.get("warm_up")),
        log_level=log_level,
    )


def parse_warm_up(value: Any) -> tuple[str, ...]:
    """Parse the warm_up list: dotted type paths, or "*" for every mapped class."""
    if value is None:
        return ()
    if value == WARM_UP_ALL:
        return (WARM_UP_ALL,)
    if not isinstance(value, list):
        raise ValueError(f"warm_up must be a list or '{WARM_UP_ALL}', got {value!r}")
    paths = []
    for entry in value:
        if not isinstance(entry, str) or not entry:
            raise ValueError(f"warm_up entries must be non-empty strings, got {entry!r}")
        if entry != WARM_UP_ALL and "." not in entry:
            raise ValueError(f"warm_up entry must be a dotted path 'module.Class', got {entry!r}")
        paths.append(entry)
    return tuple(paths)


def load_config(path: Path) -> EnumKernelConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(Path(path)))
