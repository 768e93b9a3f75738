"""
enum_config -- single public entrypoint for enum kernel configuration.

Responsibility:
    Provides ``get_active_config()`` to obtain the settings and
    ``bootstrap()`` to install a configured enum post-load listener on a
    declarative base at process start.

Architecture position:
    Configuration -- sits above ``enum_kernel``.  The kernel MUST NEVER
    import from ``enum_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configured file does not exist.
    - ``ValueError`` / ``KeyError`` -- schema validation failures, or a
      warm-up type that cannot be imported.
    - ``NotAnEnumError`` / ``UnsupportedMetadataError`` -- raised by warm-up
      for a misconfigured record type, at startup instead of on first load.

Audit relevance:
    Every ``get_active_config()`` call emits an ``ENUM_CONFIG_TRACE`` log
    entry with the source file and the effective settings.
"""

from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path

from enum_config.loader import load_config
from enum_config.schema import EnumKernelConfig
from enum_kernel.db.listeners import (
    EnumLoadEventHandler,
    mapped_classes,
    register_enum_listeners,
)
from enum_kernel.logging_config import configure_logging
from enum_kernel.services.enum_fields_cache import EnumFieldsCache
from enum_kernel.services.post_load_listener import EnumPostLoadListener

_logger = logging.getLogger("enum_kernel.config")

CONFIG_ENV_VAR = "ENUM_KERNEL_CONFIG"

__all__ = [
    "CONFIG_ENV_VAR",
    "EnumKernelConfig",
    "bootstrap",
    "get_active_config",
    "load_config",
]


def get_active_config(path: Path | str | None = None) -> EnumKernelConfig:
    """
    Return the active configuration.

    Resolution order: the explicit ``path``; the file named by the
    ``ENUM_KERNEL_CONFIG`` environment variable; built-in defaults.

    Raises:
        FileNotFoundError: If the selected file does not exist.
        ValueError / KeyError: If the file fails validation.
    """
    source = path or os.environ.get(CONFIG_ENV_VAR)
    config = load_config(Path(source)) if source else EnumKernelConfig()

    _logger.info(
        "ENUM_CONFIG_TRACE",
        extra={
            "trace_type": "ENUM_CONFIG_TRACE",
            "config_source": str(source) if source else "defaults",
            "annotation_key": config.annotation_key,
            "listen_refresh": config.listen_refresh,
            "warm_up_count": len(config.warm_up),
        },
    )
    return config


def bootstrap(
    base: type,
    config: EnumKernelConfig | None = None,
    cache: EnumFieldsCache | None = None,
) -> EnumLoadEventHandler:
    """
    Install a configured enum post-load listener on a declarative base.

    Postconditions:
        - enum_kernel logging is configured at ``config.log_level``.
        - Every mapped class of ``base`` has load (and, if configured,
          refresh) listeners attached.
        - The cache holds the enum field map of every warm-up type.
        - Warm-up runs before registration, so a misconfigured record type
          leaves no listener attached.

    Returns:
        The event handler; ``handler.listener`` is the installed listener.
        Pass the handler to ``unregister_enum_listeners()`` to detach it.
    """
    config = config or get_active_config()
    configure_logging(level=config.log_level)

    listener = EnumPostLoadListener.for_sqlalchemy(
        cache=cache,
        annotation_key=config.annotation_key,
    )
    if config.warm_up_all:
        record_types = mapped_classes(base)
    else:
        record_types = [_import_record_type(path) for path in config.warm_up]
    for record_type in record_types:
        listener.warm_up_cache(record_type)

    handler = register_enum_listeners(base, listener, listen_refresh=config.listen_refresh)

    _logger.info(
        "enum_cache_warmed",
        extra={"record_types": [f"{t.__module__}.{t.__qualname__}" for t in record_types]},
    )
    return handler


def _import_record_type(path: str) -> type:
    module_path, _, attr = path.rpartition(".")
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ValueError(f"Cannot import warm-up module {module_path!r}: {exc}") from exc
    record_type = getattr(module, attr, None)
    if not isinstance(record_type, type):
        raise ValueError(f"Warm-up type {path!r} is not a class")
    return record_type
