"""
Structured JSON logging for the enum kernel.

Every kernel log line is one JSON object.  Fields describing the load being
processed (which ORM event fired, which record type, which field) are not
passed with each call; the listener, resolver and materializer bind them
with LoadContext.bind() and the formatter merges them into every line
emitted inside that scope:

    with LoadContext.bind(load_event="load", record_type="app.Ticket"):
        with LoadContext.bind(field_name="status"):
            logger.error("enum_value_invalid", extra={"value": "'X'"})

    {"ts": "...", "level": "ERROR", "logger": "enum_kernel.services...",
     "message": "enum_value_invalid", "load_event": "load",
     "record_type": "app.Ticket", "field_name": "status", "value": "'X'"}
"""

__all__ = [
    "LOAD_CONTEXT_FIELDS",
    "LoadContext",
    "StructuredFormatter",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

# ---------------------------------------------------------------------------
# Load context
# ---------------------------------------------------------------------------

LOAD_CONTEXT_FIELDS = ("load_event", "record_type", "field_name")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_load_context: ContextVar[Mapping[str, str]] = ContextVar(
    "enum_kernel_load_context", default=_EMPTY
)


class LoadContext:
    """Async-safe scope of the record load currently being processed."""

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[Mapping[str, str]]:
        """Layer fields over the current scope until the block exits.

        None values are ignored, so callers may pass optional fields as-is.

        Raises:
            TypeError: If a field is not one of LOAD_CONTEXT_FIELDS.
        """
        unknown = set(fields) - set(LOAD_CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown load context fields: {sorted(unknown)}")

        merged = dict(_load_context.get())
        merged.update((k, v) for k, v in fields.items() if v is not None)
        scope = MappingProxyType(merged)
        token = _load_context.set(scope)
        try:
            yield scope
        finally:
            _load_context.reset(token)

    @staticmethod
    def current() -> dict[str, str]:
        """Fields bound in the current scope, in LOAD_CONTEXT_FIELDS order."""
        scope = _load_context.get()
        return {name: scope[name] for name in LOAD_CONTEXT_FIELDS if name in scope}


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    # Enum members log as their scalar; value sets in a stable order.
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    if isinstance(obj, type):
        return f"{obj.__module__}.{obj.__qualname__}"
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # EnumKernelError subclasses keep their context as public attributes.
    for key, value in vars(exc).items():
        if not key.startswith("_"):
            fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LoadContext.current())
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STDLIB_KEYS and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "enum_kernel"
_HANDLER_NAME = "enum_kernel.structured"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the enum_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_lock = threading.Lock()


def _installed_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """
    Route the enum_kernel logger hierarchy to a JSON handler.

    Idempotent: once a structured handler is installed, later calls return
    it and change nothing, so a host that configured logging first keeps
    its level.
    """
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        installed = _installed_handler(kernel_logger)
        if installed is not None:
            return installed

        h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        h.set_name(_HANDLER_NAME)
        h.setFormatter(StructuredFormatter())
        kernel_logger.setLevel(level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(h)
        return h


def reset_logging() -> None:
    """Remove the structured handler and restore defaults. FOR TESTING ONLY."""
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        installed = _installed_handler(kernel_logger)
        if installed is not None:
            kernel_logger.removeHandler(installed)
        kernel_logger.setLevel(logging.NOTSET)
        kernel_logger.propagate = True
