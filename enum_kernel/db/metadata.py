"""
Module: enum_kernel.db.metadata
Responsibility: SQLAlchemy implementations of the MetadataSource,
    AnnotationSource and ChangeTracker ports.
Architecture position: Kernel > DB.  The only kernel module (with
    db/listeners.py and db/types.py) allowed to touch SQLAlchemy internals.

Invariants enforced:
    - Field values are read from and written to the instance dict directly,
      never through instrumented attributes, so no lazy load fires and no
      attribute history is recorded by the write itself.
    - The change tracker commits the written value into the instance state,
      so the record is not dirty after materialization.

Failure modes:
    - UnsupportedMetadataError when a record type is not mapped (inspect()
      yields something other than a Mapper), when a field descriptor is not a
      ColumnProperty, or when an instance has no InstanceState.

Annotations:
    A field is enum-typed when its column (or column_property) carries the
    enum class, or its name, in ``info["enum"]``:

        status: Mapped[Status | None] = enum_column("Status", EnumScalar(1))

    Names are resolved against the record type's module:
        "Status"               -- attribute of the record's module
        "enums.Status"         -- attribute path from the record's module,
                                  falling back to an absolute import
        ".enums.Status"        -- relative to the record's package
"""

from __future__ import annotations

import importlib
import sys
from collections.abc import Hashable, Sequence
from types import ModuleType
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import ColumnProperty, InstanceState, Mapper
from sqlalchemy.orm.attributes import set_committed_value

from enum_kernel.domain.ports import EnumAnnotation, record_type_name
from enum_kernel.exceptions import UnsupportedMetadataError
from enum_kernel.logging_config import get_logger

logger = get_logger("db.metadata")

ENUM_INFO_KEY = "enum"


def _mapper(record_type: type) -> Mapper:
    mapper = inspect(record_type, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise UnsupportedMetadataError(
            type(mapper).__name__, record_type=record_type_name(record_type)
        )
    return mapper


def _state(instance: Any) -> InstanceState:
    state = inspect(instance, raiseerr=False)
    if not isinstance(state, InstanceState):
        raise UnsupportedMetadataError(
            type(state).__name__, record_type=record_type_name(type(instance))
        )
    return state


class SqlAlchemyMetadataSource:
    """MetadataSource over SQLAlchemy mappers and instance states."""

    def field_names(self, record_type: type) -> Sequence[str]:
        return [prop.key for prop in _mapper(record_type).column_attrs]

    def field_descriptor(self, record_type: type, field_name: str) -> Any:
        return _mapper(record_type).get_property(field_name)

    def get_field_value(self, instance: Any, field_name: str) -> Any:
        # Deferred or expired attributes are absent from the dict: treat as null.
        return _state(instance).dict.get(field_name)

    def set_field_value(self, instance: Any, field_name: str, value: Any) -> None:
        _state(instance).dict[field_name] = value

    def identity(self, instance: Any) -> Hashable:
        return _state(instance)

    def resolve_type_name(self, record_type: type, name: str | type) -> Any:
        if isinstance(name, type):
            return name
        if not isinstance(name, str) or not name:
            return None

        module = sys.modules.get(record_type.__module__)
        if name.startswith("."):
            return _resolve_relative(name, module)

        resolved = _walk(module, name.split(".")) if module is not None else None
        if resolved is not None:
            return resolved
        if "." in name:
            module_path, _, attr = name.rpartition(".")
            return _import_attr(module_path, attr)
        return None


def _walk(target: Any, parts: list[str]) -> Any:
    for part in parts:
        target = getattr(target, part, None)
        if target is None:
            return None
    return target


def _resolve_relative(name: str, module: ModuleType | None) -> Any:
    if module is None or not module.__package__:
        return None
    stripped = name.lstrip(".")
    dots = name[: len(name) - len(stripped)]
    module_path, _, attr = stripped.rpartition(".")
    return _import_attr(dots + module_path, attr, package=module.__package__)


def _import_attr(module_path: str, attr: str, package: str | None = None) -> Any:
    try:
        module = importlib.import_module(module_path, package=package)
    except ImportError:
        logger.debug(
            "enum_module_not_importable",
            extra={"module_path": module_path, "package": package},
        )
        return None
    return getattr(module, attr, None)


class ColumnInfoAnnotationReader:
    """AnnotationSource reading enum declarations from ``info`` dicts.

    The property's own info wins over its columns' info.
    """

    def __init__(self, annotation_key: str = ENUM_INFO_KEY):
        self._key = annotation_key

    @property
    def annotation_key(self) -> str:
        return self._key

    def get_enum_annotation(self, descriptor: Any) -> EnumAnnotation | None:
        if not isinstance(descriptor, ColumnProperty):
            raise UnsupportedMetadataError(type(descriptor).__name__)

        declared = descriptor.info.get(self._key)
        if declared is None:
            for column in descriptor.columns:
                declared = getattr(column, "info", {}).get(self._key)
                if declared is not None:
                    break
        if declared is None:
            return None
        return EnumAnnotation(class_name=declared)


class InstanceStateChangeTracker:
    """ChangeTracker committing values into the SQLAlchemy instance state."""

    def set_original_value(self, identity: Hashable, field_name: str, value: Any) -> None:
        if not isinstance(identity, InstanceState):
            raise UnsupportedMetadataError(type(identity).__name__)
        instance = identity.obj()
        if instance is None:
            return
        set_committed_value(instance, field_name, value)
