"""Ports -- protocols the host mapping layer satisfies for enum materialization.

The kernel never touches reflection or ORM internals directly.  It asks a
MetadataSource for field lists and values, an AnnotationSource for the enum
declaration of a field, and a ChangeTracker to record coerced values as
clean.  SQLAlchemy implementations live in enum_kernel.db; tests use fakes.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from enum_kernel.domain.enum_type import EnumType

# field name -> enum class; one per record type, read-only once cached
EnumFieldMap = Mapping[str, type[EnumType]]


@dataclass(frozen=True)
class EnumAnnotation:
    """Declaration that a field holds values of an enum type.

    class_name is the declared (possibly relative) type name, or the enum
    class itself when the declaration already holds a reference.
    """

    class_name: str | type


def record_type_name(record_type: type) -> str:
    """Cache key for a record type: its dotted module path and qualified name."""
    return f"{record_type.__module__}.{record_type.__qualname__}"


def freeze_enum_fields(enum_fields: EnumFieldMap) -> EnumFieldMap:
    """Read-only view of enum_fields, detached from the mapping passed in."""
    return MappingProxyType(dict(enum_fields))


@runtime_checkable
class MetadataSource(Protocol):
    """Field listing, value access and type-name resolution for record types."""

    def field_names(self, record_type: type) -> Sequence[str]:
        ...

    def field_descriptor(self, record_type: type, field_name: str) -> Any:
        ...

    def get_field_value(self, instance: Any, field_name: str) -> Any:
        ...

    def set_field_value(self, instance: Any, field_name: str, value: Any) -> None:
        ...

    def resolve_type_name(self, record_type: type, name: str | type) -> Any:
        """Resolve a declared type name in the context of record_type.

        Returns the resolved type handle, or None if the name resolves to
        nothing.
        """
        ...

    def identity(self, instance: Any) -> Hashable:
        """Stable per-instance identity token used by the ChangeTracker."""
        ...


@runtime_checkable
class AnnotationSource(Protocol):
    """Per-field enum declarations."""

    def get_enum_annotation(self, descriptor: Any) -> EnumAnnotation | None:
        ...


@runtime_checkable
class ChangeTracker(Protocol):
    """The mapping layer's record of each field's clean (original) value."""

    def set_original_value(self, identity: Hashable, field_name: str, value: Any) -> None:
        ...
