"""
Module: enum_kernel.services.enum_materializer
Responsibility: Replace raw scalar field values of a loaded record with the
    enum members they identify, and tell the mapping layer the members are
    the record's clean values.
Architecture position: Kernel > Services.  Depends on domain/ ports only.

Invariants enforced:
    - Null is left alone: a field whose raw value is None is skipped, never
      coerced into an error or a default member.
    - Idempotent: a field already holding a member is looked up by that
      member's scalar, so materializing twice yields the same member.
    - No partial write: every field is looked up before any field is
      written, so an InvalidValueError leaves the record untouched.
    - Not dirty: every written member is also registered as the original
      value, so the coercion is not flushed back as a change.

Failure modes:
    - InvalidValueError propagated unchanged from EnumType.get().
"""

from __future__ import annotations

from typing import Any

from enum_kernel.domain.enum_type import EnumType
from enum_kernel.domain.ports import (
    ChangeTracker,
    EnumFieldMap,
    MetadataSource,
    record_type_name,
)
from enum_kernel.exceptions import InvalidValueError
from enum_kernel.logging_config import LoadContext, get_logger

logger = get_logger("services.enum_materializer")


class EnumMaterializer:
    """Materializes enum fields on a single record instance."""

    def __init__(self, metadata: MetadataSource, change_tracker: ChangeTracker):
        self._metadata = metadata
        self._change_tracker = change_tracker

    def materialize(
        self,
        instance: Any,
        enum_fields: EnumFieldMap,
        only: set[str] | None = None,
    ) -> dict[str, EnumType]:
        """
        Materialize the enum fields of instance.

        Args:
            instance: The loaded record.
            enum_fields: Field name -> enum class map for the record's type.
            only: Restrict to these field names (e.g. refreshed attributes).

        Returns:
            The members written, keyed by field name.

        Raises:
            InvalidValueError: If a raw value is not a member value.
        """
        with LoadContext.bind(record_type=record_type_name(type(instance))):
            resolved: dict[str, EnumType] = {}
            for field_name, enum_class in enum_fields.items():
                if only is not None and field_name not in only:
                    continue
                raw_value = self._metadata.get_field_value(instance, field_name)
                if raw_value is None:
                    continue
                with LoadContext.bind(field_name=field_name):
                    resolved[field_name] = self._lookup(enum_class, raw_value)

            if not resolved:
                return resolved

            identity = self._metadata.identity(instance)
            for field_name, member in resolved.items():
                self._metadata.set_field_value(instance, field_name, member)
                self._change_tracker.set_original_value(identity, field_name, member)

            logger.debug("enum_fields_materialized", extra={"fields": sorted(resolved)})
            return resolved

    def _lookup(self, enum_class: type[EnumType], raw_value: Any) -> EnumType:
        key = raw_value.value if isinstance(raw_value, enum_class) else raw_value
        try:
            return enum_class.get(key)
        except InvalidValueError:
            logger.error(
                "enum_value_invalid",
                extra={
                    "enum_class": enum_class.__qualname__,
                    "value": repr(key),
                },
            )
            raise
