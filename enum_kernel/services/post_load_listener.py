"""
Module: enum_kernel.services.post_load_listener
Responsibility: The "record loaded" hook.  Resolves the enum field map for
    the record's runtime type and materializes its enum fields.
Architecture position: Kernel > Services.  Composes EnumFieldResolver and
    EnumMaterializer.  The SQLAlchemy event wiring lives in
    enum_kernel.db.listeners; for_sqlalchemy() builds a listener backed by the
    SQLAlchemy adapters.

Failure modes:
    - NotAnEnumError / UnsupportedMetadataError from resolution.
    - InvalidValueError from materialization.
    Nothing is caught here; the error aborts the load that triggered it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from enum_kernel.domain.ports import (
    AnnotationSource,
    ChangeTracker,
    EnumFieldMap,
    MetadataSource,
)
from enum_kernel.services.enum_field_resolver import EnumFieldResolver
from enum_kernel.services.enum_fields_cache import EnumFieldsCache
from enum_kernel.services.enum_materializer import EnumMaterializer


class EnumPostLoadListener:
    """
    Materializes enum fields of every loaded record.

    Contract:
        on_load(instance) is called once per record per load event, on the
        loading thread, with no other thread touching the same instance.

    Guarantees:
        - The enum field map for a record type is computed at most once per
          cache lifetime (modulo concurrent first loads).
        - Either every non-null enum field of the record is materialized or
          the call raises and none is.
    """

    def __init__(
        self,
        metadata: MetadataSource,
        annotations: AnnotationSource,
        change_tracker: ChangeTracker,
        cache: EnumFieldsCache | None = None,
    ):
        self._resolver = EnumFieldResolver(metadata, annotations, cache)
        self._materializer = EnumMaterializer(metadata, change_tracker)

    @classmethod
    def for_sqlalchemy(
        cls,
        cache: EnumFieldsCache | None = None,
        annotation_key: str = "enum",
    ) -> "EnumPostLoadListener":
        """Build a listener backed by the SQLAlchemy metadata adapters."""
        from enum_kernel.db.metadata import (
            ColumnInfoAnnotationReader,
            InstanceStateChangeTracker,
            SqlAlchemyMetadataSource,
        )

        return cls(
            metadata=SqlAlchemyMetadataSource(),
            annotations=ColumnInfoAnnotationReader(annotation_key),
            change_tracker=InstanceStateChangeTracker(),
            cache=cache,
        )

    @property
    def resolver(self) -> EnumFieldResolver:
        return self._resolver

    def on_load(self, instance: Any, only: Iterable[str] | None = None) -> None:
        """Materialize the enum fields of a freshly loaded record.

        Args:
            instance: The loaded record.
            only: When given, materialize just these fields (refresh of a
                subset of attributes).
        """
        enum_fields = self._resolver.resolve(type(instance))
        if not enum_fields:
            return
        self._materializer.materialize(
            instance,
            enum_fields,
            only=set(only) if only is not None else None,
        )

    def warm_up_cache(self, record_type: type) -> None:
        """Resolve and cache record_type's enum fields before its first load."""
        self._resolver.warm_up(record_type)

    def enum_fields(self, record_type: type) -> EnumFieldMap:
        """Read-only enum field map of record_type, resolved on first use."""
        return self._resolver.resolve(record_type)
