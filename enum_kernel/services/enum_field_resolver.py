"""
Module: enum_kernel.services.enum_field_resolver
Responsibility: Discover, once per record type, which fields hold enum values
    and of which enum type, and keep the result in an EnumFieldsCache.
Architecture position: Kernel > Services.  Depends on domain/ ports only;
    never on SQLAlchemy directly.

Invariants enforced:
    - Cache hit path does no work: a cached map is returned unchanged and the
      metadata/annotation sources are not called.
    - All-or-nothing: the map is saved only after every field has been
      inspected.  A NotAnEnumError leaves the cache untouched for that record
      type, so the next call resolves from scratch.
    - Un-annotated fields never appear in the map.
    - Read-only: the map is frozen before it is cached or returned, so no
      caller can alter what later loads of the record type see.

Failure modes:
    - NotAnEnumError when an annotation names something that is not an
      EnumType subclass (including a name that resolves to nothing).
    - UnsupportedMetadataError propagated from the metadata source.
"""

from __future__ import annotations

from enum_kernel.domain.enum_type import EnumType, is_enum_type
from enum_kernel.domain.ports import (
    AnnotationSource,
    EnumFieldMap,
    MetadataSource,
    freeze_enum_fields,
    record_type_name,
)
from enum_kernel.exceptions import NotAnEnumError
from enum_kernel.logging_config import LoadContext, get_logger
from enum_kernel.services.enum_fields_cache import EnumFieldsCache, InMemoryEnumFieldsCache

logger = get_logger("services.enum_field_resolver")


class EnumFieldResolver:
    """
    Resolves and caches the enum field map of record types.

    Contract:
        resolve(record_type) returns {field_name: enum_class} for every
        field of record_type carrying an enum annotation.

    Guarantees:
        - Repeated calls for the same record type return the cached map.
        - No locking: two threads resolving the same type concurrently both
          compute identical maps and the last save wins.
    """

    def __init__(
        self,
        metadata: MetadataSource,
        annotations: AnnotationSource,
        cache: EnumFieldsCache | None = None,
    ):
        self._metadata = metadata
        self._annotations = annotations
        self._cache = cache if cache is not None else InMemoryEnumFieldsCache()

    @property
    def cache(self) -> EnumFieldsCache:
        return self._cache

    def resolve(self, record_type: type) -> EnumFieldMap:
        """
        Return the enum field map for record_type, computing it on a miss.

        The returned map is read-only.

        Raises:
            NotAnEnumError: If a field is annotated with a non-enum type.
        """
        key = record_type_name(record_type)
        with LoadContext.bind(record_type=key):
            enum_fields = self._cache.fetch(key)
            if enum_fields is not None:
                logger.debug("enum_fields_cache_hit")
                return enum_fields

            enum_fields = freeze_enum_fields(self._discover(record_type, key))
            self._cache.save(key, enum_fields)

            logger.debug(
                "enum_fields_resolved",
                extra={"enum_fields": sorted(enum_fields)},
            )
            return enum_fields

    def warm_up(self, record_type: type) -> None:
        """Populate the cache for record_type ahead of its first load."""
        self.resolve(record_type)

    def _discover(self, record_type: type, key: str) -> dict[str, type[EnumType]]:
        enum_fields: dict[str, type[EnumType]] = {}
        for field_name in self._metadata.field_names(record_type):
            descriptor = self._metadata.field_descriptor(record_type, field_name)
            annotation = self._annotations.get_enum_annotation(descriptor)
            if annotation is None:
                continue

            with LoadContext.bind(field_name=field_name):
                enum_class = self._metadata.resolve_type_name(record_type, annotation.class_name)
                if not is_enum_type(enum_class):
                    class_name = _describe(enum_class, annotation.class_name)
                    logger.error(
                        "enum_field_not_an_enum",
                        extra={"declared_class": class_name},
                    )
                    raise NotAnEnumError(class_name, record_type=key, field_name=field_name)

            enum_fields[field_name] = enum_class
        return enum_fields


def _describe(resolved: object, declared: str | type) -> str:
    # Name the resolved type when there is one, otherwise what was declared.
    if isinstance(resolved, type):
        return f"{resolved.__module__}.{resolved.__qualname__}"
    if isinstance(declared, type):
        return f"{declared.__module__}.{declared.__qualname__}"
    return str(declared)
