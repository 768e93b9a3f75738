"""Domain layer - enum base type and the ports the mapping layer satisfies."""

from enum_kernel.domain.enum_type import EnumType, is_enum_type
from enum_kernel.domain.ports import (
    AnnotationSource,
    ChangeTracker,
    EnumAnnotation,
    EnumFieldMap,
    MetadataSource,
    freeze_enum_fields,
    record_type_name,
)

__all__ = [
    "AnnotationSource",
    "ChangeTracker",
    "EnumAnnotation",
    "EnumFieldMap",
    "EnumType",
    "MetadataSource",
    "freeze_enum_fields",
    "is_enum_type",
    "record_type_name",
]
