"""Services for the enum kernel (load side)."""

from enum_kernel.services.enum_field_resolver import EnumFieldResolver
from enum_kernel.services.enum_fields_cache import EnumFieldsCache, InMemoryEnumFieldsCache
from enum_kernel.services.enum_materializer import EnumMaterializer
from enum_kernel.services.post_load_listener import EnumPostLoadListener

__all__ = [
    "EnumFieldResolver",
    "EnumFieldsCache",
    "EnumMaterializer",
    "EnumPostLoadListener",
    "InMemoryEnumFieldsCache",
]
