"""Database layer - SQLAlchemy adapters, enum column types, and load hooks."""

from enum_kernel.db.listeners import (
    EnumLoadEventHandler,
    register_enum_listeners,
    unregister_enum_listeners,
)
from enum_kernel.db.metadata import (
    ENUM_INFO_KEY,
    ColumnInfoAnnotationReader,
    InstanceStateChangeTracker,
    SqlAlchemyMetadataSource,
)
from enum_kernel.db.types import EnumScalar, IntEnumScalar, enum_column

__all__ = [
    "ENUM_INFO_KEY",
    "ColumnInfoAnnotationReader",
    "EnumLoadEventHandler",
    "EnumScalar",
    "InstanceStateChangeTracker",
    "IntEnumScalar",
    "SqlAlchemyMetadataSource",
    "enum_column",
    "register_enum_listeners",
    "unregister_enum_listeners",
]
