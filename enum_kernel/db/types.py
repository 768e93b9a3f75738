"""
Module: enum_kernel.db.types
Responsibility: Column types and column helpers for enum-typed fields.
Architecture position: Kernel > DB.  May be imported by host models.

The column types only convert on the way IN (bind): an EnumType member is
stored as its scalar.  Result values are returned raw; turning them into
members is the post-load listener's job, so a row with a value that is no
longer a member still loads far enough to raise a typed InvalidValueError.
"""

from typing import Any

from sqlalchemy import Integer, String
from sqlalchemy.orm import mapped_column
from sqlalchemy.types import TypeDecorator

from enum_kernel.db.metadata import ENUM_INFO_KEY
from enum_kernel.domain.enum_type import EnumType


class EnumScalar(TypeDecorator):
    """
    String-backed enum column.

    Guarantees:
        - process_bind_param: member -> member.value on INSERT/UPDATE and in
          query comparisons; raw scalars pass through unchanged.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert an enum member to its scalar when storing."""
        if isinstance(value, EnumType):
            return value.value
        return value


class IntEnumScalar(EnumScalar):
    """Integer-backed enum column."""

    impl = Integer
    cache_ok = True


def enum_column(
    enum_type: type[EnumType] | str,
    *args: Any,
    annotation_key: str = ENUM_INFO_KEY,
    info: dict | None = None,
    **kwargs: Any,
):
    """
    mapped_column() declaring the field as holding members of enum_type.

    Args:
        enum_type: The enum class, or its name resolved against the model's
            module (see enum_kernel.db.metadata).
        annotation_key: info key the annotation reader looks for.
        info: Extra column info merged with the annotation.
        *args, **kwargs: Passed through to mapped_column().

    Example:
        status: Mapped[Status | None] = enum_column(Status, EnumScalar(1))
    """
    column_info = dict(info or {})
    column_info[annotation_key] = enum_type
    return mapped_column(*args, info=column_info, **kwargs)
