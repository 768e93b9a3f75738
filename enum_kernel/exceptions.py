"""
Typed Exception Hierarchy for the Enum Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A record that fails to load because of a bad enum value must be caught by
type, not by parsing a message.  Every error here:
  1. Has its own class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        ticket = session.get(Ticket, ticket_id)
    except InvalidValueError as e:
        log.warning(f"{e.enum_class} has no member {e.value!r}")
        api_response(code=e.code, allowed=sorted(e.available_values))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    EnumKernelError (base)
    |
    +-- EnumError
    |   +-- NotAnEnumError
    |   +-- InvalidValueError
    |
    +-- MetadataError
        +-- UnsupportedMetadataError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Enum            | NOT_AN_ENUM                 | Field annotated with a non-enum type
                | INVALID_ENUM_VALUE          | Stored scalar is not a member value
----------------|-----------------------------|-----------------------------------------
Metadata        | UNSUPPORTED_METADATA        | Mapping layer metadata of unknown shape
----------------|-----------------------------|-----------------------------------------

===============================================================================
HANDLING PATTERNS
===============================================================================

NotAnEnumError and UnsupportedMetadataError are configuration errors: they
surface on the first load (or warm-up) of the offending record type and
never go away by retrying.  InvalidValueError is a data-integrity error: the
persisted value does not match the current enum definition.

None of these are caught inside the kernel.  They propagate out of the
SQLAlchemy load event and abort the query that triggered it.
"""

from typing import Any


class EnumKernelError(Exception):
    """
    Base exception for all enum kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "ENUM_KERNEL_ERROR"


# Enum-related exceptions


class EnumError(EnumKernelError):
    """Base exception for enum type and enum value errors."""

    code: str = "ENUM_ERROR"


class NotAnEnumError(EnumError):
    """A field is annotated as enum-typed but the type is not an EnumType."""

    code: str = "NOT_AN_ENUM"

    def __init__(self, class_name: str, record_type: str | None = None, field_name: str | None = None):
        self.class_name = class_name
        self.record_type = record_type
        self.field_name = field_name
        location = f" (field {record_type}.{field_name})" if record_type and field_name else ""
        super().__init__(f"{class_name} is not an enum type{location}")


class InvalidValueError(EnumError):
    """A scalar does not identify any member of the enum type."""

    code: str = "INVALID_ENUM_VALUE"

    def __init__(self, enum_class: str, value: Any, available_values: frozenset):
        self.enum_class = enum_class
        self.value = value
        self.available_values = available_values
        allowed = ", ".join(repr(v) for v in sorted(available_values, key=repr))
        super().__init__(
            f"{value!r} is not a valid value of {enum_class}, accepted values: {allowed}"
        )


# Metadata-related exceptions


class MetadataError(EnumKernelError):
    """Base exception for errors in the mapping layer's metadata."""

    code: str = "METADATA_ERROR"


class UnsupportedMetadataError(MetadataError):
    """The mapping layer supplied metadata of a shape the kernel does not understand."""

    code: str = "UNSUPPORTED_METADATA"

    def __init__(self, metadata_class: str, record_type: str | None = None):
        self.metadata_class = metadata_class
        self.record_type = record_type
        target = f" for {record_type}" if record_type else ""
        super().__init__(f"Unsupported mapping metadata {metadata_class}{target}")
