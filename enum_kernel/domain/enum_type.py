"""
Module: enum_kernel.domain.enum_type
Responsibility: Base class for closed, value-identified enumerations that
    record fields are materialized into on load.
Architecture position: Kernel > Domain.  Lowest-level import target besides
    exceptions.py.  MUST NOT import from services/ or db/.

Invariants enforced:
    - Closed set: members are declared on the class body and cannot be added,
      removed, or subclassed afterwards (standard ``enum.Enum`` semantics).
    - Identity by value: get(scalar) returns THE member for that scalar, so
      two members of the same type are equal iff their scalars are equal.
    - Total lookup: get() either returns a member or raises
      InvalidValueError.  It never returns None or a default member.

Failure modes:
    - InvalidValueError when a scalar is not one of the member values.

Usage:
    @unique
    class Status(EnumType):
        ACTIVE = "A"
        CLOSED = "C"

    Status.get("A") is Status.ACTIVE       # True
    Status.get("X")                        # raises InvalidValueError
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from enum_kernel.exceptions import InvalidValueError


class EnumType(Enum):
    """
    Closed set of immutable named values, each wrapping a unique scalar.

    Contract:
        Concrete enumerations subclass EnumType and declare their members
        as class attributes.  Decorate them with ``enum.unique`` so that no
        two names share a scalar.

    Guarantees:
        - Members are process-lifetime singletons; get() never creates a
          new object.
        - Members are immutable and safe to share between threads.
    """

    @classmethod
    def get(cls, value: Any) -> "EnumType":
        """
        Return the member identified by a scalar value.

        Preconditions: value is a scalar (str, int, ...).
        Postconditions: Returns the unique member whose ``.value`` equals
            value.

        Raises:
            InvalidValueError: If no member has that value.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidValueError(
                enum_class=cls.__qualname__,
                value=value,
                available_values=cls.get_available_values(),
            ) from None

    @classmethod
    def get_available_values(cls) -> frozenset:
        """Return the scalars of all members."""
        return frozenset(member.value for member in cls)

    @classmethod
    def get_available_enums(cls) -> Mapping[str, "EnumType"]:
        """Return all members keyed by member name."""
        return {member.name: member for member in cls}

    @classmethod
    def is_valid_value(cls, value: Any) -> bool:
        try:
            cls.get(value)
        except InvalidValueError:
            return False
        return True

    @classmethod
    def check_value(cls, value: Any) -> None:
        """Raise InvalidValueError unless value identifies a member."""
        cls.get(value)

    def get_value(self) -> Any:
        return self.value

    def equals_value(self, value: Any) -> bool:
        """True if this member is identified by the given scalar."""
        return self.value == value


def is_enum_type(candidate: Any) -> bool:
    """True if candidate is an EnumType subclass (the class, not a member)."""
    return (
        isinstance(candidate, type)
        and issubclass(candidate, EnumType)
        and candidate is not EnumType
    )
