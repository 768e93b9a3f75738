"""Models whose enum annotations are misconfigured."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from enum_kernel.db.types import EnumScalar, enum_column


class Level:
    """Looks like an enum, is not an EnumType."""

    LOW = "L"


class BrokenBase(DeclarativeBase):
    pass


class Alarm(BrokenBase):
    __tablename__ = "alarms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    level: Mapped[str | None] = enum_column("Level", EnumScalar(1), nullable=True)


class Siren(BrokenBase):
    __tablename__ = "sirens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tone: Mapped[str | None] = enum_column(
        "no_such_module.Tone", String(1), nullable=True
    )
