"""
Pytest fixtures for the enum kernel test suite.

Provides:
- File-backed SQLite engine (per test) and sessions with the test schema created
- An SQLAlchemy-backed EnumPostLoadListener registered on the test Base
  (detached again after each test)
- Fake metadata/annotation/change-tracking ports for unit tests
"""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from enum_kernel.db.listeners import (
    EnumLoadEventHandler,
    register_enum_listeners,
    unregister_enum_listeners,
)
from enum_kernel.logging_config import reset_logging
from enum_kernel.services.enum_fields_cache import InMemoryEnumFieldsCache
from enum_kernel.services.post_load_listener import EnumPostLoadListener
from tests.support.broken_models import BrokenBase
from tests.support.fakes import (
    FakeAnnotationSource,
    FakeChangeTracker,
    FakeInvoice,
    FakeMetadataSource,
    FakeTicket,
)
from tests.support.models import Base, Status
from tests.support.enums import Priority


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    yield
    reset_logging()


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    # File-backed so raw inserts and ORM sessions use separate connections.
    eng = create_engine(f"sqlite:///{tmp_path / 'enum_kernel.db'}")
    Base.metadata.create_all(eng)
    BrokenBase.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def enum_cache() -> InMemoryEnumFieldsCache:
    return InMemoryEnumFieldsCache()


@pytest.fixture
def enum_listener(enum_cache) -> EnumPostLoadListener:
    return EnumPostLoadListener.for_sqlalchemy(cache=enum_cache)


@pytest.fixture
def registered_listener(enum_listener) -> Generator[EnumLoadEventHandler, None, None]:
    """enum_listener attached to every model of both test bases."""
    handler = register_enum_listeners(Base, enum_listener)
    broken_handler = register_enum_listeners(BrokenBase, enum_listener)
    try:
        yield handler
    finally:
        unregister_enum_listeners(Base, handler)
        unregister_enum_listeners(BrokenBase, broken_handler)


@pytest.fixture
def insert_raw(engine):
    """Insert a row bypassing the ORM, as another application would."""

    def _insert(table: str, **values):
        columns = ", ".join(values)
        params = ", ".join(f":{name}" for name in values)
        with engine.begin() as conn:
            conn.execute(text(f"INSERT INTO {table} ({columns}) VALUES ({params})"), values)

    return _insert


# =============================================================================
# Fake ports
# =============================================================================


@pytest.fixture
def fake_metadata() -> FakeMetadataSource:
    return FakeMetadataSource(
        fields={
            FakeTicket: ["title", "status", "priority"],
            FakeInvoice: ["number", "total"],
        },
        types={"Status": Status, "Priority": Priority, "str": str},
    )


@pytest.fixture
def fake_annotations() -> FakeAnnotationSource:
    return FakeAnnotationSource(
        {
            (FakeTicket, "status"): "Status",
            (FakeTicket, "priority"): "Priority",
        }
    )


@pytest.fixture
def fake_tracker() -> FakeChangeTracker:
    return FakeChangeTracker()
