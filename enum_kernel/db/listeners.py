"""
ORM-level enum materialization hooks.

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires instance events when a row has been turned into an object:

    session.get(Ticket, 1)  /  session.scalars(select(Ticket))
         |
         v
    [load event] ----> EnumPostLoadListener.on_load(ticket)
         |                   |
         |                   +-- resolve enum fields for Ticket (cached)
         |                   +-- raw "A" -> Status.ACTIVE, committed as clean
         v
    object handed to the caller

    session.refresh(ticket) / expired attribute reload
         |
         v
    [refresh event] --> on_load(ticket, only=refreshed attributes)

Any error raised by the listener propagates out of the query.

===============================================================================
USAGE
===============================================================================

    listener = EnumPostLoadListener.for_sqlalchemy()
    handler = register_enum_listeners(Base, listener)
    ...
    unregister_enum_listeners(Base, handler)

Listeners are attached to every mapped class of the declarative base that
exists at registration time, without propagate, so each load fires exactly
once.  Register after all models have been imported.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Mapper

from enum_kernel.logging_config import LoadContext, get_logger
from enum_kernel.services.post_load_listener import EnumPostLoadListener

logger = get_logger("db.listeners")


class EnumLoadEventHandler:
    """Adapts SQLAlchemy's load/refresh event signatures to the listener."""

    def __init__(self, listener: EnumPostLoadListener, listen_refresh: bool = True):
        self.listener = listener
        self.listen_refresh = listen_refresh

    def on_load(self, target: Any, context: Any) -> None:
        with LoadContext.bind(load_event="load"):
            self.listener.on_load(target)

    def on_refresh(self, target: Any, context: Any, attrs: Iterable[str] | None) -> None:
        with LoadContext.bind(load_event="refresh"):
            self.listener.on_load(target, only=attrs)


def mapped_classes(base: type) -> list[type]:
    """All mapped classes reachable from base.

    base is either a single mapped class or a declarative base whose
    registry holds the mappers.
    """
    if isinstance(inspect(base, raiseerr=False), Mapper):
        return [base]
    return sorted(
        (mapper.class_ for mapper in base.registry.mappers),
        key=lambda cls: f"{cls.__module__}.{cls.__qualname__}",
    )


def register_enum_listeners(
    base: type,
    listener: EnumPostLoadListener,
    listen_refresh: bool = True,
) -> EnumLoadEventHandler:
    """
    Attach listener to the load (and refresh) events of every mapped class.

    Returns:
        The handler; pass it to unregister_enum_listeners() to detach.
    """
    handler = EnumLoadEventHandler(listener, listen_refresh)
    classes = mapped_classes(base)
    for cls in classes:
        event.listen(cls, "load", handler.on_load)
        if listen_refresh:
            event.listen(cls, "refresh", handler.on_refresh)

    logger.info(
        "enum_listeners_registered",
        extra={
            "mapped_classes": len(classes),
            "listen_refresh": listen_refresh,
        },
    )
    return handler


def _safe_remove_listener(target, event_name, listener_fn):
    """
    Safely remove an event listener, ignoring if not registered.
    """
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_enum_listeners(base: type, handler: EnumLoadEventHandler) -> None:
    """Detach a handler returned by register_enum_listeners()."""
    for cls in mapped_classes(base):
        _safe_remove_listener(cls, "load", handler.on_load)
        _safe_remove_listener(cls, "refresh", handler.on_refresh)
