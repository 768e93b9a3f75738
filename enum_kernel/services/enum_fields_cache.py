"""Cache backends for resolved enum field maps."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from enum_kernel.domain.ports import EnumFieldMap, freeze_enum_fields


@runtime_checkable
class EnumFieldsCache(Protocol):
    """Key/value store for enum field maps, keyed by record type name.

    fetch() returns None when the key is absent.  An empty map is a valid,
    cacheable entry (record type with no enum fields).
    """

    def fetch(self, key: str) -> EnumFieldMap | None:
        ...

    def save(self, key: str, value: EnumFieldMap) -> None:
        ...


class InMemoryEnumFieldsCache:
    """Unbounded process-lifetime cache.

    Maps are stored as read-only views, so a fetched map cannot be altered
    by the caller.

    Record type shapes do not change while the process runs, so entries are
    never evicted.  Concurrent saves of the same key are last-writer-wins;
    both writers computed an identical map.
    """

    def __init__(self) -> None:
        self._entries: dict[str, EnumFieldMap] = {}

    def fetch(self, key: str) -> EnumFieldMap | None:
        return self._entries.get(key)

    def save(self, key: str, value: EnumFieldMap) -> None:
        self._entries[key] = freeze_enum_fields(value)

    def contains(self, key: str) -> bool:
        return key in self._entries

    def clear(self) -> None:
        """Drop every entry. FOR TESTING ONLY."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
