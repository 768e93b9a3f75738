"""
Tests for EnumFieldResolver: per-record-type enum field discovery and caching.

Verifies:
- resolve() is idempotent and the second call does no discovery work
- Un-annotated fields never appear in the map
- A non-enum annotation raises NotAnEnumError and caches nothing
- warm_up() populates the cache ahead of the first load
- Cached maps are read-only, whoever holds them
"""

import pytest

from enum_kernel.domain.ports import record_type_name
from enum_kernel.exceptions import NotAnEnumError
from enum_kernel.services.enum_field_resolver import EnumFieldResolver
from enum_kernel.services.enum_fields_cache import InMemoryEnumFieldsCache
from tests.support.enums import Priority
from tests.support.fakes import FakeAnnotationSource, FakeInvoice, FakeTicket
from tests.support.models import Status


@pytest.fixture
def resolver(fake_metadata, fake_annotations, enum_cache):
    return EnumFieldResolver(fake_metadata, fake_annotations, enum_cache)


class TestResolve:
    def test_resolves_annotated_fields(self, resolver):
        enum_fields = resolver.resolve(FakeTicket)

        assert enum_fields == {"status": Status, "priority": Priority}

    def test_unannotated_field_absent(self, resolver):
        enum_fields = resolver.resolve(FakeTicket)

        assert "title" not in enum_fields
        assert None not in enum_fields.values()

    def test_type_without_enum_fields_maps_to_empty(self, resolver, enum_cache):
        assert resolver.resolve(FakeInvoice) == {}
        assert enum_cache.contains(record_type_name(FakeInvoice))

    def test_declared_names_resolved_in_record_context(self, resolver, fake_metadata):
        resolver.resolve(FakeTicket)

        assert (FakeTicket, "Status") in fake_metadata.resolve_calls
        assert (FakeTicket, "Priority") in fake_metadata.resolve_calls

    def test_class_object_annotation(self, fake_metadata, enum_cache):
        annotations = FakeAnnotationSource({(FakeTicket, "status"): Status})
        resolver = EnumFieldResolver(fake_metadata, annotations, enum_cache)

        assert resolver.resolve(FakeTicket) == {"status": Status}


class TestCaching:
    def test_second_resolve_hits_cache(self, resolver, fake_metadata, fake_annotations):
        first = resolver.resolve(FakeTicket)
        calls = (
            fake_metadata.field_names_calls,
            fake_metadata.descriptor_calls,
            fake_annotations.calls,
            len(fake_metadata.resolve_calls),
        )

        second = resolver.resolve(FakeTicket)

        assert second == first
        assert (
            fake_metadata.field_names_calls,
            fake_metadata.descriptor_calls,
            fake_annotations.calls,
            len(fake_metadata.resolve_calls),
        ) == calls

    def test_cache_keyed_by_record_type_name(self, resolver, enum_cache):
        enum_fields = resolver.resolve(FakeTicket)

        assert enum_cache.fetch(record_type_name(FakeTicket)) == enum_fields

    def test_prepopulated_cache_is_trusted(self, fake_metadata, fake_annotations):
        cache = InMemoryEnumFieldsCache()
        cache.save(record_type_name(FakeTicket), {"status": Status})
        resolver = EnumFieldResolver(fake_metadata, fake_annotations, cache)

        assert resolver.resolve(FakeTicket) == {"status": Status}
        assert fake_metadata.field_names_calls == 0

    def test_default_cache_is_in_memory(self, fake_metadata, fake_annotations):
        resolver = EnumFieldResolver(fake_metadata, fake_annotations)

        assert isinstance(resolver.cache, InMemoryEnumFieldsCache)

    def test_warm_up_populates_cache(self, resolver, enum_cache, fake_metadata):
        assert resolver.warm_up(FakeTicket) is None
        assert enum_cache.contains(record_type_name(FakeTicket))

        resolver.resolve(FakeTicket)
        assert fake_metadata.field_names_calls == 1


class TestNotAnEnum:
    @pytest.fixture
    def broken_annotations(self):
        return FakeAnnotationSource({(FakeTicket, "title"): "str"})

    def test_non_enum_type_raises(self, fake_metadata, broken_annotations, enum_cache):
        resolver = EnumFieldResolver(fake_metadata, broken_annotations, enum_cache)

        with pytest.raises(NotAnEnumError) as exc_info:
            resolver.resolve(FakeTicket)

        err = exc_info.value
        assert err.code == "NOT_AN_ENUM"
        assert err.class_name == "builtins.str"
        assert err.field_name == "title"
        assert "builtins.str" in str(err)

    def test_unresolvable_name_raises(self, fake_metadata, enum_cache):
        annotations = FakeAnnotationSource({(FakeTicket, "status"): "Missing"})
        resolver = EnumFieldResolver(fake_metadata, annotations, enum_cache)

        with pytest.raises(NotAnEnumError, match="Missing"):
            resolver.resolve(FakeTicket)

    def test_failure_caches_nothing(self, fake_metadata, broken_annotations, enum_cache):
        resolver = EnumFieldResolver(fake_metadata, broken_annotations, enum_cache)

        with pytest.raises(NotAnEnumError):
            resolver.resolve(FakeTicket)

        assert not enum_cache.contains(record_type_name(FakeTicket))
        assert len(enum_cache) == 0

    def test_failure_retried_from_scratch(self, fake_metadata, broken_annotations, enum_cache):
        resolver = EnumFieldResolver(fake_metadata, broken_annotations, enum_cache)

        for _ in range(2):
            with pytest.raises(NotAnEnumError):
                resolver.resolve(FakeTicket)

        assert fake_metadata.field_names_calls == 2


class TestReadOnlyMaps:
    def test_resolved_map_rejects_mutation(self, resolver):
        enum_fields = resolver.resolve(FakeTicket)

        with pytest.raises(TypeError):
            enum_fields.pop("status")
        with pytest.raises(TypeError):
            enum_fields["title"] = Status

    def test_fetched_map_rejects_mutation(self, resolver, enum_cache):
        resolver.resolve(FakeTicket)
        cached = enum_cache.fetch(record_type_name(FakeTicket))

        with pytest.raises(TypeError):
            del cached["status"]

    def test_saved_map_detached_from_caller(self, enum_cache):
        source = {"status": Status}
        enum_cache.save("app.Ticket", source)

        source["priority"] = Priority

        assert enum_cache.fetch("app.Ticket") == {"status": Status}
