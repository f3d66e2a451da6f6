# tests/test_cache.py
"""
Tests for NodeCache: ingestion, id/kind/context indices, search dispatch and
the process-wide current cache.
"""

import re

import pytest

from cxxquery import cache as cache_module
from cxxquery.cache import NodeCache
from cxxquery.config import QueryConfig
from cxxquery.errors import (
    CorpusAlreadyLoadedError,
    DanglingReferenceError,
    DuplicateIdError,
    NotQueryableError,
    RecordError,
    UnsupportedMatcherError,
)
from cxxquery.node import RootNode
from cxxquery.records import Record


class TestIngest:

    def test_every_record_found_by_id(self, geo, geo_records):
        for record in geo_records:
            node = geo.find_by_id(record.id)
            assert node is not None
            assert node.id == record.id
            assert node.record is record

    def test_len_and_iteration_follow_feed_order(self, geo, geo_records):
        assert len(geo) == len(geo_records)
        assert [n.id for n in geo] == [r.id for r in geo_records]

    def test_accepts_mappings(self, ncf):
        assert len(ncf) == 3
        assert ncf.find_by_id("2").kind == "Class"

    def test_child_before_parent_order(self):
        cache = NodeCache().ingest([
            {"kind": "Class", "id": "2", "name": "C", "context": "1"},
            {"kind": "Namespace", "id": "1", "name": "N", "context": "_1"},
        ])
        assert cache.find_by_id("2").parent is cache.find_by_id("1")
        assert cache.find_by_id("2").qualified_name == "N::C"

    def test_second_ingest_raises(self, ncf):
        with pytest.raises(CorpusAlreadyLoadedError):
            ncf.ingest([{"kind": "Namespace", "id": "9", "name": "M"}])
        assert ncf.find_by_id("9") is None

    def test_duplicate_id_raises(self):
        with pytest.raises(DuplicateIdError, match="'1'"):
            NodeCache().ingest([
                {"kind": "Namespace", "id": "1", "name": "A"},
                {"kind": "Namespace", "id": "1", "name": "B"},
            ])

    def test_bad_item_raises(self):
        with pytest.raises(RecordError):
            NodeCache().ingest([42])

    def test_failed_ingest_keeps_nothing(self):
        cache = NodeCache()
        with pytest.raises(RecordError):
            cache.ingest([{"kind": "Namespace", "id": "1", "name": "Old",
                           "context": "_1"},
                          {"name": "no kind"}])
        assert not cache.loaded
        assert len(cache) == 0
        assert cache.find_by_id("1") is None

    def test_retry_after_duplicate_does_not_merge(self):
        cache = NodeCache()
        with pytest.raises(DuplicateIdError):
            cache.ingest([
                {"kind": "Namespace", "id": "1", "name": "Old", "context": "_1"},
                {"kind": "Namespace", "id": "1", "name": "Old", "context": "_1"},
            ])
        cache.ingest([{"kind": "Namespace", "id": "2", "name": "New", "context": "_1"}])
        assert [n.name for n in cache.root.namespaces()] == ["New"]
        assert len(cache) == 1

    def test_unknown_id_is_none(self, geo):
        assert geo.find_by_id("_999") is None
        assert geo.find_by_id(None) is None
        assert "_999" not in geo
        assert "_4" in geo

    def test_kind_counts(self, geo):
        counts = geo.kind_counts()
        assert counts["Field"] == 3
        assert counts["FundamentalType"] == 3
        assert "Frobnicator" in geo.kinds()


class TestStrictReferences:

    def test_lenient_by_default(self, geo):
        counter = geo.root.variables("counter").one()
        assert counter.file is None

    def test_strict_raises_on_dangling_file(self, geo_records):
        cache = NodeCache(QueryConfig(strict_references=True))
        with pytest.raises(DanglingReferenceError) as info:
            cache.ingest(geo_records)
        assert info.value.node_id == "_19"
        assert info.value.key == "file"
        assert info.value.target == "f9"

    def test_strict_raises_on_dangling_context(self):
        cache = NodeCache(QueryConfig(strict_references=True))
        with pytest.raises(DanglingReferenceError, match="context"):
            cache.ingest([{"kind": "Class", "id": "2", "name": "C", "context": "404"}])

    def test_strict_failure_leaves_cache_unloaded(self):
        cache = NodeCache(QueryConfig(strict_references=True))
        with pytest.raises(DanglingReferenceError):
            cache.ingest([{"kind": "Class", "id": "2", "name": "C", "context": "404"}])
        assert not cache.loaded
        assert len(cache) == 0
        assert cache.find_by_id("2") is None

        cache.ingest([{"kind": "Class", "id": "3", "name": "D", "context": "_1"}])
        assert cache.loaded
        assert cache.root.classes() == "D"

    def test_strict_accepts_root_context(self):
        strict = NodeCache(QueryConfig(strict_references=True))
        strict.ingest([{"kind": "Namespace", "id": "1", "name": "N", "context": "_1"}])
        assert len(strict) == 1


class TestRoot:

    def test_uses_global_namespace_record(self, geo):
        assert geo.root is geo.find_by_id("_1")
        assert geo.root.kind == "Namespace"

    def test_synthetic_root_when_missing(self, ncf):
        root = ncf.root
        assert isinstance(root, RootNode)
        assert root.parent is None
        assert root.qualified_name == "::"
        assert ncf.find_by_id(root.id) is None

    def test_custom_root_context(self):
        cache = NodeCache(QueryConfig(root_context="0")).ingest([
            {"kind": "Namespace", "id": "1", "name": "N", "context": "0"},
        ])
        assert cache.root.namespaces("N").one().parent is None


class TestFindChildrenOfType:

    def test_children_in_feed_order(self, geo, geo_ns):
        result = geo.find_children_of_type(geo_ns, "Class")
        assert [n.name for n in result] == ["Shape", "Circle"]

    def test_exactly_the_nodes_with_matching_context(self, geo, geo_ns):
        result = geo.find_children_of_type(geo_ns, "Typedef")
        expected = [n for n in geo if n.kind == "Typedef"
                    and n.attribute("context") == geo_ns.id]
        assert list(result) == expected

    def test_root_scope_only_global_context(self, geo):
        result = geo.find_children_of_type(None, "Variable")
        assert [n.name for n in result] == ["counter", "table"]
        assert geo.find_children_of_type(None, "Namespace").to_list() == [
            geo.find_by_id("_3")]

    def test_literal_matcher(self, geo, geo_ns):
        result = geo.find_children_of_type(geo_ns, "Class", "Circle")
        assert len(result) == 1
        assert result.one().id == "_7"

    def test_literal_matcher_is_not_a_pattern(self, geo, geo_ns):
        assert len(geo.find_children_of_type(geo_ns, "Class", "C.*")) == 0

    def test_pattern_matcher(self, geo, geo_ns):
        result = geo.find_children_of_type(geo_ns, "Class", re.compile("^S"))
        assert [n.name for n in result] == ["Shape"]

    def test_unsupported_matcher(self, geo, geo_ns):
        with pytest.raises(UnsupportedMatcherError):
            geo.find_children_of_type(geo_ns, "Class", 42)
        with pytest.raises(TypeError):
            geo.find_children_of_type(geo_ns, "Class", ["Shape"])

    def test_unknown_kind_is_empty(self, geo, geo_ns):
        assert len(geo.find_children_of_type(geo_ns, "Concept")) == 0

    def test_ungoverned_kind_is_plain_filter(self, geo, geo_ns):
        result = geo.find_children_of_type(geo_ns, "Frobnicator")
        assert result == "gizmo"

    def test_not_queryable_in_class(self, geo):
        shape = geo.find_by_id("_4")
        with pytest.raises(NotQueryableError) as info:
            geo.find_children_of_type(shape, "Namespace")
        assert info.value.scope_kind == "Class"
        assert info.value.search_kind == "Namespace"

    def test_not_queryable_for_every_class(self, geo):
        for klass in geo.nodes_of_kind("Class"):
            with pytest.raises(NotQueryableError):
                klass.namespaces()

    def test_members_unchecked(self, geo):
        circle = geo.find_by_id("_7")
        assert [n.kind for n in circle.members()] == ["Constructor", "Method", "Field"]
        assert [n.name for n in circle.members("Field")] == ["radius_"]


class TestWholeCorpus:

    def test_nodes_of_kind(self, geo):
        assert [n.name for n in geo.nodes_of_kind("Method")] == ["area", "area"]
        assert len(geo.nodes_of_kind("Nope")) == 0

    def test_select(self, geo):
        result = geo.select('(and (kind Field) (access private))')
        assert result == "id_"


class TestProcessWideCache:

    def test_empty_until_ingest(self):
        current = cache_module.current_cache()
        assert len(current) == 0
        assert not current.loaded

    def test_ingest_installs_current(self, geo_records):
        cache = cache_module.ingest(geo_records)
        assert cache_module.current_cache() is cache
        assert cache.loaded

    def test_ingest_replaces_without_merging(self, geo_records):
        first = cache_module.ingest(geo_records)
        shape = first.find_by_id("_4")
        second = cache_module.ingest([
            Record(kind="Namespace", id="_3", name="other", context="_1",
                   attributes={"id": "_3", "name": "other", "context": "_1"}),
        ])
        assert cache_module.current_cache() is second
        assert second.find_by_id("_4") is None
        # nodes of the replaced corpus keep resolving against it
        assert shape.parent.name == "geo"
        assert shape.qualified_name == "geo::Shape"

    def test_reset(self):
        cache_module.ingest([{"kind": "Namespace", "id": "1", "name": "N"}])
        cache_module.reset()
        assert len(cache_module.current_cache()) == 0
