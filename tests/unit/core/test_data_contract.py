"""Unit tests for the data provider contract and its helpers."""

import datetime

import pytest

from cc_report.core.contract import (
    DataProvider,
    flatten_value,
    is_valid_data_key,
    resolve_query,
)
from cc_report.core.hints import QueryHint
from cc_report.core.types import validate_namespaced_document

pytestmark = pytest.mark.unit


class _StaticProvider:
    def get_hints(self):
        return [QueryHint(".raw.source.name", "Name")]

    def to_namespaced_document(self):
        return {"raw": {"source": {"name": "demo"}}, "calculated": {}}

    def to_flat_view(self):
        return {"NAME": "demo"}


class TestDataProviderProtocol:
    def test_structural_implementation_is_recognized(self):
        assert isinstance(_StaticProvider(), DataProvider)

    def test_object_missing_operations_is_not_a_provider(self):
        class Partial:
            def to_flat_view(self):
                return {}

        assert not isinstance(Partial(), DataProvider)


class TestFlattenValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (0.25, "0.25"),
            ("text", "text"),
            (["a", "b", "c"], "a, b, c"),
            (("x",), "x"),
            ([], ""),
            ({"b": 1, "a": [1, 2]}, '{"a":[1,2],"b":1}'),
            (datetime.date(2025, 1, 29), "2025-01-29"),
        ],
    )
    def test_values_become_strings(self, value, expected):
        assert flatten_value(value) == expected

    def test_nested_lists_flatten_elementwise(self):
        assert flatten_value([True, None, 3]) == "true, , 3"


class TestDataKeys:
    @pytest.mark.parametrize("key", ["PROJECT_ID", "A", "USER_COUNT_2"])
    def test_upper_snake_case_is_valid(self, key):
        assert is_valid_data_key(key)

    @pytest.mark.parametrize("key", ["project_id", "2COUNT", "_X", "Project", "", "A-B"])
    def test_other_shapes_are_invalid(self, key):
        assert not is_valid_data_key(key)


class TestResolveQuery:
    DOC = {"raw": {"api": {"name": "n", "count": 0, "missing": None}}, "calculated": {}}

    def test_plain_path_resolves(self):
        assert resolve_query(self.DOC, ".raw.api.name") == "n"
        assert resolve_query(self.DOC, ".raw.api.count") == 0
        assert resolve_query(self.DOC, ".raw.api.missing") is None

    def test_missing_segment_raises_key_error(self):
        with pytest.raises(KeyError, match="nope"):
            resolve_query(self.DOC, ".raw.api.nope")

    @pytest.mark.parametrize("query", [".raw.api[]", ".raw | length", "raw.api", "."])
    def test_non_plain_paths_are_rejected(self, query):
        with pytest.raises(ValueError, match="plain dotted paths"):
            resolve_query(self.DOC, query)


class TestNamespacedDocument:
    def test_valid_document_is_returned_unchanged(self):
        doc = {"raw": {"github_api": {}}, "calculated": {"time_calculations": {}}}
        assert validate_namespaced_document(doc) is doc

    @pytest.mark.parametrize(
        "doc",
        [
            {"raw": {}},
            {"calculated": {}},
            {"raw": [], "calculated": {}},
            "not a mapping",
        ],
    )
    def test_missing_or_malformed_namespaces_are_rejected(self, doc):
        with pytest.raises(ValueError):
            validate_namespaced_document(doc)

    def test_namespaces_must_not_share_top_level_keys(self):
        doc = {"raw": {"stats": 1}, "calculated": {"stats": 2}}
        with pytest.raises(ValueError, match="share top-level keys"):
            validate_namespaced_document(doc)
