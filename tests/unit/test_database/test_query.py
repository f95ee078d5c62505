"""Tests for in-process query evaluation and document paths."""

import functools

import pytest

from task_ledger_mcp.database.paths import StorePaths, join_path, split_path
from task_ledger_mcp.database.query import (
    DOCUMENT_ID,
    QueryError,
    compare_values,
    matches,
    normalize_order_by,
    normalize_where,
)


class TestCompareValues:
    def test_mixed_types_order_by_type(self):
        values = ["b", 2, None, True, ["a"], {"k": 1}]

        ranked = sorted(values, key=functools.cmp_to_key(compare_values))

        assert ranked == [None, True, 2, "b", ["a"], {"k": 1}]

    def test_lists_compare_elementwise(self):
        assert compare_values([1, 2], [1, 3]) < 0
        assert compare_values([1, 2], [1]) > 0


class TestWhere:
    def test_not_equal_excludes_missing(self):
        clauses = normalize_where([("status", "!=", "DONE")])

        assert matches("a", {"status": "TODO"}, clauses)
        assert not matches("a", {"status": "DONE"}, clauses)
        assert not matches("a", {}, clauses)

    def test_range_ignores_other_types(self):
        clauses = normalize_where([("dueAt", ">=", "2024-01-01")])

        assert matches("a", {"dueAt": "2024-02-01"}, clauses)
        assert not matches("a", {"dueAt": None}, clauses)
        assert not matches("a", {"dueAt": 5}, clauses)

    def test_in_and_not_in(self):
        assert matches("a", {"p": "x"}, normalize_where([("p", "in", ["x", "y"])]))
        assert not matches("a", {"p": "x"}, normalize_where([("p", "not-in", ["x"])]))

    def test_document_id_field(self):
        assert matches("abc", {}, normalize_where([(DOCUMENT_ID, "==", "abc")]))

    def test_list_operator_requires_list(self):
        with pytest.raises(QueryError):
            normalize_where([("tagIds", "array-contains-any", "a")])

    def test_malformed_clause(self):
        with pytest.raises(QueryError):
            normalize_where([("a", "==")])


class TestOrderBy:
    def test_id_tiebreaker_appended(self):
        assert normalize_order_by([("order", None)]) == [("order", "asc"), (DOCUMENT_ID, "asc")]

    def test_explicit_id_not_duplicated(self):
        assert normalize_order_by([(DOCUMENT_ID, "desc")]) == [(DOCUMENT_ID, "desc")]

    def test_bad_direction(self):
        with pytest.raises(QueryError):
            normalize_order_by([("order", "sideways")])


class TestPaths:
    def test_split_and_join(self):
        assert split_path("users/u1/tasks/t1") == ("users/u1/tasks", "t1")
        assert join_path("users/u1/tasks/", "t1") == "users/u1/tasks/t1"

    @pytest.mark.parametrize("path", ["users", "users/u1/tasks", "users//tasks/t1"])
    def test_rejects_non_document_paths(self, path):
        with pytest.raises(ValueError):
            split_path(path)

    def test_store_paths_are_per_user(self):
        assert StorePaths.task_doc("u1", "t1") == "users/u1/tasks/t1"
        assert StorePaths.project_doc("u2", "p1") == "users/u2/projects/p1"
        assert StorePaths.tag_doc("u1", "g") == "users/u1/tags/g"
        assert StorePaths.collection("u1", "tasks") == StorePaths.tasks_col("u1")
