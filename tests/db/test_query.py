"""Tests for db/query.py query builders."""

from camp_core.db.query import build_update_clause


class TestBuildUpdateClause:
    """Tests for build_update_clause function."""

    def test_single_column(self):
        clause, params = build_update_clause({"name": "Ann"})
        assert clause == "name = ?"
        assert params == ["Ann"]

    def test_multiple_columns_joined_with_comma(self):
        clause, params = build_update_clause({"name": "Ann", "phone": "555-0100"})
        assert clause == "name = ?, phone = ?"
        assert params == ["Ann", "555-0100"]

    def test_none_values_skipped(self):
        """None means 'leave unchanged' for partial updates."""
        clause, params = build_update_clause({"name": "Ann", "phone": None})
        assert clause == "name = ?"
        assert params == ["Ann"]

    def test_excluded_columns_skipped(self):
        clause, params = build_update_clause({"id": "x", "name": "Ann"}, exclude={"id"})
        assert clause == "name = ?"
        assert params == ["Ann"]

    def test_nothing_to_update(self):
        clause, params = build_update_clause({"name": None})
        assert clause == ""
        assert params == []

    def test_falsy_values_kept(self):
        """Only None is skipped; empty strings and zero are real values."""
        clause, params = build_update_clause({"phone": "", "count": 0})
        assert clause == "phone = ?, count = ?"
        assert params == ["", 0]
