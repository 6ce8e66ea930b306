import pytest

from tailer.errors import ConfigurationError
from tailer.filters.patterns import PatternFilter, PatternGroup, parse_filter_query

LINES = ["db error seen", "warn only", "info only", "error without the store"]


class TestPatternGroup:

    def test_all_expressions_must_match(self):
        group = PatternGroup(["error", "db"])
        assert group.matches("db error seen")
        assert not group.matches("error without the store")

    def test_expressions_are_regular_expressions(self):
        group = PatternGroup([r"^\d{4}-\d{2}", r"ERR(OR)?$"])
        assert group.matches("2024-01 disk ERR")
        assert not group.matches("note 2024-01 ERROR")

    def test_malformed_expression_fails_at_construction(self):
        with pytest.raises(ConfigurationError):
            PatternGroup(["ok", "[unclosed"])

    def test_empty_group_is_rejected(self):
        with pytest.raises(ConfigurationError):
            PatternGroup([])


class TestPatternFilter:

    def test_no_groups_accepts_everything(self):
        pattern_filter = PatternFilter()
        assert all(pattern_filter.accepts(line) for line in LINES)
        assert not pattern_filter

    def test_groups_are_or_combined(self):
        pattern_filter = PatternFilter([["error", "db"], ["warn"]])
        assert [line for line in LINES if pattern_filter(line)] == ["db error seen", "warn only"]

    def test_filter_is_idempotent(self):
        pattern_filter = PatternFilter([["error"], ["warn"]])
        once = [line for line in LINES if pattern_filter(line)]
        twice = [line for line in once if pattern_filter(line)]
        assert once == twice

    def test_accepts_prebuilt_groups(self):
        pattern_filter = PatternFilter([PatternGroup(["info"])])
        assert len(pattern_filter) == 1
        assert pattern_filter.accepts("info only")


class TestParseFilterQuery:

    @pytest.mark.parametrize("query, expected", [
        ("", []),
        ("error", [["error"]]),
        ("error&&db||warn", [["error", "db"], ["warn"]]),
        (" error && db || warn ", [["error", "db"], ["warn"]]),
        ("a&&||b", [["a"], ["b"]]),
        ("||&&||", []),
    ])
    def test_parse(self, query, expected):
        assert parse_filter_query(query) == expected

    def test_parsed_query_drives_a_filter(self):
        pattern_filter = PatternFilter(parse_filter_query("error&&db||warn"))
        assert pattern_filter.accepts("db error seen")
        assert not pattern_filter.accepts("info only")
