"""Tests for validation rules and the aggregate validator."""

import logging

import pytest

from installkit.params import Parameter
from installkit.validators import Rule, parse_rule, validate_all


class TestRules:
    def test_string(self):
        assert Rule("string").check("x") is None
        assert Rule("string").check(1) is not None

    def test_bool(self):
        assert Rule("bool").check(False) is None
        assert "boolean" in Rule("bool").check("maybe")

    def test_integer_bounds(self):
        rule = Rule("integer", kwargs={"min": 1, "max": 10})
        assert rule.check(5) is None
        assert rule.check(0) == "must be at least 1"
        assert rule.check(11) == "must be at most 10"
        assert rule.check(True) is not None

    def test_absolute_path(self):
        assert Rule("absolute_path").check("/etc/motd") is None
        assert Rule("absolute_path").check(["/a", "b"]) == "'b' is not an absolute path"

    def test_regexp(self):
        rule = Rule("regexp", args=("^[a-z]+$",))
        assert rule.check("abc") is None
        assert "does not match" in rule.check("ABC")

    def test_in(self):
        rule = Rule("in", args=("a", "b"))
        assert rule.check("a") is None
        assert rule.check(["a", "c"]) == "'c' is not one of: a, b"

    def test_unset_passes_except_required(self):
        assert Rule("string").check(None) is None
        assert Rule("required").check(None) == "is required"
        assert Rule("required").check("") == "is required"

    def test_unknown_rule(self):
        with pytest.raises(ValueError, match="Unknown validation rule"):
            Rule("nope")

    def test_bad_arguments(self):
        with pytest.raises(ValueError, match="Invalid arguments"):
            Rule("regexp")

    def test_invalid_pattern(self):
        with pytest.raises(ValueError, match="Invalid pattern"):
            Rule("regexp", args=("(",))

    def test_non_numeric_bounds(self):
        with pytest.raises(ValueError, match="min must be an integer"):
            Rule("integer", kwargs={"min": "1"})
        with pytest.raises(ValueError, match="max must be an integer"):
            Rule("integer", args=(None, 2.5))


class TestParseRule:
    def test_name(self):
        assert parse_rule("string") == Rule("string")

    def test_scalar_argument(self):
        assert parse_rule({"regexp": "^a"}) == Rule("regexp", args=("^a",))

    def test_list_arguments(self):
        assert parse_rule({"in": ["a", "b"]}) == Rule("in", args=("a", "b"))

    def test_keyword_arguments(self):
        assert parse_rule({"integer": {"min": 1}}) == Rule("integer", kwargs={"min": 1})

    def test_malformed(self):
        with pytest.raises(ValueError, match="one-key mapping"):
            parse_rule({"a": 1, "b": 2})


class TestValidateAll:
    def test_all_valid(self, caplog):
        params = [Parameter(name="a", module="m", value="x", rules=[Rule("string")])]
        with caplog.at_level(logging.INFO):
            assert validate_all(params)
        assert "Running validation checks" in caplog.text

    def test_reports_every_invalid_parameter(self, caplog):
        params = [
            Parameter(name="a", module="m", required=True),
            Parameter(name="b", module="m", value="x", rules=[Rule("integer")]),
            Parameter(name="c", module="m", value="ok"),
            Parameter(name="d", module="m", value="rel", rules=[Rule("absolute_path")]),
        ]
        with caplog.at_level(logging.INFO):
            assert validate_all(params) is False

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 3
        assert "m::a" in errors[0].getMessage()
        assert "m::b" in errors[1].getMessage()
        assert "m::d" in errors[2].getMessage()

    def test_empty(self):
        assert validate_all([])
