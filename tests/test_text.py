"""Tests for stringification, error normalization and question sanitizing."""

from __future__ import annotations

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from echolog.records import ErrorPayload
from echolog.text import describe_error, join_values, sanitize_question, to_text


class TestToText:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("plain", "plain"),
            (3, "3"),
            (2.5, "2.5"),
            (True, "true"),
            (False, "false"),
            (None, "null"),
            ({"a": 1, "b": [1, 2]}, '{"a":1,"b":[1,2]}'),
            ([1, "x"], '[1,"x"]'),
            ((1, 2), "[1,2]"),
        ],
    )
    def test_known_values(self, value, expected):
        assert to_text(value) == expected

    def test_key_order_preserved(self):
        assert to_text({"z": 1, "a": 2}) == '{"z":1,"a":2}'

    def test_unserializable_falls_back_to_error_text(self):
        out = to_text({"when": object()})
        assert "not JSON serializable" in out

    def test_circular_falls_back(self):
        d: dict = {}
        d["self"] = d
        assert "Circular" in to_text(d)

    def test_unprintable_object(self):
        class Nasty:
            def __str__(self):
                raise RuntimeError("no")

        assert to_text(Nasty()).startswith("<unprintable Nasty")

    def test_join_values(self):
        assert join_values(("a", 1, True)) == "a 1 true"
        assert join_values(()) == ""

    @given(st.dictionaries(st.text(), st.integers() | st.text() | st.booleans()))
    def test_mappings_round_trip_as_json(self, d):
        assert json.loads(to_text(d)) == d


class TestDescribeError:
    def test_string(self):
        p = describe_error("oops")
        assert p.message == "oops"
        assert p.stack.startswith("Error: oops")

    def test_raised_exception_has_traceback(self):
        try:
            raise ValueError("bad value")
        except ValueError as err:
            p = describe_error(err)
        assert p.message == "bad value"
        assert "Traceback" in p.stack
        assert "ValueError: bad value" in p.stack

    def test_unraised_exception(self):
        p = describe_error(KeyError("k"))
        assert "KeyError" in p.stack

    def test_descriptor(self):
        assert describe_error({"message": "m", "stack": "s"}) == ErrorPayload("m", "s")

    def test_descriptor_missing_stack(self):
        assert describe_error({"message": "m"}) == ErrorPayload("m", None)

    def test_descriptor_non_string_message(self):
        assert describe_error({"message": 404}).message == "404"

    def test_other_values_coerced(self):
        assert describe_error(12).message == "12"


class TestSanitizeQuestion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("<b>Continue?</b>", "Continue?"),
            ("  Go?  ", "Go?"),
            ("<i>a</i> and <br/>b", "a and b"),
            ("Ready?\x00\x1b", "Ready?"),
            ("line one\nline two", "line one line two"),
            ("unclosed <tag", "unclosed"),
            (42, "42"),
        ],
    )
    def test_examples(self, raw, expected):
        assert sanitize_question(raw) == expected

    @given(st.text())
    def test_never_contains_control_chars(self, s):
        out = sanitize_question(s)
        assert not any(ord(c) < 0x20 or ord(c) == 0x7F for c in out)

    @given(st.text())
    def test_trimmed(self, s):
        out = sanitize_question(s)
        assert out == out.strip()

    @given(st.text().filter(lambda s: "<" not in s and ">" not in s))
    def test_tagged_text_matches_untagged(self, s):
        assert sanitize_question(f"<b>{s}</b>") == sanitize_question(s)
