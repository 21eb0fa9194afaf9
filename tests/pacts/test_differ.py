"""Tests for structural pact diffing."""

import json

import pytest

from pactbroker.pacts.differ import MISSING, Difference, diff, differs, parse_content


class TestDiffers:
    def test_identical_content_does_not_differ(self) -> None:
        body = json.dumps({"interactions": [{"description": "x"}]})
        assert differs(body, body) is False

    def test_key_order_is_ignored(self) -> None:
        a = '{"consumer": {"name": "Foo"}, "provider": {"name": "Bar"}}'
        b = '{"provider": {"name": "Bar"}, "consumer": {"name": "Foo"}}'
        assert differs(a, b) is False

    def test_whitespace_is_ignored(self) -> None:
        assert differs('{"a": [1, 2]}', '{ "a" : [ 1,2 ] }') is False

    def test_changed_value_differs(self) -> None:
        assert differs('{"a": 1}', '{"a": 2}') is True

    def test_extra_key_on_either_side_differs(self) -> None:
        assert differs('{"a": 1}', '{"a": 1, "b": 2}') is True
        assert differs('{"a": 1, "b": 2}', '{"a": 1}') is True

    def test_array_order_matters(self) -> None:
        assert differs('[1, 2]', '[2, 1]') is True

    def test_array_length_differs(self) -> None:
        assert differs('[1, 2]', '[1, 2, 3]') is True

    def test_json_types_are_strict(self) -> None:
        assert differs('{"a": 1}', '{"a": true}') is True
        assert differs('{"a": 1}', '{"a": "1"}') is True
        assert differs('{"a": null}', '{"a": false}') is True

    def test_integer_and_float_forms_are_equal(self) -> None:
        assert differs('{"a": 1}', '{"a": 1.0}') is False

    def test_accepts_bytes(self) -> None:
        assert differs(b'{"a": 1}', '{"a": 1}') is False

    def test_malformed_content_raises(self) -> None:
        with pytest.raises(ValueError, match="not valid JSON"):
            differs('{"a": 1}', "{not json")

    def test_malformed_content_is_not_treated_as_different(self) -> None:
        with pytest.raises(ValueError):
            differs("", "")


class TestDiff:
    def test_reports_paths(self) -> None:
        a = {"interactions": [{"request": {"path": "/a"}}], "metadata": {"v": "2"}}
        b = {"interactions": [{"request": {"path": "/b"}}], "extra": True}
        result = diff(a, b)
        assert result == [
            Difference("$.extra", MISSING, True),
            Difference("$.interactions[0].request.path", "/a", "/b"),
            Difference("$.metadata", {"v": "2"}, MISSING),
        ]

    def test_missing_array_element(self) -> None:
        assert diff([1], []) == [Difference("$[0]", 1, MISSING)]

    def test_no_differences(self) -> None:
        assert diff('{"a": {"b": [1, {"c": null}]}}', '{"a": {"b": [1, {"c": null}]}}') == []


class TestParseContent:
    def test_parsed_documents_pass_through(self) -> None:
        doc = {"a": 1}
        assert parse_content(doc) is doc

    def test_parses_text(self) -> None:
        assert parse_content('{"a": [1]}') == {"a": [1]}
