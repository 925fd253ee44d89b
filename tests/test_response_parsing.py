"""Tests for JSON extraction from model output."""

import pytest


class TestParseJsonPayload:
    def test_direct_json(self):
        from tools.response_parsing import parse_json_payload
        assert parse_json_payload('{"key": "value", "num": 42}') == {"key": "value", "num": 42}

    def test_markdown_code_fence_with_lang(self):
        from tools.response_parsing import parse_json_payload
        assert parse_json_payload('```json\n{"key": "value"}\n```') == {"key": "value"}

    def test_markdown_code_fence_without_lang(self):
        from tools.response_parsing import parse_json_payload
        assert parse_json_payload('```\n[1, 2]\n```') == [1, 2]

    def test_json_embedded_in_prose(self):
        from tools.response_parsing import parse_json_payload
        result = parse_json_payload('Here is the outline: {"chapters": []} Hope it helps!')
        assert result == {"chapters": []}

    def test_raw_newline_inside_string(self):
        from tools.response_parsing import parse_json_payload
        result = parse_json_payload('{"description": "line one\nline two"}')
        assert result["description"] == "line one\nline two"

    def test_invalid_raises_parse_error(self):
        from config.exceptions import ProviderResponseParseError
        from tools.response_parsing import parse_json_payload
        with pytest.raises(ProviderResponseParseError, match="Failed to parse"):
            parse_json_payload("not json at all")


class TestShapedParsing:
    def test_object_unwrapped_from_list(self):
        from tools.response_parsing import parse_json_object
        assert parse_json_object('[{"chapters": []}]') == {"chapters": []}

    def test_object_required(self):
        from config.exceptions import ProviderResponseParseError
        from tools.response_parsing import parse_json_object
        with pytest.raises(ProviderResponseParseError):
            parse_json_object("[1, 2, 3]")

    def test_array_wraps_single_object(self):
        from tools.response_parsing import parse_json_array
        assert parse_json_array('{"title": "Only"}') == [{"title": "Only"}]

    def test_array_rejects_scalar(self):
        from config.exceptions import ProviderResponseParseError
        from tools.response_parsing import parse_json_array
        with pytest.raises(ProviderResponseParseError):
            parse_json_array("42")
