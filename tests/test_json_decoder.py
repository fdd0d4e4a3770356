"""Tests for content_audit/analyzer/json_decoder.py — tolerant JSON extraction."""

from content_audit.analyzer.json_decoder import extract_json_object


class TestExtractJsonObject:

    def test_plain_object(self):
        assert extract_json_object('{"pii_disclosure": 5}') == {"pii_disclosure": 5}

    def test_fenced_block(self):
        raw = 'Here are the scores:\n```json\n{"pii_disclosure": 5}\n```\nThanks.'
        assert extract_json_object(raw) == {"pii_disclosure": 5}

    def test_unlabelled_fence(self):
        assert extract_json_object('```\n{"a": 1}\n```') == {"a": 1}

    def test_embedded_in_prose(self):
        raw = 'The scores are {"pii_disclosure": 80, "credentials_disclosure": 3} overall.'
        assert extract_json_object(raw) == {"pii_disclosure": 80, "credentials_disclosure": 3}

    def test_braces_inside_strings(self):
        raw = 'Result: {"note": "looks like {this}", "score": 4} done'
        assert extract_json_object(raw) == {"note": "looks like {this}", "score": 4}

    def test_nested_object(self):
        raw = 'x {"a": {"b": 1}} y'
        assert extract_json_object(raw) == {"a": {"b": 1}}

    def test_array_is_failure(self):
        assert extract_json_object("[1, 2, 3]") is None

    def test_garbage(self):
        assert extract_json_object("I cannot help with that.") is None
        assert extract_json_object("{not json}") is None

    def test_empty(self):
        assert extract_json_object("") is None
        assert extract_json_object("   ") is None
        assert extract_json_object(None) is None

    def test_unbalanced(self):
        assert extract_json_object('{"a": 1') is None
