"""Tests for content_audit/analyzer/prompt.py — scoring prompt construction."""

from content_audit.analyzer.prompt import (
    GENERIC_CRITERIA,
    VECTOR_CRITERIA,
    build_prompt,
    json_template,
    vector_criteria,
)
from content_audit.vectors.models import SecurityVector

PII = SecurityVector(id="pii_disclosure", label="PII Disclosure", weight=0)
CUSTOM = SecurityVector(id="malware_links", label="Malware Links",
                        description="Look for links to known malware hosts", weight=5)
BARE = SecurityVector(id="other", label="Other", weight=6)


class TestVectorCriteria:

    def test_builtin_rubric(self):
        assert vector_criteria(PII) == VECTOR_CRITERIA["pii_disclosure"]

    def test_custom_description(self):
        assert vector_criteria(CUSTOM) == "Look for links to known malware hosts"

    def test_generic_fallback(self):
        assert vector_criteria(BARE) == GENERIC_CRITERIA


class TestBuildPrompt:

    def test_json_template(self):
        assert json_template([PII, CUSTOM]) == '{"pii_disclosure": number, "malware_links": number}'

    def test_contains_content_and_vector_lines(self):
        prompt = build_prompt("Call me at 555-0100", [PII, CUSTOM])
        assert "<content>\nCall me at 555-0100\n</content>" in prompt
        assert (
            "- Malware Links: Look for links to known malware hosts "
            "(Score 0-100, where 0=no risk, 100=high risk)"
        ) in prompt
        assert prompt.index("PII Disclosure") < prompt.index("Malware Links")
        assert prompt.rstrip().endswith('{"pii_disclosure": number, "malware_links": number}</output_format>')
