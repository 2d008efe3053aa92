"""Tests for candidate normalization and display-string conversion."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from normalize.confidence import ConfidencePolicy, MIN_CONFIDENCE
from normalize.options import normalize_options
from normalize.safe_string import to_display_string


class TestToDisplayString:
    def test_string_passthrough(self):
        assert to_display_string("hello") == "hello"

    def test_numbers_and_booleans(self):
        assert to_display_string(42) == "42"
        assert to_display_string(True) == "true"
        assert to_display_string(False) == "false"

    def test_none(self):
        assert to_display_string(None) is None

    def test_object_serialized(self):
        assert '"foo":"bar"' in to_display_string({"foo": "bar"})

    def test_circular_structure_returns_none(self):
        recursive: dict = {}
        recursive["self"] = recursive
        assert to_display_string(recursive) is None

    def test_unserializable_returns_none(self):
        assert to_display_string({"when": object()}) is None


class TestNormalizeOptions:
    def test_string_candidate(self):
        result = normalize_options("Alice Zhang", group_id="g1", group_label="person")
        assert len(result) == 1
        assert result[0].value == "Alice Zhang"
        assert result[0].group_id == "g1"
        assert result[0].group_label == "person"
        assert result[0].confidence > MIN_CONFIDENCE

    def test_object_value_stringified_and_clamped(self):
        result = normalize_options({"value": {"name": "Bob"}, "confidence": 1.5}, group_id="g2")
        assert len(result) == 1
        assert '"name":"Bob"' in result[0].value
        assert result[0].confidence == 1.0

    def test_low_confidence_filtered(self):
        assert normalize_options([{"value": "weak", "confidence": 0.1}]) == []

    def test_missing_confidence_filtered(self):
        assert normalize_options({"value": "no score"}) == []

    def test_missing_value_discarded(self):
        assert normalize_options({"confidence": 0.9}) == []
        assert normalize_options({"value": "", "confidence": 0.9}) == []

    def test_blank_string_discarded(self):
        assert normalize_options(["", "   "]) == []

    def test_non_string_value_coerced(self):
        result = normalize_options({"value": 42, "confidence": 0.8})
        assert result[0].value == "42"

    def test_boolean_confidence_ignored(self):
        assert normalize_options({"value": "x", "confidence": True}) == []

    def test_array_sorted_descending(self):
        result = normalize_options([
            {"value": "b", "confidence": 0.8},
            {"value": "a", "confidence": 0.95},
            "plain text candidate",
            {"value": "c", "confidence": 0.9},
        ])
        confidences = [o.confidence for o in result]
        assert confidences == sorted(confidences, reverse=True)
        assert result[0].value == "a"
        assert all(c >= MIN_CONFIDENCE for c in confidences)

    def test_primitives_and_nested_arrays_dropped(self):
        assert normalize_options([12, None, ["nested"], True]) == []
        assert normalize_options(None) == []

    def test_rationale_and_source_text(self):
        result = normalize_options({
            "value": "ACME",
            "confidence": 0.9,
            "rationale": {"line": 3},
            "sourceText": "Works at ACME",
        })
        assert result[0].rationale == '{"line":3}'
        assert result[0].source_text == "Works at ACME"

    def test_source_text_must_be_string(self):
        result = normalize_options({"value": "ACME", "confidence": 0.9, "sourceText": 5})
        assert result[0].source_text is None

    def test_oversized_integer_confidence_filtered(self):
        assert normalize_options({"value": "ACME", "confidence": 10**400}) == []

    def test_custom_policy_threshold(self):
        policy = ConfidencePolicy(min_confidence=0.5)
        result = normalize_options({"value": "maybe", "confidence": 0.6}, policy=policy)
        assert [o.value for o in result] == ["maybe"]

    def test_longer_strings_not_less_confident(self):
        result = normalize_options(["Al", "Alice Zhang from ACME"])
        assert result[0].value == "Alice Zhang from ACME"
        assert result[0].confidence >= result[1].confidence

    @pytest.mark.parametrize("raw", ["x", {"value": "x", "confidence": 0.8}, ["x"]])
    def test_group_meta_attached(self, raw):
        result = normalize_options(raw, group_id="g", group_label="L")
        assert all(o.group_id == "g" and o.group_label == "L" for o in result)
