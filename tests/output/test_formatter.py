"""Tests for output formatting."""

import json

from eqgraph.output.formatter import format_equations, format_validation_result
from eqgraph.validators.base import ValidationResult


def _result_with_issues() -> ValidationResult:
    result = ValidationResult()
    result.add_error("UNCONNECTED_INPUT", "Input 1 is not connected", node="minus", port=1)
    result.add_warning("ORPHAN_NODE", "Node 'y' does not feed any output", node="y")
    result.add_info("CONSTRAINT_UNCHECKED", "Value 'x' is not numeric", node="x")
    return result


class TestFormatValidationResult:
    def test_text_sections(self):
        text = format_validation_result(_result_with_issues())

        assert "ERRORS:\n  ✘ UNCONNECTED_INPUT: [minus] Input 1 is not connected" in text
        assert "WARNINGS:\n  ⚠ ORPHAN_NODE: [y]" in text
        assert "INFO:\n  ℹ CONSTRAINT_UNCHECKED: [x]" in text
        assert text.endswith("Validation failed: 1 error(s), 1 warning(s)")

    def test_text_passed(self):
        text = format_validation_result(ValidationResult())

        assert "ERRORS:\n  (none)" in text
        assert text.endswith("Validation passed")

    def test_strict_fails_on_warnings(self):
        result = ValidationResult()
        result.add_warning("ORPHAN_NODE", "orphan", node="y")

        assert format_validation_result(result).endswith("Validation passed with 1 warning(s)")
        assert "Validation failed" in format_validation_result(result, strict=True)
        assert json.loads(format_validation_result(result, "json", strict=True))["valid"] is False

    def test_json(self):
        data = json.loads(format_validation_result(_result_with_issues(), "json"))

        assert data["valid"] is False
        assert data["error_count"] == 1
        assert data["warning_count"] == 1
        assert data["issues"][0] == {
            "code": "UNCONNECTED_INPUT",
            "message": "Input 1 is not connected",
            "severity": "error",
            "node": "minus",
            "connection": None,
            "details": {"port": 1},
        }


class TestFormatEquations:
    def test_text(self):
        text = format_equations({"out": "(2 + 3)", "out2": "(x - 1)"}, {"out": 5.0, "out2": None})
        assert text == "out: (2 + 3) = 5\nout2: (x - 1)"

    def test_no_outputs(self):
        assert format_equations({}) == "No output nodes"

    def test_json(self):
        data = json.loads(format_equations({"out": "(2 + 3)"}, {"out": 5.0}, "json"))
        assert data == {"equations": [{"node": "out", "equation": "(2 + 3)", "value": 5.0}]}
