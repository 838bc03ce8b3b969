"""Tests for validation issue records."""

from eqgraph.validators.base import Severity, ValidationResult


class TestValidationIssue:
    def test_location_prefers_node(self):
        result = ValidationResult()
        issue = result.add_error("REJECTED_CONNECTION", "cycle", node="plus", connection="conn-3")

        assert issue.location == "plus"
        assert str(issue) == "ERROR: REJECTED_CONNECTION [plus] - cycle"

    def test_location_falls_back_to_connection(self):
        issue = ValidationResult().add_warning("DROPPED", "port removed", connection="conn-1")

        assert issue.location == "conn-1"
        assert str(issue) == "WARNING: DROPPED [conn-1] - port removed"

    def test_to_dict_carries_details(self):
        issue = ValidationResult().add_error("UNCONNECTED_INPUT", "missing", node="minus", port=1)

        assert issue.to_dict() == {
            "code": "UNCONNECTED_INPUT",
            "message": "missing",
            "severity": "error",
            "node": "minus",
            "connection": None,
            "details": {"port": 1},
        }


class TestValidationResult:
    def test_only_errors_invalidate(self):
        result = ValidationResult()
        result.add_warning("ORPHAN_NODE", "orphan", node="y")
        result.add_info("CONSTRAINT_UNCHECKED", "not numeric", node="x")

        assert result.is_valid
        assert result.has_warnings
        assert not result.has_errors

    def test_severity_views(self):
        result = ValidationResult()
        result.add(Severity.ERROR, "A", "first")
        result.add("warning", "B", "second")
        result.add_error("C", "third")

        assert [i.code for i in result.of_severity(Severity.ERROR)] == ["A", "C"]
        assert [i.code for i in result.warnings] == ["B"]
        assert result.error_messages == ["first", "third"]

    def test_merge_keeps_order(self):
        first = ValidationResult()
        first.add_error("A", "a")
        second = ValidationResult()
        second.add_info("B", "b")

        first.merge(second)

        assert [i.code for i in first.issues] == ["A", "B"]
