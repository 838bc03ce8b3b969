"""Tests for validation runner."""

import pytest

from eqgraph.schema.errors import SnapshotError, SnapshotLoadError
from eqgraph.validators.runner import run_validators, validate_snapshot_file


class TestRunValidators:
    def test_combines_all_validators(self, sum_workspace):
        result = run_validators(sum_workspace)

        assert result.is_valid
        assert result.issues == []

    def test_collects_issues_from_multiple_validators(self, build):
        ws = build(
            """
nodes:
  a: "4"
  minus: "-"
  out: "="
  stray: "z"
connections:
  - {from: a, to: minus, to_port: 0}
  - {from: minus, to: out}
constraints:
  a:
    - prime
"""
        )
        result = run_validators(ws)

        codes = {issue.code for issue in result.issues}
        assert codes == {"UNCONNECTED_INPUT", "ORPHAN_NODE", "CONSTRAINT_VIOLATION"}
        assert len(result.errors) == 2
        assert len(result.warnings) == 1

    def test_empty_workspace(self, workspace):
        result = run_validators(workspace)

        assert result.is_valid
        assert [i.code for i in result.issues] == ["EMPTY_GRAPH"]


class TestValidateSnapshotFile:
    def test_validate_valid_file(self, examples_dir):
        result = validate_snapshot_file(examples_dir / "minimal_valid.yaml")

        assert result.is_valid
        assert not result.has_warnings

    @pytest.mark.parametrize("name", ["quadratic.yaml", "circle_area.json"])
    def test_other_valid_examples(self, examples_dir, name):
        result = validate_snapshot_file(examples_dir / name)

        assert result.is_valid
        assert not result.has_warnings

    def test_unchecked_constraint_reported_as_info(self, examples_dir):
        result = validate_snapshot_file(examples_dir / "quadratic.yaml")

        assert [(i.code, i.node) for i in result.infos] == [("CONSTRAINT_UNCHECKED", "x")]

    def test_validate_orphan_node_file(self, examples_dir):
        result = validate_snapshot_file(examples_dir / "invalid" / "orphan_node.yaml")

        assert result.is_valid
        warnings = [w for w in result.warnings if w.code == "ORPHAN_NODE"]
        assert len(warnings) == 1
        assert warnings[0].node == "leftover"

    def test_validate_constraint_violation_file(self, examples_dir):
        result = validate_snapshot_file(
            examples_dir / "invalid" / "constraint_violation.yaml"
        )

        violations = [e for e in result.errors if e.code == "CONSTRAINT_VIOLATION"]
        assert {e.node for e in violations} == {"four", "out"}

    def test_restore_issues_come_first(self, examples_dir):
        result = validate_snapshot_file(examples_dir / "invalid" / "cycle.yaml")

        assert result.issues[0].code == "REJECTED_CONNECTION"
        codes = [e.code for e in result.errors]
        assert codes == ["REJECTED_CONNECTION", "UNCONNECTED_INPUT"]
        assert [w.node for w in result.warnings] == ["chain"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotLoadError):
            validate_snapshot_file(tmp_path / "missing.yaml")

    def test_schema_error(self, examples_dir):
        with pytest.raises(SnapshotError):
            validate_snapshot_file(examples_dir / "invalid" / "missing_connection_target.yaml")
