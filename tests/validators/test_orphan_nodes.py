"""Tests for orphan node detection."""

from eqgraph.validators.orphan_detector import check_orphan_nodes


class TestOrphanDetector:
    def test_no_orphans(self, sum_workspace):
        result = check_orphan_nodes(sum_workspace)

        assert result.is_valid
        assert len(result.warnings) == 0

    def test_detects_orphan(self, build):
        ws = build(
            """
nodes:
  a: "1"
  out: "="
  leftover: "y"
connections:
  - {from: a, to: out}
"""
        )
        result = check_orphan_nodes(ws)

        assert len(result.warnings) == 1
        assert result.warnings[0].code == "ORPHAN_NODE"
        assert result.warnings[0].node == "leftover"
        assert result.is_valid

    def test_disconnected_subgraph_is_orphaned(self, build):
        ws = build(
            """
nodes:
  a: "1"
  out: "="
  b: "2"
  c: "3"
  minus: "-"
connections:
  - {from: a, to: out}
  - {from: b, to: minus, to_port: 0}
  - {from: c, to: minus, to_port: 1}
"""
        )
        result = check_orphan_nodes(ws)

        assert {w.node for w in result.warnings} == {"b", "c", "minus"}

    def test_unconnected_output_is_not_orphan(self, build):
        ws = build(
            """
nodes:
  out: "="
"""
        )
        assert check_orphan_nodes(ws).issues == []

    def test_skipped_without_outputs(self, build):
        ws = build(
            """
nodes:
  a: "1"
  b: "2"
"""
        )
        assert check_orphan_nodes(ws).issues == []
