"""Shared fixtures for tests."""

from pathlib import Path

import pytest

from eqgraph.schema.loader import parse_snapshot_from_string
from eqgraph.workspace import EquationWorkspace


@pytest.fixture
def examples_dir() -> Path:
    """Return the path to the examples directory."""
    return Path(__file__).parent.parent / "examples"


@pytest.fixture
def workspace() -> EquationWorkspace:
    """Return an empty workspace."""
    return EquationWorkspace()


@pytest.fixture
def sum_yaml() -> str:
    """Return a snapshot of (3 + 4) feeding an output."""
    return """
nodes:
  a: "3"
  b: "4"
  plus: "+"
  out: "="
connections:
  - {from: a, to: plus, to_port: 0}
  - {from: b, to: plus, to_port: 1}
  - {from: plus, to: out}
"""


@pytest.fixture
def sum_workspace(sum_yaml) -> EquationWorkspace:
    """Return a workspace restored from the (3 + 4) snapshot."""
    return EquationWorkspace.from_snapshot(parse_snapshot_from_string(sum_yaml))


@pytest.fixture
def build():
    """Return a helper that restores a workspace from a YAML string."""

    def _build(text: str) -> EquationWorkspace:
        return EquationWorkspace.from_snapshot(parse_snapshot_from_string(text))

    return _build
