"""Integration tests for CLI."""

import json

import pytest
from click.testing import CliRunner

from eqgraph.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestValidateCommand:
    def test_validate_valid_file(self, runner, examples_dir):
        result = runner.invoke(
            main, ["validate", str(examples_dir / "minimal_valid.yaml")]
        )

        assert result.exit_code == 0
        assert "Validation passed" in result.output

    def test_validate_with_errors(self, runner, examples_dir):
        result = runner.invoke(
            main, ["validate", str(examples_dir / "invalid" / "unconnected_input.yaml")]
        )

        assert result.exit_code == 1
        assert "UNCONNECTED_INPUT" in result.output
        assert "Validation failed: 1 error(s)" in result.output

    def test_validate_with_warnings(self, runner, examples_dir):
        result = runner.invoke(
            main, ["validate", str(examples_dir / "invalid" / "orphan_node.yaml")]
        )

        # Warnings don't cause failure by default
        assert result.exit_code == 0
        assert "ORPHAN_NODE" in result.output
        assert "Validation passed with 1 warning(s)" in result.output

    def test_validate_strict_mode(self, runner, examples_dir):
        result = runner.invoke(
            main,
            [
                "validate",
                str(examples_dir / "invalid" / "orphan_node.yaml"),
                "--strict",
            ],
        )

        # In strict mode, warnings cause failure
        assert result.exit_code == 1

    def test_validate_division_by_zero_is_a_warning(self, runner, examples_dir):
        result = runner.invoke(
            main, ["validate", str(examples_dir / "invalid" / "division_by_zero.yaml")]
        )

        assert result.exit_code == 0
        assert "DIVISION_BY_ZERO" in result.output

    def test_validate_constraint_violation(self, runner, examples_dir):
        result = runner.invoke(
            main, ["validate", str(examples_dir / "invalid" / "constraint_violation.yaml")]
        )

        assert result.exit_code == 1
        assert "Value 4 of '4' violates must be prime" in result.output
        assert "Value 12 of '=' violates < 10" in result.output

    def test_validate_rejected_connection(self, runner, examples_dir):
        result = runner.invoke(
            main, ["validate", str(examples_dir / "invalid" / "cycle.yaml")]
        )

        assert result.exit_code == 1
        assert "REJECTED_CONNECTION" in result.output
        assert "circular dependency" in result.output

    def test_validate_json_output(self, runner, examples_dir):
        result = runner.invoke(
            main,
            [
                "validate",
                str(examples_dir / "minimal_valid.yaml"),
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["valid"] is True
        assert data["error_count"] == 0
        assert data["issues"] == []

    def test_validate_schema_error(self, runner, examples_dir):
        result = runner.invoke(
            main,
            ["validate", str(examples_dir / "invalid" / "missing_connection_target.yaml")],
        )

        assert result.exit_code == 2
        assert "Schema validation error" in result.output

    def test_validate_unparseable_file(self, runner, tmp_path):
        broken = tmp_path / "broken.yaml"
        broken.write_text("nodes: [unclosed")

        result = runner.invoke(main, ["validate", str(broken)])

        assert result.exit_code == 2
        assert "Error loading file" in result.output

    def test_validate_nonexistent_file(self, runner):
        result = runner.invoke(main, ["validate", "/nonexistent/file.yaml"])

        assert result.exit_code == 2


class TestRenderCommand:
    def test_render_with_value(self, runner, examples_dir):
        result = runner.invoke(main, ["render", str(examples_dir / "minimal_valid.yaml")])

        assert result.exit_code == 0
        assert result.output.strip() == "node-3: (2 + 3) = 5"

    def test_render_symbolic_equation(self, runner, examples_dir):
        result = runner.invoke(main, ["render", str(examples_dir / "quadratic.yaml")])

        assert result.exit_code == 0
        assert "out: ((2 × (x)^(2)) + (3 × x) + 1)" in result.output

    def test_render_ascii(self, runner, examples_dir):
        result = runner.invoke(
            main, ["render", str(examples_dir / "quadratic.yaml"), "--ascii"]
        )

        assert "((2 * (x)^(2)) + (3 * x) + 1)" in result.output

    def test_render_json(self, runner, examples_dir):
        result = runner.invoke(
            main,
            ["render", str(examples_dir / "circle_area.json"), "--format", "json"],
        )

        data = json.loads(result.output)
        equation = data["equations"][0]
        assert equation["node"] == "out"
        assert equation["equation"] == "(π × (3)^(2))"
        assert equation["value"] == pytest.approx(28.274333882308138)

    def test_render_reports_restore_issues(self, runner, examples_dir):
        result = runner.invoke(main, ["render", str(examples_dir / "invalid" / "cycle.yaml")])

        assert result.exit_code == 0
        assert "REJECTED_CONNECTION" in result.output
        assert "out: (1 + ?)" in result.output

    def test_render_without_outputs(self, runner, tmp_path):
        graph = tmp_path / "graph.yaml"
        graph.write_text("nodes:\n  a: '1'\n")

        result = runner.invoke(main, ["render", str(graph)])

        assert result.output.strip() == "No output nodes"


class TestCheckCommand:
    def test_valid_value(self, runner, examples_dir):
        result = runner.invoke(
            main, ["check", str(examples_dir / "quadratic.yaml"), "x", "5"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "VALID: 5"

    def test_invalid_value(self, runner, examples_dir):
        result = runner.invoke(
            main, ["check", str(examples_dir / "quadratic.yaml"), "coef_c", "2.5"]
        )

        assert result.exit_code == 1
        assert "INVALID: 2.5" in result.output
        assert "✘ ∈ ℤ" in result.output

    def test_non_numeric_value(self, runner, examples_dir):
        result = runner.invoke(
            main, ["check", str(examples_dir / "quadratic.yaml"), "x", "abc"]
        )

        assert result.exit_code == 0
        assert result.output.startswith("UNCHECKED:")

    def test_unknown_node(self, runner, examples_dir):
        result = runner.invoke(
            main, ["check", str(examples_dir / "quadratic.yaml"), "nope", "1"]
        )

        assert result.exit_code == 2
        assert "Unknown node: nope" in result.output


class TestStatsCommand:
    def test_stats(self, runner, examples_dir):
        result = runner.invoke(main, ["stats", str(examples_dir / "minimal_valid.yaml")])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total_nodes"] == 4
        assert data["output_nodes"] == 1
        assert data["valid_equations"] == 1
        assert data["connections"]["total_connections"] == 3


class TestSettings:
    def test_config_file(self, runner, examples_dir):
        result = runner.invoke(
            main,
            [
                "--config",
                str(examples_dir / "settings.yaml"),
                "render",
                str(examples_dir / "minimal_valid.yaml"),
            ],
        )

        assert result.exit_code == 0

    def test_strict_from_config(self, runner, examples_dir, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("strict: true\n")

        result = runner.invoke(
            main,
            [
                "--config",
                str(config),
                "validate",
                str(examples_dir / "invalid" / "orphan_node.yaml"),
            ],
        )

        assert result.exit_code == 1

    def test_ascii_from_config(self, runner, examples_dir, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("unicode: false\n")

        result = runner.invoke(
            main,
            ["--config", str(config), "render", str(examples_dir / "quadratic.yaml")],
        )

        assert "(3 * x)" in result.output

    def test_invalid_config(self, runner, examples_dir, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("log_level: loud\n")

        result = runner.invoke(
            main,
            ["--config", str(config), "render", str(examples_dir / "minimal_valid.yaml")],
        )

        assert result.exit_code == 2
        assert "Invalid settings" in result.output

    def test_log_level_from_environment(self, runner, examples_dir):
        result = runner.invoke(
            main,
            ["render", str(examples_dir / "minimal_valid.yaml")],
            env={"EQGRAPH_LOG_LEVEL": "debug"},
        )

        assert result.exit_code == 0

    def test_rejects_unknown_log_level(self, runner, examples_dir):
        result = runner.invoke(
            main,
            ["--log-level", "LOUD", "render", str(examples_dir / "minimal_valid.yaml")],
        )

        assert result.exit_code == 2
