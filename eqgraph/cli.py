"""Command-line interface for eqgraph."""

import json
import logging
import sys

import click

from .config import Settings, load_settings
from .output.formatter import format_equations, format_validation_result
from .schema.errors import SnapshotError, SnapshotLoadError
from .schema.loader import parse_snapshot
from .validators.runner import validate_snapshot_file
from .workspace import EquationWorkspace

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _fail_on_schema_error(error: Exception) -> None:
    """Report a load or schema error and exit with code 2."""
    if isinstance(error, SnapshotLoadError):
        click.echo(f"Error loading file: {error}", err=True)
    else:
        click.echo(f"Schema validation error: {error}", err=True)
        for err in getattr(error, "errors", []):
            click.echo(f"  - {err['loc']}: {err['msg']}", err=True)
    sys.exit(2)


def _load_workspace(snapshot_file: str) -> EquationWorkspace:
    """Restore a workspace from a file, exiting on load or schema errors."""
    try:
        snapshot = parse_snapshot(snapshot_file)
        workspace = EquationWorkspace()
        restored = workspace.restore(snapshot)
    except (SnapshotLoadError, SnapshotError) as e:
        _fail_on_schema_error(e)

    for issue in restored.issues:
        click.echo(str(issue), err=True)
    return workspace


@click.group()
@click.version_option()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True),
    default=None,
    help="YAML settings file",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.option(
    "--log-level",
    envvar="EQGRAPH_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (defaults to EQGRAPH_LOG_LEVEL env var or the settings file)",
)
@click.pass_context
def main(ctx: click.Context, config_file: str | None, verbose: bool, log_level: str | None):
    """eqgraph: build and check equations from node graphs."""
    try:
        settings = load_settings(config_file)
    except (SnapshotLoadError, SnapshotError) as e:
        _fail_on_schema_error(e)

    level = "DEBUG" if verbose else (log_level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)

    ctx.obj = settings


@main.command()
@click.argument("snapshot_file", type=click.Path(exists=True))
@click.option("--ascii", "ascii_only", is_flag=True, default=False, help="Use * / sqrt glyphs")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_obj
def render(settings: Settings, snapshot_file: str, ascii_only: bool, output_format: str):
    """Render the equation at every output node.

    SNAPSHOT_FILE is the path to a YAML or JSON graph snapshot.

    Exit codes:
      0 - Rendered
      2 - File or schema error
    """
    workspace = _load_workspace(snapshot_file)
    unicode = settings.unicode and not ascii_only

    equations = {
        node_id: workspace.generator.render_formatted(node_id, unicode=unicode)
        for node_id in workspace.registry.output_ids()
    }
    results = {node_id: workspace.generator.evaluate(node_id) for node_id in equations}

    click.echo(format_equations(equations, results, output_format))  # type: ignore
    sys.exit(0)


@main.command()
@click.argument("snapshot_file", type=click.Path(exists=True))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors",
)
@click.pass_obj
def validate(settings: Settings, snapshot_file: str, output_format: str, strict: bool):
    """Validate a graph snapshot file.

    SNAPSHOT_FILE is the path to a YAML or JSON graph snapshot.

    Exit codes:
      0 - Validation passed
      1 - Validation failed (errors found)
      2 - File or schema error
    """
    strict = strict or settings.strict

    try:
        result = validate_snapshot_file(snapshot_file)
    except (SnapshotLoadError, SnapshotError) as e:
        _fail_on_schema_error(e)

    # Output the result
    output = format_validation_result(result, output_format, strict)  # type: ignore
    click.echo(output)

    # Determine exit code
    if result.has_errors:
        sys.exit(1)
    elif strict and result.has_warnings:
        sys.exit(1)
    else:
        sys.exit(0)


@main.command()
@click.argument("snapshot_file", type=click.Path(exists=True))
@click.argument("node_id")
@click.argument("value")
def check(snapshot_file: str, node_id: str, value: str):
    """Check a candidate VALUE against the constraints of NODE_ID.

    The snapshot is not modified.

    Exit codes:
      0 - Value satisfies the constraints (or could not be checked)
      1 - Value violates a constraint
      2 - File, schema or unknown node error
    """
    workspace = _load_workspace(snapshot_file)

    if workspace.get_node(node_id) is None:
        click.echo(f"Unknown node: {node_id}", err=True)
        sys.exit(2)

    result = workspace.check_value(node_id, value)

    if result.violations:
        click.echo(f"INVALID: {value}")
        for violation in result.violations:
            click.echo(f"  ✘ {workspace.constraints.describe_violation(violation)}")
        sys.exit(1)

    if result.note:
        click.echo(f"UNCHECKED: {result.note}")
    else:
        click.echo(f"VALID: {value}")
    sys.exit(0)


@main.command()
@click.argument("snapshot_file", type=click.Path(exists=True))
def stats(snapshot_file: str):
    """Print equation and connection statistics as JSON.

    Exit codes:
      0 - Success
      2 - File or schema error
    """
    workspace = _load_workspace(snapshot_file)
    click.echo(json.dumps(workspace.stats(), indent=2, ensure_ascii=False))
    sys.exit(0)


if __name__ == "__main__":
    main()
