"""Output formatting for validation results and rendered equations."""

import json
from typing import Any, Literal

from ..validators.base import Severity, ValidationIssue, ValidationResult


def format_validation_result(
    result: ValidationResult,
    format: Literal["text", "json"] = "text",
    strict: bool = False,
) -> str:
    """Format a validation result for output.

    Args:
        result: The validation result to format.
        format: Output format ("text" or "json").
        strict: Whether warnings count as failures in the summary.

    Returns:
        Formatted string representation.
    """
    if format == "json":
        return _format_json(result, strict)
    return _format_text(result, strict)


def _format_text(result: ValidationResult, strict: bool) -> str:
    """Format result as human-readable text."""
    lines: list[str] = []

    errors = result.errors
    warnings = result.warnings
    infos = result.infos

    # Errors section
    lines.append("ERRORS:")
    if errors:
        for issue in errors:
            lines.append(f"  {_format_issue_text(issue)}")
    else:
        lines.append("  (none)")

    lines.append("")

    # Warnings section
    lines.append("WARNINGS:")
    if warnings:
        for issue in warnings:
            lines.append(f"  {_format_issue_text(issue)}")
    else:
        lines.append("  (none)")

    if infos:
        lines.append("")
        lines.append("INFO:")
        for issue in infos:
            lines.append(f"  {_format_issue_text(issue)}")

    # Summary
    lines.append("")
    if result.is_valid and not (strict and warnings):
        if warnings:
            lines.append(f"Validation passed with {len(warnings)} warning(s)")
        else:
            lines.append("Validation passed")
    else:
        lines.append(
            f"Validation failed: {len(errors)} error(s), {len(warnings)} warning(s)"
        )

    return "\n".join(lines)


def _format_issue_text(issue: ValidationIssue) -> str:
    """Format a single issue as text."""
    location = f"[{issue.location}] " if issue.location else ""

    # Severity symbol
    if issue.severity == Severity.ERROR:
        symbol = "✘"
    elif issue.severity == Severity.WARNING:
        symbol = "⚠"
    else:
        symbol = "ℹ"

    return f"{symbol} {issue.code}: {location}{issue.message}"


def _format_json(result: ValidationResult, strict: bool) -> str:
    """Format result as JSON."""
    data = {
        "valid": result.is_valid and not (strict and result.has_warnings),
        "error_count": len(result.errors),
        "warning_count": len(result.warnings),
        "issues": [issue.to_dict() for issue in result.issues],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_equations(
    equations: dict[str, str],
    results: dict[str, float | None] | None = None,
    format: Literal["text", "json"] = "text",
) -> str:
    """Format rendered output equations.

    Args:
        equations: Rendered equation per output node id.
        results: Numeric value per output node id, where computable.
        format: Output format ("text" or "json").

    Returns:
        Formatted string representation.
    """
    results = results or {}

    if format == "json":
        data: dict[str, Any] = {
            "equations": [
                {"node": node_id, "equation": text, "value": results.get(node_id)}
                for node_id, text in equations.items()
            ]
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    if not equations:
        return "No output nodes"

    lines = []
    for node_id, text in equations.items():
        value = results.get(node_id)
        suffix = f" = {value:g}" if value is not None else ""
        lines.append(f"{node_id}: {text}{suffix}")
    return "\n".join(lines)
