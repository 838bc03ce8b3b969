"""Output formatting for the command line."""

from .formatter import format_equations, format_validation_result

__all__ = ["format_equations", "format_validation_result"]
