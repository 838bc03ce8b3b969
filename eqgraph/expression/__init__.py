"""Expression rendering and restricted arithmetic evaluation."""

from .evaluator import ExpressionSyntaxError, apply_operator, evaluate_expression
from .generator import EquationStats, ExpressionGenerator

__all__ = [
    "ExpressionSyntaxError",
    "apply_operator",
    "evaluate_expression",
    "EquationStats",
    "ExpressionGenerator",
]
