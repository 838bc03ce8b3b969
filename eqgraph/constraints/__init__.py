"""Constraint models, predicates and the constraint engine."""

from . import helpers
from .models import Constraint, ConstraintSnapshot, ConstraintType, Domain, Parity, Sign
from .results import (
    AddConstraintResult,
    ConstraintCheck,
    ConstraintConflict,
    ConstraintViolation,
)
from .engine import ConstraintEngine

__all__ = [
    "helpers",
    "Constraint",
    "ConstraintSnapshot",
    "ConstraintType",
    "Domain",
    "Parity",
    "Sign",
    "AddConstraintResult",
    "ConstraintCheck",
    "ConstraintConflict",
    "ConstraintViolation",
    "ConstraintEngine",
]
