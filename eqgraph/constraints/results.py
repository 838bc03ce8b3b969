"""Outcomes of constraint evaluation, conflict detection and mutation."""

from dataclasses import dataclass, field
from typing import Any

from ..graph.models import CheckStatus

UNEVALUABLE_NOTE = "Cannot evaluate operator result - constraints not checked"


@dataclass(frozen=True)
class ConstraintViolation:
    """A single active constraint the checked value does not satisfy."""

    constraint_id: str
    constraint_type: str
    constraint_data: dict[str, Any]
    violated_value: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "constraint_id": self.constraint_id,
            "constraint_type": self.constraint_type,
            "constraint_data": dict(self.constraint_data),
            "violated_value": self.violated_value,
        }


@dataclass
class ConstraintCheck:
    """Result of checking one value against a node's constraints.

    ``unchecked`` means the value could not be computed or is not a
    number, so nothing was evaluated; it still counts as valid.
    """

    status: CheckStatus = CheckStatus.VALID
    violations: list[ConstraintViolation] = field(default_factory=list)
    note: str | None = None
    value: float | None = None

    @property
    def is_valid(self) -> bool:
        return self.status != CheckStatus.INVALID

    @classmethod
    def unchecked(cls, note: str = UNEVALUABLE_NOTE) -> "ConstraintCheck":
        return cls(status=CheckStatus.UNCHECKED, note=note)


@dataclass(frozen=True)
class ConstraintConflict:
    """Two active constraints on one node that cannot both hold."""

    constraint1: str
    constraint2: str
    conflict_type: str

    def to_dict(self) -> dict[str, str]:
        return {
            "constraint1": self.constraint1,
            "constraint2": self.constraint2,
            "conflict_type": self.conflict_type,
        }


@dataclass
class AddConstraintResult:
    """Outcome of adding a constraint.

    A conflicting constraint is still stored; ``success`` is False only to
    flag the contradiction to the caller.
    """

    success: bool
    constraint_id: str | None = None
    conflicts: list[ConstraintConflict] = field(default_factory=list)
    error: str | None = None
