"""Constraint storage, evaluation and conflict detection."""

import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ..graph.models import CheckStatus
from ..graph.node_types import parse_number
from ..schema.errors import SnapshotError, format_validation_errors
from .models import (
    DATA_MODELS,
    Constraint,
    ConstraintSnapshot,
    ConstraintType,
    Parity,
    RangeData,
    Sign,
    known_type,
)
from .predicates import satisfies
from .results import (
    UNEVALUABLE_NOTE,
    AddConstraintResult,
    ConstraintCheck,
    ConstraintConflict,
    ConstraintViolation,
)

if TYPE_CHECKING:
    from ..expression.generator import ExpressionGenerator

logger = logging.getLogger(__name__)


class ConstraintEngine:
    """Holds the constraints attached to each node and evaluates them.

    Constraints are keyed by node id; the engine does not know which nodes
    exist, so callers drop a node's constraints when the node is deleted.
    """

    def __init__(self):
        self._constraints: dict[str, list[Constraint]] = {}

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(
        self,
        node_id: str,
        constraint_type: ConstraintType | str,
        data: Mapping[str, Any] | None = None,
    ) -> AddConstraintResult:
        """Attach a constraint to a node.

        The data is shape-checked for its type first; unknown types and
        malformed data are rejected without storing. A constraint that
        contradicts an existing one is stored anyway and the conflicts are
        returned with ``success=False``.

        Args:
            node_id: The node to constrain.
            constraint_type: One of the ConstraintType names.
            data: Type-specific parameters, e.g. ``{"min": 0, "max": 10}``.

        Returns:
            AddConstraintResult describing the outcome.
        """
        type_name = (
            constraint_type.value
            if isinstance(constraint_type, ConstraintType)
            else str(constraint_type)
        )
        known = known_type(type_name)
        if known is None:
            logger.info("Rejected constraint on %s: unknown type %r", node_id, type_name)
            return AddConstraintResult(
                success=False, error=f"Unknown constraint type: {type_name}"
            )

        try:
            parsed = DATA_MODELS[known].model_validate(dict(data or {}))
        except ValidationError as e:
            detail = "; ".join(err["msg"] for err in format_validation_errors(e))
            logger.info("Rejected %s constraint on %s: %s", type_name, node_id, detail)
            return AddConstraintResult(
                success=False, error=f"Invalid constraint definition: {detail}"
            )

        constraint = Constraint(type=type_name, data=parsed.model_dump(mode="json"))
        self._constraints.setdefault(node_id, []).append(constraint)
        logger.debug("Added %s constraint %s to %s", type_name, constraint.id, node_id)

        conflicts = self.detect_conflicts(node_id)
        if conflicts:
            return AddConstraintResult(
                success=False, constraint_id=constraint.id, conflicts=conflicts
            )
        return AddConstraintResult(success=True, constraint_id=constraint.id)

    def remove(self, node_id: str, constraint_id: str) -> bool:
        """Remove one constraint from a node.

        Returns:
            True if the constraint existed.
        """
        constraints = self._constraints.get(node_id, [])
        for index, constraint in enumerate(constraints):
            if constraint.id == constraint_id:
                del constraints[index]
                if not constraints:
                    del self._constraints[node_id]
                return True
        return False

    def set_active(self, node_id: str, constraint_id: str, active: bool) -> bool:
        """Enable or disable a constraint without removing it."""
        for constraint in self._constraints.get(node_id, []):
            if constraint.id == constraint_id:
                constraint.active = active
                return True
        return False

    def clear(self, node_id: str) -> int:
        """Remove every constraint from a node.

        Returns:
            The number of constraints removed.
        """
        return len(self._constraints.pop(node_id, []))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, node_id: str) -> list[Constraint]:
        """Get a copy of a node's constraints."""
        return list(self._constraints.get(node_id, []))

    def has_constraints(self, node_id: str) -> bool:
        return bool(self._constraints.get(node_id))

    def node_ids(self) -> list[str]:
        """Get the ids of every node that carries constraints."""
        return [node_id for node_id, items in self._constraints.items() if items]

    def summary(self, node_id: str) -> list[dict[str, Any]]:
        """Describe a node's constraints for display."""
        return [
            {
                "id": constraint.id,
                "type": constraint.type,
                "description": self.describe(constraint),
                "active": constraint.active,
            }
            for constraint in self._constraints.get(node_id, [])
        ]

    @staticmethod
    def describe(constraint: Constraint) -> str:
        """Render a constraint as short mathematical text, e.g. ``∈ [0, 10]``."""
        data = constraint.data
        constraint_type = constraint.constraint_type

        if constraint_type == ConstraintType.NOT_EQUAL:
            return f"≠ {data.get('value')}"
        if constraint_type == ConstraintType.RANGE:
            low = "[" if data.get("min_inclusive", True) else "("
            high = "]" if data.get("max_inclusive", True) else ")"
            return f"∈ {low}{data.get('min')}, {data.get('max')}{high}"
        if constraint_type == ConstraintType.DOMAIN:
            return f"∈ {data.get('domain')}"
        if constraint_type == ConstraintType.SIGN:
            sign = data.get("sign")
            if sign == Sign.POSITIVE.value:
                return "> 0"
            if sign == Sign.NEGATIVE.value:
                return "< 0"
            return "≠ 0"
        if constraint_type == ConstraintType.PRIME:
            return "must be prime"
        if constraint_type == ConstraintType.PERFECT_SQUARE:
            return "must be perfect square"
        if constraint_type == ConstraintType.EVEN_ODD:
            return "must be even" if data.get("parity") == Parity.EVEN.value else "must be odd"
        if constraint_type == ConstraintType.FIBONACCI:
            return "must be Fibonacci number"
        if constraint_type == ConstraintType.DIVISIBLE:
            return f"divisible by {data.get('divisor')}"
        if constraint_type == ConstraintType.GREATER_THAN:
            return f"> {data.get('value')}"
        if constraint_type == ConstraintType.LESS_THAN:
            return f"< {data.get('value')}"
        if constraint_type == ConstraintType.EQUAL_TO:
            return f"= {data.get('value')}"
        return "Unknown constraint"

    def describe_violation(self, violation: ConstraintViolation) -> str:
        """Render the constraint behind a violation as short text."""
        constraint = Constraint(
            id=violation.constraint_id,
            type=violation.constraint_type,
            data=dict(violation.constraint_data),
        )
        return self.describe(constraint)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def validate_value(self, node_id: str, raw_value: Any) -> ConstraintCheck:
        """Check a value against every active constraint of a node.

        The value is parsed like a leading-number float parse (``"3abc"`` is
        3, ``π`` and ``e`` are recognized). A value that is not a number at
        all is reported as unchecked rather than as a violation.

        Args:
            node_id: The constrained node.
            raw_value: A number or the node's textual content.

        Returns:
            ConstraintCheck with every violation found.
        """
        active = [c for c in self._constraints.get(node_id, []) if c.active]
        value = parse_number(raw_value)

        if not active:
            return ConstraintCheck(value=None if math.isnan(value) else value)
        if math.isnan(value):
            return ConstraintCheck.unchecked(
                f"Value {raw_value!r} is not numeric - constraints not checked"
            )

        violations = [
            ConstraintViolation(
                constraint_id=constraint.id,
                constraint_type=constraint.type,
                constraint_data=dict(constraint.data),
                violated_value=value,
            )
            for constraint in active
            if not satisfies(value, constraint.constraint_type, constraint.parsed_data())
        ]

        status = CheckStatus.INVALID if violations else CheckStatus.VALID
        return ConstraintCheck(status=status, violations=violations, value=value)

    def validate_operator_result(
        self, node_id: str, generator: "ExpressionGenerator"
    ) -> ConstraintCheck:
        """Check the computed result of a node against its constraints.

        Operator and function nodes are evaluated through their inputs;
        output nodes evaluate their rendered equation. When no number can
        be computed the result is unchecked, which still counts as valid.
        """
        if not self.has_constraints(node_id):
            return ConstraintCheck()

        node = generator.registry.get(node_id)
        if node is not None and node.has_value:
            return self.validate_value(node_id, node.content)

        result = generator.evaluate(node_id)
        if result is None:
            return ConstraintCheck.unchecked(UNEVALUABLE_NOTE)
        return self.validate_value(node_id, result)

    # -------------------------------------------------------------------------
    # Conflicts
    # -------------------------------------------------------------------------

    def detect_conflicts(self, node_id: str) -> list[ConstraintConflict]:
        """Find pairs of active constraints that cannot both hold."""
        active = [c for c in self._constraints.get(node_id, []) if c.active]
        conflicts = []
        for i, first in enumerate(active):
            for second in active[i + 1 :]:
                conflict_type = self._pair_conflict(first, second)
                if conflict_type:
                    conflicts.append(
                        ConstraintConflict(
                            constraint1=first.id,
                            constraint2=second.id,
                            conflict_type=conflict_type,
                        )
                    )
        return conflicts

    @staticmethod
    def _pair_conflict(first: Constraint, second: Constraint) -> str | None:
        types = {first.constraint_type, second.constraint_type}

        if types == {ConstraintType.EQUAL_TO, ConstraintType.NOT_EQUAL}:
            if first.data.get("value") == second.data.get("value"):
                return "equal_not_equal_conflict"

        if first.constraint_type == second.constraint_type == ConstraintType.RANGE:
            a = RangeData.model_validate(first.data)
            b = RangeData.model_validate(second.data)
            if _disjoint(a, b) or _disjoint(b, a):
                return "non_overlapping_ranges"

        return None

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def export_constraints(self) -> dict[str, Any]:
        """Serialize every constraint into a versioned envelope."""
        snapshot = ConstraintSnapshot(
            constraints={
                node_id: [c.model_copy(deep=True) for c in items]
                for node_id, items in self._constraints.items()
                if items
            }
        )
        return snapshot.model_dump(mode="json")

    def import_constraints(self, snapshot: Mapping[str, Any]) -> int:
        """Replace every constraint with the contents of an envelope.

        Constraints of unknown types are kept as-is; constraints of known
        types must have well-formed data.

        Args:
            snapshot: Data previously produced by :meth:`export_constraints`.

        Returns:
            The number of constraints imported.

        Raises:
            SnapshotError: If the envelope or any known constraint is
                malformed. The current state is left untouched.
        """
        if not isinstance(snapshot, Mapping) or "constraints" not in snapshot:
            raise SnapshotError("Constraint snapshot must be a mapping with 'constraints'")

        try:
            parsed = ConstraintSnapshot.model_validate(dict(snapshot))
        except ValidationError as e:
            details = format_validation_errors(e)
            raise SnapshotError(
                f"Constraint snapshot failed validation with {len(details)} error(s)", details
            ) from e

        errors: list[dict] = []
        for node_id, items in parsed.constraints.items():
            for index, constraint in enumerate(items):
                try:
                    typed = constraint.parsed_data()
                except ValidationError as e:
                    for err in format_validation_errors(e):
                        loc = f"constraints.{node_id}.{index}.data"
                        err["loc"] = f"{loc}.{err['loc']}" if err["loc"] else loc
                        errors.append(err)
                    continue
                if typed is not None:
                    constraint.data = typed.model_dump(mode="json")
        if errors:
            raise SnapshotError(
                f"Constraint snapshot failed validation with {len(errors)} error(s)", errors
            )

        self._constraints = {
            node_id: list(items) for node_id, items in parsed.constraints.items() if items
        }
        count = sum(len(items) for items in self._constraints.values())
        logger.debug("Imported %d constraint(s)", count)
        return count

    def reset(self) -> None:
        """Remove every constraint from every node."""
        self._constraints.clear()


def _disjoint(a: RangeData, b: RangeData) -> bool:
    """Check whether range ``a`` lies entirely below range ``b``."""
    if a.max < b.min:
        return True
    return a.max == b.min and not (a.max_inclusive and b.min_inclusive)
