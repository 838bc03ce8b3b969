"""Shorthand constructors for ``(type, data)`` constraint pairs.

Example:
    engine.add(node_id, *helpers.range_(0, 10, max_inclusive=False))
"""

from typing import Any

from .models import ConstraintType, Domain, Parity, Sign

ConstraintSpec = tuple[ConstraintType, dict[str, Any]]


def not_equal(value: float) -> ConstraintSpec:
    return ConstraintType.NOT_EQUAL, {"value": value}


def range_(
    minimum: float,
    maximum: float,
    min_inclusive: bool = True,
    max_inclusive: bool = True,
) -> ConstraintSpec:
    return ConstraintType.RANGE, {
        "min": minimum,
        "max": maximum,
        "min_inclusive": min_inclusive,
        "max_inclusive": max_inclusive,
    }


def domain(number_set: Domain | str) -> ConstraintSpec:
    value = number_set.value if isinstance(number_set, Domain) else number_set
    return ConstraintType.DOMAIN, {"domain": value}


def positive() -> ConstraintSpec:
    return ConstraintType.SIGN, {"sign": Sign.POSITIVE.value}


def negative() -> ConstraintSpec:
    return ConstraintType.SIGN, {"sign": Sign.NEGATIVE.value}


def non_zero() -> ConstraintSpec:
    return ConstraintType.SIGN, {"sign": Sign.NON_ZERO.value}


def prime() -> ConstraintSpec:
    return ConstraintType.PRIME, {}


def perfect_square() -> ConstraintSpec:
    return ConstraintType.PERFECT_SQUARE, {}


def even() -> ConstraintSpec:
    return ConstraintType.EVEN_ODD, {"parity": Parity.EVEN.value}


def odd() -> ConstraintSpec:
    return ConstraintType.EVEN_ODD, {"parity": Parity.ODD.value}


def fibonacci() -> ConstraintSpec:
    return ConstraintType.FIBONACCI, {}


def divisible_by(divisor: float) -> ConstraintSpec:
    return ConstraintType.DIVISIBLE, {"divisor": divisor}


def greater_than(value: float) -> ConstraintSpec:
    return ConstraintType.GREATER_THAN, {"value": value}


def less_than(value: float) -> ConstraintSpec:
    return ConstraintType.LESS_THAN, {"value": value}


def equal_to(value: float) -> ConstraintSpec:
    return ConstraintType.EQUAL_TO, {"value": value}
