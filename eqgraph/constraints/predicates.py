"""Numeric predicates used by the constraint engine.

Every predicate accepts a float (possibly NaN or infinite) and returns False
for values outside its natural domain instead of raising.
"""

import math
from typing import Any

from .models import ConstraintType, Domain, Parity, Sign


def is_integer(value: float) -> bool:
    """Check whether a float holds an exact integer value."""
    return math.isfinite(value) and float(value).is_integer()


def is_prime(value: float) -> bool:
    """Primality by 6k±1 trial division."""
    if not is_integer(value) or value <= 1:
        return False
    n = int(value)
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def is_perfect_square(value: float) -> bool:
    """Check for a non-negative integer whose square root is an integer."""
    if not is_integer(value) or value < 0:
        return False
    n = int(value)
    root = math.isqrt(n)
    return root * root == n


def is_fibonacci(value: float) -> bool:
    """A non-negative integer n is Fibonacci iff 5n²+4 or 5n²-4 is a square."""
    if not is_integer(value) or value < 0:
        return False
    n = int(value)
    return is_perfect_square(5 * n * n + 4) or is_perfect_square(5 * n * n - 4)


def in_domain(value: float, domain: Domain) -> bool:
    """Check membership in a number set.

    Rationals cannot be told apart from reals in floating point, so both
    only require a finite value.
    """
    if domain == Domain.INTEGER:
        return is_integer(value)
    if domain == Domain.NATURAL:
        return is_integer(value) and value > 0
    if domain == Domain.POSITIVE_REAL:
        return value > 0
    if domain == Domain.NEGATIVE_REAL:
        return value < 0
    return math.isfinite(value)


def in_range(
    value: float,
    minimum: float,
    maximum: float,
    min_inclusive: bool = True,
    max_inclusive: bool = True,
) -> bool:
    lower = value >= minimum if min_inclusive else value > minimum
    upper = value <= maximum if max_inclusive else value < maximum
    return lower and upper


def satisfies(value: float, constraint_type: ConstraintType | None, data: Any) -> bool:
    """Evaluate one predicate.

    Args:
        value: The numeric value (NaN when the input was not a number).
        constraint_type: The predicate family; None for unknown types.
        data: The typed data model for the predicate.

    Returns:
        True if the value satisfies the predicate. Unknown types pass.
    """
    if constraint_type is None:
        return True

    if constraint_type == ConstraintType.NOT_EQUAL:
        return value != data.value
    if constraint_type == ConstraintType.EQUAL_TO:
        return value == data.value
    if constraint_type == ConstraintType.GREATER_THAN:
        return value > data.value
    if constraint_type == ConstraintType.LESS_THAN:
        return value < data.value
    if constraint_type == ConstraintType.RANGE:
        return in_range(value, data.min, data.max, data.min_inclusive, data.max_inclusive)
    if constraint_type == ConstraintType.DOMAIN:
        return in_domain(value, data.domain)
    if constraint_type == ConstraintType.SIGN:
        if data.sign == Sign.POSITIVE:
            return value > 0
        if data.sign == Sign.NEGATIVE:
            return value < 0
        return value != 0 and not math.isnan(value)
    if constraint_type == ConstraintType.PRIME:
        return is_prime(value)
    if constraint_type == ConstraintType.PERFECT_SQUARE:
        return is_perfect_square(value)
    if constraint_type == ConstraintType.FIBONACCI:
        return is_fibonacci(value)
    if constraint_type == ConstraintType.EVEN_ODD:
        if not is_integer(value):
            return False
        even = int(value) % 2 == 0
        return even if data.parity == Parity.EVEN else not even
    if constraint_type == ConstraintType.DIVISIBLE:
        return math.isfinite(value) and value % data.divisor == 0
    return True
