"""Pydantic models for node constraints."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    StrictFloat,
    StrictInt,
    field_validator,
    model_validator,
)


class ConstraintType(str, Enum):
    """Predicate families a constraint can belong to."""

    # Value constraints
    NOT_EQUAL = "not_equal"
    RANGE = "range"
    DOMAIN = "domain"
    SIGN = "sign"

    # Mathematical properties
    PRIME = "prime"
    PERFECT_SQUARE = "perfect_square"
    EVEN_ODD = "even_odd"
    FIBONACCI = "fibonacci"
    DIVISIBLE = "divisible"

    # Relational
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    EQUAL_TO = "equal_to"


class Domain(str, Enum):
    """Number sets a value can be restricted to."""

    REAL = "ℝ"
    INTEGER = "ℤ"
    NATURAL = "ℕ"
    RATIONAL = "ℚ"
    POSITIVE_REAL = "ℝ⁺"
    NEGATIVE_REAL = "ℝ⁻"


DOMAIN_ALIASES: dict[str, Domain] = {
    "real": Domain.REAL,
    "integer": Domain.INTEGER,
    "natural": Domain.NATURAL,
    "rational": Domain.RATIONAL,
    "positive_real": Domain.POSITIVE_REAL,
    "negative_real": Domain.NEGATIVE_REAL,
}


class Sign(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NON_ZERO = "non_zero"


class Parity(str, Enum):
    EVEN = "even"
    ODD = "odd"


Number = Union[StrictInt, StrictFloat]


class EmptyData(BaseModel):
    """Data for predicates that take no parameters (prime, Fibonacci, ...)."""


class ValueData(BaseModel):
    """Data for comparisons against a single number."""

    value: Number


class RangeData(BaseModel):
    """Data for an interval with per-side inclusivity."""

    min: Number
    max: Number
    min_inclusive: bool = Field(
        default=True, validation_alias=AliasChoices("min_inclusive", "minInclusive")
    )
    max_inclusive: bool = Field(
        default=True, validation_alias=AliasChoices("max_inclusive", "maxInclusive")
    )

    @model_validator(mode="after")
    def check_bounds(self) -> "RangeData":
        """Require min <= max."""
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class DomainData(BaseModel):
    """Data naming a number set."""

    domain: Domain

    @model_validator(mode="before")
    @classmethod
    def normalize_domain(cls, data: Any) -> Any:
        """Accept ASCII aliases such as 'integer' for ℤ."""
        if isinstance(data, dict):
            domain = data.get("domain")
            if isinstance(domain, str) and domain.lower() in DOMAIN_ALIASES:
                data = {**data, "domain": DOMAIN_ALIASES[domain.lower()].value}
        return data


class SignData(BaseModel):
    sign: Sign


class ParityData(BaseModel):
    parity: Parity


class DivisibleData(BaseModel):
    """Data for a divisibility check; the divisor must be non-zero."""

    divisor: Number

    @model_validator(mode="after")
    def check_divisor(self) -> "DivisibleData":
        if self.divisor == 0:
            raise ValueError("divisor must be non-zero")
        return self


DATA_MODELS: dict[ConstraintType, type[BaseModel]] = {
    ConstraintType.NOT_EQUAL: ValueData,
    ConstraintType.RANGE: RangeData,
    ConstraintType.DOMAIN: DomainData,
    ConstraintType.SIGN: SignData,
    ConstraintType.PRIME: EmptyData,
    ConstraintType.PERFECT_SQUARE: EmptyData,
    ConstraintType.EVEN_ODD: ParityData,
    ConstraintType.FIBONACCI: EmptyData,
    ConstraintType.DIVISIBLE: DivisibleData,
    ConstraintType.GREATER_THAN: ValueData,
    ConstraintType.LESS_THAN: ValueData,
    ConstraintType.EQUAL_TO: ValueData,
}


def known_type(type_name: str) -> ConstraintType | None:
    """Look up a constraint type by its wire name."""
    try:
        return ConstraintType(type_name)
    except ValueError:
        return None


def _new_constraint_id() -> str:
    return f"constraint-{uuid.uuid4().hex[:12]}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _timestamp_text(value: Any) -> Any:
    # YAML loads unquoted ISO timestamps as datetime objects
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class Constraint(BaseModel):
    """A predicate attached to a node.

    ``type`` is kept as a plain string so constraints of a type this
    version does not know survive an import/export round trip.
    """

    id: str = Field(default_factory=_new_constraint_id)
    type: str
    data: dict[str, Any] = Field(default_factory=dict)
    active: bool = True
    created_at: str = Field(
        default_factory=_now, validation_alias=AliasChoices("created_at", "createdAt")
    )

    @field_validator("created_at", mode="before")
    @classmethod
    def normalize_created_at(cls, value: Any) -> Any:
        return _timestamp_text(value)

    @property
    def constraint_type(self) -> ConstraintType | None:
        """The known type, or None for a type this version does not handle."""
        return known_type(self.type)

    def parsed_data(self) -> BaseModel | None:
        """Validate ``data`` against the model for this type.

        Returns:
            The typed data, or None for unknown types.

        Raises:
            pydantic.ValidationError: If the data does not fit the type.
        """
        constraint_type = self.constraint_type
        if constraint_type is None:
            return None
        return DATA_MODELS[constraint_type].model_validate(self.data)


class ConstraintSnapshot(BaseModel):
    """Envelope for bulk constraint export/import."""

    version: Literal["1.0"] = "1.0"
    timestamp: str = Field(default_factory=_now)
    constraints: dict[str, list[Constraint]] = Field(default_factory=dict)

    @field_validator("timestamp", mode="before")
    @classmethod
    def normalize_timestamp(cls, value: Any) -> Any:
        return _timestamp_text(value)

    @field_validator("version", mode="before")
    @classmethod
    def normalize_version(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(float(value))
        return value
