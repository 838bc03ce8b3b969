"""Node kinds, operator tables and arity rules for equation graphs."""

import math
import re
from dataclasses import dataclass
from enum import Enum


class NodeKind(str, Enum):
    """Kinds of nodes in an equation graph."""

    CONSTANT = "constant"
    VARIABLE = "variable"
    OPERATOR = "operator"
    FUNCTION = "function"
    OUTPUT = "output"


class Operator(str, Enum):
    """Arithmetic operators."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"


class Function(str, Enum):
    """Unary mathematical functions."""

    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    SQRT = "sqrt"
    LOG = "log"
    LN = "ln"


@dataclass(frozen=True)
class OperatorInfo:
    """Mathematical properties of an operator."""

    name: str
    symbol: str  # display glyph used when rendering
    commutative: bool
    associative: bool
    min_inputs: int
    max_inputs: int
    identity: float | None = None

    @property
    def configurable(self) -> bool:
        """Whether the input count can change after creation."""
        return self.min_inputs != self.max_inputs


MAX_DYNAMIC_INPUTS = 8

OPERATORS: dict[Operator, OperatorInfo] = {
    Operator.ADD: OperatorInfo(
        name="Addition",
        symbol="+",
        commutative=True,
        associative=True,
        min_inputs=2,
        max_inputs=MAX_DYNAMIC_INPUTS,
        identity=0.0,
    ),
    Operator.SUBTRACT: OperatorInfo(
        name="Subtraction",
        symbol="-",
        commutative=False,
        associative=False,
        min_inputs=2,
        max_inputs=2,
    ),
    Operator.MULTIPLY: OperatorInfo(
        name="Multiplication",
        symbol="×",
        commutative=True,
        associative=True,
        min_inputs=2,
        max_inputs=MAX_DYNAMIC_INPUTS,
        identity=1.0,
    ),
    Operator.DIVIDE: OperatorInfo(
        name="Division",
        symbol="÷",
        commutative=False,
        associative=False,
        min_inputs=2,
        max_inputs=2,
    ),
    # Right-associative by convention, so it stays binary
    Operator.POWER: OperatorInfo(
        name="Exponentiation",
        symbol="^",
        commutative=False,
        associative=False,
        min_inputs=2,
        max_inputs=2,
    ),
}

FUNCTION_GLYPHS: dict[Function, str] = {
    Function.SIN: "sin",
    Function.COS: "cos",
    Function.TAN: "tan",
    Function.SQRT: "√",
    Function.LOG: "log",
    Function.LN: "ln",
}

OPERATOR_TOKENS: dict[str, Operator] = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "−": Operator.SUBTRACT,  # U+2212, used by the palette
    "×": Operator.MULTIPLY,
    "*": Operator.MULTIPLY,
    "÷": Operator.DIVIDE,
    "/": Operator.DIVIDE,
    "^": Operator.POWER,
}

FUNCTION_TOKENS: dict[str, Function] = {
    "sin": Function.SIN,
    "cos": Function.COS,
    "tan": Function.TAN,
    "sqrt": Function.SQRT,
    "√": Function.SQRT,
    "log": Function.LOG,
    "ln": Function.LN,
}

OUTPUT_TOKEN = "="

MATH_CONSTANTS: dict[str, float] = {
    "π": math.pi,
    "pi": math.pi,
    "e": math.e,
}

_NUMBER_PATTERN = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
_NUMERIC_LITERAL = re.compile(rf"^\s*{_NUMBER_PATTERN}\s*$")
_LEADING_NUMBER = re.compile(rf"^\s*({_NUMBER_PATTERN})")


@dataclass
class Arity:
    """Input-port bounds of a node."""

    min: int
    max: int
    current: int

    @property
    def configurable(self) -> bool:
        """Whether the current count may move between the bounds."""
        return self.min != self.max

    def allows(self, count: int) -> bool:
        """Check whether a port count lies within the bounds."""
        return self.min <= count <= self.max


NodeOp = Operator | Function | None


def is_numeric_literal(content: str) -> bool:
    """Check whether content is a plain decimal number."""
    return bool(_NUMERIC_LITERAL.match(content))


def parse_number(raw: object) -> float:
    """Parse a raw value into a float.

    Numbers pass through unchanged, the named constants π and e resolve to
    their values, and strings are read up to the longest leading numeric
    prefix. Anything else yields NaN.
    """
    if isinstance(raw, bool):
        return float("nan")
    if isinstance(raw, (int, float)):
        return float(raw)

    text = str(raw).strip()
    if text in MATH_CONSTANTS:
        return MATH_CONSTANTS[text]

    match = _LEADING_NUMBER.match(text)
    if not match:
        return float("nan")
    return float(match.group(1))


def infer_kind(content: str) -> tuple[NodeKind, NodeOp]:
    """Determine the node kind (and operator/function) from its content.

    Numeric literals and named constants are constants, operator and
    function tokens map to their tables, ``=`` is the output sink and
    everything else falls back to a variable.
    """
    token = content.strip()

    if token in MATH_CONSTANTS or is_numeric_literal(token):
        return NodeKind.CONSTANT, None
    if token in OPERATOR_TOKENS:
        return NodeKind.OPERATOR, OPERATOR_TOKENS[token]
    if token in FUNCTION_TOKENS:
        return NodeKind.FUNCTION, FUNCTION_TOKENS[token]
    if token == OUTPUT_TOKEN:
        return NodeKind.OUTPUT, None
    return NodeKind.VARIABLE, None


def default_arity(kind: NodeKind, op: NodeOp = None) -> Arity:
    """Get the default input bounds for a node kind."""
    if kind == NodeKind.OPERATOR:
        info = OPERATORS[Operator(op)]
        return Arity(info.min_inputs, info.max_inputs, info.min_inputs)
    if kind in (NodeKind.FUNCTION, NodeKind.OUTPUT):
        return Arity(1, 1, 1)
    return Arity(0, 0, 0)


def default_content(kind: NodeKind, op: NodeOp = None) -> str:
    """Get the content a freshly reset node carries."""
    if kind == NodeKind.CONSTANT:
        return "1"
    if kind == NodeKind.VARIABLE:
        return "x"
    if kind == NodeKind.OUTPUT:
        return OUTPUT_TOKEN
    if kind == NodeKind.OPERATOR:
        return OPERATORS[Operator(op)].symbol
    if kind == NodeKind.FUNCTION:
        return FUNCTION_GLYPHS[Function(op)]
    raise ValueError(f"Unknown node kind: {kind}")


def coerce_op(kind: NodeKind, op: str | None) -> NodeOp:
    """Convert a stored operator/function name back into its enum."""
    if op is None:
        return None
    if kind == NodeKind.OPERATOR:
        return Operator(op)
    if kind == NodeKind.FUNCTION:
        return Function(op)
    return None
