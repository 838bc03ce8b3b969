"""Restricted arithmetic evaluation for rendered equations.

Rendered output strings such as ``((2 + 3) × 4)`` are evaluated here without
ever handing text to ``eval``. The accepted alphabet is digits, ``.``,
``+ - * / ( ) ^``, the display glyphs ``× ÷ −`` and the constants ``π``
(or ``pi``) and ``e``. Anything else (a variable name, a function call, a
``?`` placeholder) makes the expression unevaluable.

Pipeline:
    1) tokenize the string into numbers, operators and parentheses
    2) parse with recursive descent into Number/BinOp/Negate nodes
    3) evaluate the tree to a float
"""

import math
from collections.abc import Sequence

from ..graph.node_types import MATH_CONSTANTS, Function, NodeOp, Operator


class ExpressionSyntaxError(ValueError):
    """Raised when a string is outside the restricted arithmetic grammar."""

    def __init__(self, message: str, position: int | None = None):
        super().__init__(message)
        self.message = message
        self.position = position


_OPERATOR_GLYPHS = {
    "+": "+",
    "-": "-",
    "−": "-",
    "*": "*",
    "×": "*",
    "/": "/",
    "÷": "/",
    "^": "^",
}


# -----------------------------
# Tokenizer
# -----------------------------


def tokenize(text: str) -> list[str | float]:
    """Split an expression into numbers and single-character symbols.

    Raises:
        ExpressionSyntaxError: On any character outside the alphabet.
    """
    tokens: list[str | float] = []
    i = 0
    while i < len(text):
        char = text[i]

        if char.isspace():
            i += 1
            continue

        if char.isdigit() or char == ".":
            start = i
            while i < len(text) and (text[i].isdigit() or text[i] == "."):
                i += 1
            literal = text[start:i]
            try:
                tokens.append(float(literal))
            except ValueError:
                raise ExpressionSyntaxError(f"Malformed number '{literal}'", start)
            continue

        if char.isalpha():
            start = i
            while i < len(text) and text[i].isalpha():
                i += 1
            word = text[start:i]
            if word not in MATH_CONSTANTS:
                raise ExpressionSyntaxError(f"Unknown name '{word}'", start)
            tokens.append(MATH_CONSTANTS[word])
            continue

        if char in _OPERATOR_GLYPHS:
            tokens.append(_OPERATOR_GLYPHS[char])
        elif char in "()":
            tokens.append(char)
        else:
            raise ExpressionSyntaxError(f"Unexpected character '{char}'", i)
        i += 1

    return tokens


# -----------------------------
# AST node types
# -----------------------------


class Number:
    """Numeric literal."""

    def __init__(self, value: float):
        self.value = value

    def evaluate(self) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"Number({self.value})"


class Negate:
    """Unary minus applied to a subtree."""

    def __init__(self, operand):
        self.operand = operand

    def evaluate(self) -> float:
        return -self.operand.evaluate()

    def __repr__(self) -> str:
        return f"Negate({self.operand!r})"


class BinOp:
    """Binary operation: left <operator> right."""

    def __init__(self, left, operator: str, right):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self) -> float:
        left_value = self.left.evaluate()
        right_value = self.right.evaluate()

        if self.operator == "+":
            return left_value + right_value
        elif self.operator == "-":
            return left_value - right_value
        elif self.operator == "*":
            return left_value * right_value
        elif self.operator == "/":
            return left_value / right_value  # ZeroDivisionError handled by caller
        elif self.operator == "^":
            return math.pow(left_value, right_value)
        raise ExpressionSyntaxError(f"Unknown operator: {self.operator}")

    def __repr__(self) -> str:
        return f"BinOp({self.left!r}, '{self.operator}', {self.right!r})"


# -----------------------------
# Parser (recursive descent)
# -----------------------------


class _Parser:
    """Precedence levels: sum < term < unary < power < factor.

    ``^`` is right-associative and binds tighter than unary minus, so
    ``-2^2`` is ``-(2^2)``.
    """

    def __init__(self, tokens: list[str | float]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> str | float | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def consume(self) -> str | float:
        token = self.peek()
        if token is None:
            raise ExpressionSyntaxError("Unexpected end of expression", self.pos)
        self.pos += 1
        return token

    def parse(self):
        if not self.tokens:
            raise ExpressionSyntaxError("Empty expression", 0)
        tree = self.parse_sum()
        if self.peek() is not None:
            raise ExpressionSyntaxError(f"Unexpected token '{self.peek()}'", self.pos)
        return tree

    def parse_sum(self):
        node = self.parse_term()
        while self.peek() in ("+", "-"):
            operator = self.consume()
            node = BinOp(node, operator, self.parse_term())
        return node

    def parse_term(self):
        node = self.parse_unary()
        while self.peek() in ("*", "/"):
            operator = self.consume()
            node = BinOp(node, operator, self.parse_unary())
        return node

    def parse_unary(self):
        if self.peek() == "-":
            self.consume()
            return Negate(self.parse_unary())
        if self.peek() == "+":
            self.consume()
            return self.parse_unary()
        return self.parse_power()

    def parse_power(self):
        base = self.parse_factor()
        if self.peek() == "^":
            self.consume()
            # Right-associative; the exponent may carry its own sign
            return BinOp(base, "^", self.parse_unary())
        return base

    def parse_factor(self):
        token = self.consume()
        if isinstance(token, float):
            return Number(token)
        if token == "(":
            node = self.parse_sum()
            if self.consume() != ")":
                raise ExpressionSyntaxError("Missing closing parenthesis", self.pos)
            return node
        raise ExpressionSyntaxError(f"Unexpected token '{token}'", self.pos - 1)


def parse_expression(text: str):
    """Parse a string into an expression tree.

    Raises:
        ExpressionSyntaxError: If the string is outside the grammar.
    """
    return _Parser(tokenize(text)).parse()


def evaluate_expression(text: str) -> float | None:
    """Evaluate a rendered equation string.

    Args:
        text: The expression, e.g. ``(2 + 3) × 4``.

    Returns:
        The finite numeric result, or None if the string is outside the
        grammar or the arithmetic fails (division by zero, overflow,
        complex results).
    """
    try:
        value = parse_expression(text).evaluate()
    except (ExpressionSyntaxError, ZeroDivisionError, OverflowError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def apply_operator(op: NodeOp, args: Sequence[float]) -> float | None:
    """Apply an operator or function to already-evaluated arguments.

    Args:
        op: The operator or function.
        args: Input values in port order.

    Returns:
        The result, or None where the operation is undefined (division by
        zero, square root of a negative, logarithm of a non-positive value)
        or too few arguments were given.
    """
    try:
        if op == Operator.ADD:
            return math.fsum(args) if args else None
        if op == Operator.MULTIPLY:
            return math.prod(args) if args else None
        if isinstance(op, Operator):
            if len(args) < 2:
                return None
            left, right = args[0], args[1]
            if op == Operator.SUBTRACT:
                return left - right
            if op == Operator.DIVIDE:
                return left / right if right != 0 else None
            if op == Operator.POWER:
                return math.pow(left, right)
            return None

        if not args:
            return None
        value = args[0]
        if op == Function.SIN:
            return math.sin(value)
        if op == Function.COS:
            return math.cos(value)
        if op == Function.TAN:
            return math.tan(value)
        if op == Function.SQRT:
            return math.sqrt(value) if value >= 0 else None
        if op == Function.LOG:
            return math.log10(value) if value > 0 else None
        if op == Function.LN:
            return math.log(value) if value > 0 else None
    except (OverflowError, ValueError):
        return None
    return None
