"""Tests for the expression generator."""

import math

import pytest

from eqgraph.expression.generator import NO_INPUT, ExpressionGenerator
from eqgraph.graph.connection_store import ConnectionStore
from eqgraph.graph.errors import CircularReferenceError
from eqgraph.graph.models import Connection
from eqgraph.graph.node_registry import NodeRegistry


class TestRender:
    def test_unconnected_output(self, workspace):
        out = workspace.create_node("=")
        assert workspace.render(out) == NO_INPUT

    def test_unknown_node_renders_empty(self, workspace):
        assert workspace.render("missing") == ""

    def test_constant_passes_through(self, workspace):
        five = workspace.create_node("5")
        out = workspace.create_node("=")
        workspace.connect(five, out)

        assert workspace.render(out) == "5"

    def test_binary_placeholder(self, workspace):
        five = workspace.create_node("5")
        minus = workspace.create_node("-")
        workspace.connect(five, minus, to_port=0)

        assert workspace.render(minus) == "(5 - ?)"

    def test_division_glyph(self, workspace):
        a = workspace.create_node("a")
        div = workspace.create_node("/")
        workspace.connect(a, div, to_port=1)

        assert workspace.render(div) == "(? ÷ a)"

    def test_power_exponent_form(self, workspace):
        two = workspace.create_node("2")
        three = workspace.create_node("3")
        power = workspace.create_node("^")
        workspace.connect(two, power, to_port=0)
        workspace.connect(three, power, to_port=1)

        assert workspace.render(power) == "(2)^(3)"

    def test_functions(self, workspace):
        x = workspace.create_node("x")
        sqrt = workspace.create_node("sqrt")
        sin = workspace.create_node("sin")
        workspace.connect(x, sqrt)

        assert workspace.render(sqrt) == "√(x)"
        assert workspace.render(sin) == "sin(?)"

    def test_nary_keeps_port_order(self, workspace):
        c = workspace.create_node("c")
        a = workspace.create_node("a")
        b = workspace.create_node("b")
        plus = workspace.create_node("+")
        workspace.set_arity(plus, 3)
        workspace.connect(c, plus, to_port=2)
        workspace.connect(a, plus, to_port=0)
        workspace.connect(b, plus, to_port=1)

        assert workspace.render(plus) == "(a + b + c)"

    def test_nary_with_gap(self, workspace):
        x = workspace.create_node("x")
        five = workspace.create_node("5")
        times = workspace.create_node("×")
        workspace.set_arity(times, 3)
        workspace.connect(x, times, to_port=0)
        workspace.connect(five, times, to_port=2)

        assert workspace.render(times) == "(x × ? × 5)"

    def test_nested(self, sum_workspace):
        ws = sum_workspace
        two = ws.create_node("2")
        times = ws.create_node("×")
        out2 = ws.create_node("=")
        ws.connect("plus", times, to_port=0)
        ws.connect(two, times, to_port=1)
        ws.connect(times, out2)

        assert ws.render(out2) == "((3 + 4) × 2)"

    def test_render_is_deterministic(self, sum_workspace):
        assert sum_workspace.render("out") == sum_workspace.render("out")

    def test_render_outputs(self, sum_workspace):
        assert sum_workspace.render_outputs() == {"out": "(3 + 4)"}

    def test_custom_placeholder(self):
        registry = NodeRegistry()
        store = ConnectionStore()
        generator = ExpressionGenerator(registry, store, placeholder="_")
        minus = registry.create_node("-")

        assert generator.render(minus) == "(_ - _)"


class TestRenderFormatted:
    def test_ascii(self, workspace):
        x = workspace.create_node("x")
        root = workspace.create_node("√")
        two = workspace.create_node("2")
        times = workspace.create_node("×")
        workspace.connect(x, root)
        workspace.connect(root, times, to_port=0)
        workspace.connect(two, times, to_port=1)

        assert workspace.generator.render_formatted(times, unicode=False) == "(sqrt(x) * 2)"

    def test_strip_outer_parentheses(self, sum_workspace):
        text = sum_workspace.generator.render_formatted("out", parentheses=False)
        assert text == "3 + 4"


class TestEvaluate:
    def test_output_value(self, sum_workspace):
        assert sum_workspace.generator.evaluate("out") == 7.0

    def test_operator_value(self, sum_workspace):
        assert sum_workspace.generator.evaluate("plus") == 7.0

    def test_constants(self, workspace):
        pi = workspace.create_node("π")
        assert workspace.generator.evaluate(pi) == math.pi

    def test_function_value(self, workspace):
        nine = workspace.create_node("9")
        root = workspace.create_node("√")
        workspace.connect(nine, root)

        assert workspace.generator.evaluate(root) == 3.0

    def test_missing_input_is_none(self, workspace):
        five = workspace.create_node("5")
        minus = workspace.create_node("-")
        workspace.connect(five, minus, to_port=0)

        assert workspace.generator.evaluate(minus) is None

    def test_variable_is_none(self, workspace):
        x = workspace.create_node("x")
        assert workspace.generator.evaluate(x) is None

    def test_output_fed_by_pi_word(self, workspace):
        pi = workspace.create_node("pi")
        out = workspace.create_node("=")
        workspace.connect(pi, out)

        assert workspace.generator.evaluate(out) == pytest.approx(math.pi)


class TestCircularReferences:
    @pytest.fixture
    def cyclic(self):
        # Edges added behind the store's back to simulate a corrupted graph
        registry = NodeRegistry()
        store = ConnectionStore()
        a = registry.create_node("+")
        b = registry.create_node("×")
        out = registry.create_node("=")
        for node_id in (a, b, out):
            store.add_node(node_id)
        store._add(Connection("c0", a, b, to_port=0))
        store._add(Connection("c1", b, a, to_port=0))
        store._add(Connection("c2", a, out))
        return ExpressionGenerator(registry, store), out

    def test_render_raises(self, cyclic):
        generator, out = cyclic
        with pytest.raises(CircularReferenceError):
            generator.render(out)

    def test_detected(self, cyclic):
        generator, out = cyclic
        assert generator.has_circular_reference(out)

    def test_validate_reports_error(self, cyclic):
        generator, out = cyclic
        result = generator.validate(out)

        assert not result.is_valid
        assert result.errors[0].code == "CIRCULAR_REFERENCE"

    def test_evaluate_returns_none(self, cyclic):
        generator, out = cyclic
        assert generator.evaluate(out) is None

    def test_acyclic_graph(self, sum_workspace):
        assert not sum_workspace.generator.has_circular_reference("out")


class TestValidate:
    def test_valid_equation(self, sum_workspace):
        result = sum_workspace.generator.validate("out")
        assert result.is_valid
        assert not result.has_warnings

    def test_unconnected_input(self, workspace):
        five = workspace.create_node("5")
        minus = workspace.create_node("-")
        out = workspace.create_node("=")
        workspace.connect(five, minus, to_port=0)
        workspace.connect(minus, out)

        result = workspace.generator.validate(out)

        assert [e.code for e in result.errors] == ["UNCONNECTED_INPUT"]
        assert result.errors[0].details["equation"] == "(5 - ?)"

    @pytest.mark.parametrize("divisor,flagged", [("0", True), ("0.0", True), ("0.5", False)])
    def test_division_by_zero(self, workspace, divisor, flagged):
        seven = workspace.create_node("7")
        zero = workspace.create_node(divisor)
        div = workspace.create_node("÷")
        out = workspace.create_node("=")
        workspace.connect(seven, div, to_port=0)
        workspace.connect(zero, div, to_port=1)
        workspace.connect(div, out)

        result = workspace.generator.validate(out)

        assert result.is_valid
        assert result.has_warnings == flagged


class TestStats:
    def test_stats(self, sum_workspace):
        stats = sum_workspace.generator.stats()

        assert stats.total_nodes == 4
        assert stats.node_kinds == {"constant": 2, "add": 1, "output": 1}
        assert stats.output_nodes == 1
        assert stats.valid_equations == 1
        assert stats.total_connections == 3
        assert stats.complexity == len("(3 + 4)")

    def test_invalid_equation_not_counted(self, workspace):
        minus = workspace.create_node("-")
        out = workspace.create_node("=")
        workspace.connect(minus, out)

        stats = workspace.generator.stats()

        assert stats.output_nodes == 1
        assert stats.valid_equations == 0
