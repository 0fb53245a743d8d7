#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for template substitution and condition evaluation."""
import pytest

from promptmark.template import (
    BoolLiteral,
    Comparison,
    Negation,
    Reference,
    TemplateEngine,
    coerce_scalar,
    parse_loop_spec,
    to_bool,
)


@pytest.fixture
def engine() -> TemplateEngine:
    """Engine with a few nested variables."""
    return TemplateEngine(
        {
            "name": "Ada",
            "count": 3,
            "user": {"name": "Grace", "tags": ["admin", "ops"]},
            "items": [{"title": "First"}, {"title": "Second"}],
            "enabled": True,
            "empty": "",
        }
    )


@pytest.mark.unit
class TestSubstitute:
    """Test placeholder substitution."""

    def test_simple_variable(self, engine: TemplateEngine) -> None:
        """Test replacing a variable placeholder."""
        assert engine.substitute("Hello {{name}}!") == "Hello Ada!"

    def test_nested_paths(self, engine: TemplateEngine) -> None:
        """Test dotted and indexed paths."""
        assert engine.substitute("{{user.name}}") == "Grace"
        assert engine.substitute("{{user.tags[1]}}") == "ops"
        assert engine.substitute("{{items[0].title}}") == "First"
        assert engine.substitute("{{items[-1].title}}") == "Second"

    def test_arithmetic(self, engine: TemplateEngine) -> None:
        """Test integer offsets on numeric values."""
        assert engine.substitute("{{count + 1}}") == "4"
        assert engine.substitute("{{count - 2}}") == "1"

    def test_unresolved_placeholder_is_kept(self, engine: TemplateEngine) -> None:
        """Test that unknown expressions stay in the text unchanged."""
        assert engine.substitute("Hi {{missing}} and {{name}}") == "Hi {{missing}} and Ada"

    def test_structured_values_render_as_json(self, engine: TemplateEngine) -> None:
        """Test how lists and booleans are displayed."""
        assert engine.substitute("{{user.tags}}") == '["admin", "ops"]'
        assert engine.substitute("{{enabled}}") == "true"

    def test_non_string_passthrough(self, engine: TemplateEngine) -> None:
        """Test that non-string input is returned unchanged."""
        assert engine.substitute(42) == 42
        assert engine.substitute(None) is None

    def test_engine_does_not_mutate_variables(self) -> None:
        """Test that evaluation only reads the variable mapping."""
        variables = {"n": 1}
        engine = TemplateEngine(variables)
        engine.substitute("{{n + 1}}")
        engine.evaluate_condition("{{n}} > 0")

        assert variables == {"n": 1}


@pytest.mark.unit
class TestEvaluateExpression:
    """Test expression evaluation to values."""

    def test_literals(self, engine: TemplateEngine) -> None:
        """Test JSON and quoted literals."""
        assert engine.evaluate_attribute_expression("[1, 2, 3]") == [1, 2, 3]
        assert engine.evaluate_attribute_expression('{"a": 1}') == {"a": 1}
        assert engine.evaluate_attribute_expression("'text'") == "text"
        assert engine.evaluate_attribute_expression("3.5") == 3.5
        assert engine.evaluate_attribute_expression("true") is True

    def test_bound_values_are_returned_as_is(self, engine: TemplateEngine) -> None:
        """Test that paths evaluate to the bound objects."""
        assert engine.evaluate_attribute_expression("user.tags") == ["admin", "ops"]

    def test_unresolved_is_none(self, engine: TemplateEngine) -> None:
        """Test that unknown names evaluate to None."""
        assert engine.evaluate_attribute_expression("nope") is None
        assert engine.evaluate_attribute_expression("user.missing") is None

    def test_evaluate_items(self, engine: TemplateEngine) -> None:
        """Test loop item expressions in wrapped and bare form."""
        assert engine.evaluate_items("{{user.tags}}") == ["admin", "ops"]
        assert engine.evaluate_items("user.tags") == ["admin", "ops"]
        assert engine.evaluate_items("[1, 2]") == [1, 2]
        assert engine.evaluate_items("name") is None


@pytest.mark.unit
class TestConditions:
    """Test the condition grammar."""

    @pytest.mark.parametrize(
        "condition,expected",
        [
            ("true", True),
            ("false", False),
            ("!false", True),
            ("5 > 3", True),
            ("5 < 3", False),
            ("2 == 2.0", True),
            ("{{count}} >= 3", True),
            ("{{count}} != 3", False),
            ("{{name}} == 'Ada'", True),
            ("{{name}} == Ada", True),
            ("{{enabled}}", True),
            ("{{empty}}", False),
            ("{{missing}}", False),
            ("!{{missing}}", True),
            ("user.tags", True),
            ("{{missing}} > 3", False),
            ("{{missing}} <= 3", False),
            ("3 < {{missing}}", False),
            ("{{missing}} == 3", False),
            ("{{missing}} != 3", True),
            ("{{user.name}} == Grace", True),
        ],
    )
    def test_evaluate_condition(self, engine: TemplateEngine, condition: str, expected: bool) -> None:
        """Test condition outcomes."""
        assert engine.evaluate_condition(condition) is expected

    def test_parse_condition_nodes(self, engine: TemplateEngine) -> None:
        """Test the parsed representation of conditions."""
        assert engine.parse_condition("true") == BoolLiteral(True)
        assert engine.parse_condition("!true") == Negation(BoolLiteral(True))
        assert engine.parse_condition("{{count}} > 1") == Comparison("{{count}}", ">", "1")
        assert engine.parse_condition("{{flag}}") == Reference("flag")

    def test_coerce_operand(self, engine: TemplateEngine) -> None:
        """Test that a lone placeholder operand keeps its type or becomes None."""
        assert engine.coerce_operand("{{count}}") == 3
        assert engine.coerce_operand("{{missing}}") is None
        assert engine.coerce_operand("n{{count}}") == "n3"

    def test_comparison_from_a_variable(self) -> None:
        """Test a condition whose comparison is held in a variable."""
        assert TemplateEngine({"rule": "5 > 3"}).evaluate_condition("{{rule}}") is True

    def test_non_string_conditions(self, engine: TemplateEngine) -> None:
        """Test booleans and other values passed directly."""
        assert engine.evaluate_condition(True) is True
        assert engine.evaluate_condition(0) is False


@pytest.mark.unit
class TestHelpers:
    """Test value helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, False),
            (False, False),
            (0, False),
            (0.0, False),
            ("", False),
            ("false", False),
            ([], False),
            ("true", True),
            ("0", True),
            ({}, True),
            ([0], True),
            (7, True),
        ],
    )
    def test_to_bool(self, value: object, expected: bool) -> None:
        """Test truthiness coercion."""
        assert to_bool(value) is expected

    def test_coerce_scalar(self) -> None:
        """Test operand coercion."""
        assert coerce_scalar("42") == 42
        assert coerce_scalar("-1.5") == -1.5
        assert coerce_scalar("'quoted'") == "quoted"
        assert coerce_scalar("plain") == "plain"

    def test_parse_loop_spec(self) -> None:
        """Test splitting loop specifications."""
        assert parse_loop_spec("item in items") == ("item", "items")
        assert parse_loop_spec("x in {{data.rows}}") == ("x", "{{data.rows}}")
        assert parse_loop_spec("not a loop") is None
