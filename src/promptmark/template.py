#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/template.py
"""Template evaluation for ``{{expr}}`` placeholders and conditions.

The :class:`TemplateEngine` reads a variable mapping and never writes to it.
It provides three services used by the components:

- ``substitute`` replaces every ``{{expr}}`` placeholder in a string
- ``evaluate_attribute_expression`` resolves an expression to a value
- ``evaluate_condition`` decides conditionals for ``<if>`` and ``<include if>``

Expressions
-----------
An expression is one of:

- a variable path: ``name``, ``user.name``, ``items[0]``, ``row["key"]``
- a path plus or minus an integer: ``loop.index + 1``
- a JSON literal: ``[1, 2, 3]``, ``{"a": 1}``, ``"text"``, ``3.5``,
  ``true``, ``false``, ``null``
- a single-quoted string: ``'text'``

Unresolved expressions evaluate to None. ``substitute`` leaves the
placeholder of an unresolved expression in the output unchanged.

Conditions
----------
A condition string is parsed into a small grammar::

    condition  := "!" condition | literal | comparison | reference
    literal    := "true" | "false"
    comparison := operand ("==" | "!=" | ">=" | "<=" | ">" | "<") operand
    reference  := "{{" expression "}}" | expression

A comparison is recognized before substitution, and each operand is resolved
on its own. A lone ``{{expr}}`` operand is evaluated directly and is None when
unresolved; None fails every ordering comparison and equals only None. Other
operands are substituted and coerced to ``int`` (``^-?\\d+$``), ``float``
(``^-?\\d*\\.\\d+$``), an unquoted string when quoted, or left as a string.
Conditions without a comparison are substituted first, then matched again.
References are evaluated and coerced with :func:`to_bool`.

"""

from __future__ import annotations

import json
import logging
import operator
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{(.+?)\}\}", re.DOTALL)
_WRAPPED_PATTERN = re.compile(r"^\{\{(.+)\}\}$", re.DOTALL)
_COMPARISON_PATTERN = re.compile(r"^(.+?)\s*(>=|<=|==|!=|>|<)\s*(.+)$", re.DOTALL)
_ARITHMETIC_PATTERN = re.compile(r"^(.+?)\s*([+-])\s*(\d+)$")
_PATH_PATTERN = re.compile(r"^[A-Za-z_]\w*(?:\.\w+|\[\s*(?:-?\d+|'[^']*'|\"[^\"]*\")\s*\])*$")
_PATH_SEGMENT_PATTERN = re.compile(r"\.(\w+)|\[\s*(-?\d+|'[^']*'|\"[^\"]*\")\s*\]")
_INT_PATTERN = re.compile(r"^-?\d+$")
_FLOAT_PATTERN = re.compile(r"^-?\d*\.\d+$")
_QUOTED_PATTERN = re.compile(r"""^(['"])(.*)\1$""", re.DOTALL)
_LOOP_SPEC_PATTERN = re.compile(r"^(\w+)\s+in\s+(.+)$", re.DOTALL)

_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None}

_ORDERING_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


# ============================================================================
# Value helpers
# ============================================================================


def to_bool(value: Any) -> bool:
    """Coerce an evaluated value to a boolean.

    ``None``, ``False``, numeric zero, the empty string, an empty list and the
    string ``"false"`` are false. Everything else, including the string
    ``"true"`` and empty mappings, is true.

    Parameters
    ----------
    value : Any
        Value to coerce

    Returns
    -------
    bool
        Truthiness of the value

    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value not in ("", "false")
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def to_text(value: Any) -> str:
    """Render an evaluated value the way placeholders display it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def coerce_scalar(text: str) -> Union[int, float, str]:
    """Coerce an operand string to int, float or an unquoted string."""
    quoted = _QUOTED_PATTERN.match(text)
    if quoted:
        return quoted.group(2)
    if _INT_PATTERN.match(text):
        return int(text)
    if _FLOAT_PATTERN.match(text):
        return float(text)
    return text


def parse_loop_spec(spec: str) -> Optional[tuple[str, str]]:
    """Split a ``"<var> in <expr>"`` loop clause.

    Returns
    -------
    tuple of (str, str) or None
        Loop variable name and list expression, or None if the clause
        is malformed

    """
    match = _LOOP_SPEC_PATTERN.match(spec.strip())
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def unwrap_placeholder(expression: str) -> str:
    """Strip a single surrounding ``{{ }}`` pair from an expression."""
    expression = expression.strip()
    wrapped = _WRAPPED_PATTERN.match(expression)
    return wrapped.group(1).strip() if wrapped else expression


def _is_balanced(text: str) -> bool:
    return text.count("{{") == text.count("}}")


# ============================================================================
# Condition grammar
# ============================================================================


@dataclass(frozen=True)
class BoolLiteral:
    """Literal ``true`` or ``false`` condition."""

    value: bool


@dataclass(frozen=True)
class Comparison:
    """Binary comparison between two operand strings."""

    left: str
    operator: str
    right: str


@dataclass(frozen=True)
class Reference:
    """Expression whose value is coerced to a boolean."""

    expression: str


@dataclass(frozen=True)
class Negation:
    """Logical negation of another condition."""

    operand: "Condition"


Condition = Union[BoolLiteral, Comparison, Reference, Negation]


# ============================================================================
# Engine
# ============================================================================


class TemplateEngine:
    """Evaluate placeholders and conditions against a variable mapping.

    Parameters
    ----------
    variables : Mapping[str, Any]
        Variable bindings visible to expressions. The engine only reads them.

    Examples
    --------
        >>> engine = TemplateEngine({"user": {"name": "Ada"}, "n": 4})
        >>> engine.substitute("Hello {{user.name}}, {{n + 1}} messages")
        'Hello Ada, 5 messages'
        >>> engine.evaluate_condition("{{n}} >= 3")
        True

    """

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        """Bind the engine to a variable mapping."""
        self.variables: Mapping[str, Any] = variables if variables is not None else {}

    # ------------------------------------------------------------------
    # Substitution
    # ------------------------------------------------------------------

    def substitute(self, text: Any) -> Any:
        """Replace every ``{{expr}}`` placeholder in ``text``.

        Non-string input is returned unchanged. Unresolved expressions keep
        their placeholder text.
        """
        if not isinstance(text, str) or "{{" not in text:
            return text

        def _replace(match: re.Match[str]) -> str:
            value = self.evaluate_attribute_expression(match.group(1))
            if value is None:
                logger.debug("Unresolved template expression: %s", match.group(1).strip())
                return match.group(0)
            return to_text(value)

        return PLACEHOLDER_PATTERN.sub(_replace, text)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def evaluate_attribute_expression(self, expression: Any) -> Any:
        """Resolve an expression to its bound value.

        Parameters
        ----------
        expression : Any
            Expression text. Non-string values are returned unchanged.

        Returns
        -------
        Any
            The value, or None when the expression cannot be resolved

        """
        if not isinstance(expression, str):
            return expression
        expression = expression.strip()
        if not expression:
            return None

        if _PATH_PATTERN.match(expression):
            found, value = self._lookup_path(expression)
            if found:
                return value
            if expression in _LITERALS:
                return _LITERALS[expression]
            return None

        literal = self._parse_literal(expression)
        if literal is not _UNPARSED:
            return literal

        arithmetic = _ARITHMETIC_PATTERN.match(expression)
        if arithmetic:
            base = self.evaluate_attribute_expression(arithmetic.group(1))
            if isinstance(base, (int, float)) and not isinstance(base, bool):
                amount = int(arithmetic.group(3))
                return base + amount if arithmetic.group(2) == "+" else base - amount
            return None

        # Keys that are not valid paths (spaces, punctuation) still resolve directly
        return self.variables.get(expression)

    def evaluate_items(self, expression: Any) -> Optional[list[Any]]:
        """Evaluate a loop ``items`` expression to a list.

        Both ``{{expr}}`` and bare forms are accepted. Anything that does not
        evaluate to a list or tuple yields None.
        """
        if isinstance(expression, (list, tuple)):
            return list(expression)
        if not isinstance(expression, str):
            return None
        value = self.evaluate_attribute_expression(unwrap_placeholder(expression))
        if isinstance(value, (list, tuple)):
            return list(value)
        return None

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def parse_condition(self, condition: str) -> Condition:
        """Parse a condition string into the condition grammar.

        A comparison written in the condition keeps its operands unsubstituted;
        they are resolved by :meth:`coerce_operand` at evaluation. Anything
        else is substituted before matching, so the returned node reflects the
        current variable bindings.
        """
        condition = condition.strip()
        if condition.startswith("!"):
            return Negation(self.parse_condition(condition[1:]))

        comparison = _COMPARISON_PATTERN.match(condition)
        if comparison and _is_balanced(comparison.group(1)) and _is_balanced(comparison.group(3)):
            return Comparison(comparison.group(1).strip(), comparison.group(2), comparison.group(3).strip())

        substituted = self.substitute(condition).strip()
        if substituted in ("true", "false"):
            return BoolLiteral(substituted == "true")

        comparison = _COMPARISON_PATTERN.match(substituted)
        if comparison:
            return Comparison(comparison.group(1).strip(), comparison.group(2), comparison.group(3).strip())

        return Reference(unwrap_placeholder(substituted))

    def evaluate(self, node: Condition) -> bool:
        """Evaluate a parsed condition node."""
        if isinstance(node, BoolLiteral):
            return node.value
        if isinstance(node, Negation):
            return not self.evaluate(node.operand)
        if isinstance(node, Comparison):
            return self._compare(
                self.coerce_operand(node.left),
                node.operator,
                self.coerce_operand(node.right),
            )
        return to_bool(self.evaluate_attribute_expression(node.expression))

    def evaluate_condition(self, condition: Any) -> bool:
        """Parse and evaluate a condition string.

        Examples
        --------
            >>> TemplateEngine().evaluate_condition("5 > 3")
            True
            >>> TemplateEngine().evaluate_condition("2 == 2.0")
            True
            >>> TemplateEngine().evaluate_condition("{{x}}")
            False

        """
        if isinstance(condition, bool):
            return condition
        if not isinstance(condition, str):
            return to_bool(condition)
        return self.evaluate(self.parse_condition(condition))

    def coerce_operand(self, operand: str) -> Union[int, float, str, None]:
        """Substitute an operand and coerce it to a typed scalar.

        An operand that is a single ``{{expr}}`` placeholder is evaluated
        directly and gives None when the expression is unresolved.
        """
        operand = operand.strip()
        wrapped = _WRAPPED_PATTERN.match(operand)
        if wrapped and "{{" not in wrapped.group(1):
            value = self.evaluate_attribute_expression(wrapped.group(1))
            if value is None:
                return None
            return coerce_scalar(to_text(value).strip())
        return coerce_scalar(str(self.substitute(operand)).strip())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _compare(left: Any, op: str, right: Any) -> bool:
        if op == "==":
            return bool(left == right)
        if op == "!=":
            return bool(left != right)
        if left is None or right is None:
            return False
        compare = _ORDERING_OPERATORS[op]
        try:
            return bool(compare(left, right))
        except TypeError:
            # Mixed types compare by their string forms
            return bool(compare(str(left), str(right)))

    def _lookup_path(self, path: str) -> tuple[bool, Any]:
        head = re.match(r"[A-Za-z_]\w*", path)
        if head is None:
            return False, None
        name = head.group(0)
        if name not in self.variables:
            return False, None
        value = self.variables[name]

        for segment in _PATH_SEGMENT_PATTERN.finditer(path, head.end()):
            attribute, index = segment.group(1), segment.group(2)
            if attribute is not None:
                if isinstance(value, Mapping) and attribute in value:
                    value = value[attribute]
                elif isinstance(value, (list, tuple)) and attribute.isdigit() and int(attribute) < len(value):
                    value = value[int(attribute)]
                else:
                    return False, None
                continue

            key = coerce_scalar(index)
            if isinstance(value, (list, tuple)) and isinstance(key, int):
                if -len(value) <= key < len(value):
                    value = value[key]
                else:
                    return False, None
            elif isinstance(value, Mapping) and str(key) in value:
                value = value[str(key)]
            else:
                return False, None

        return True, value

    @staticmethod
    def _parse_literal(expression: str) -> Any:
        if _INT_PATTERN.match(expression):
            return int(expression)
        if _FLOAT_PATTERN.match(expression):
            return float(expression)
        if expression[0] in "[{\"":
            try:
                return json.loads(expression)
            except ValueError:
                logger.debug("Expression is not valid JSON: %s", expression)
                return None
        if expression[0] == "'" and expression.endswith("'") and len(expression) >= 2:
            return expression[1:-1]
        return _UNPARSED


_UNPARSED = object()
