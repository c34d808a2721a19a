"""
Conditional rule analysis.

Conditional presence rules are often written as code rather than as rule
strings: a boolean, an explicit ``When("role", "admin")`` condition, or a
callable such as ``lambda data: data["role"] == "admin"``. The static
compiler needs the equivalent rule string (``required_if:role,admin``), so
this module inspects the callable's source with ``ast`` and recognizes the
common comparison shapes.

Recognized callable bodies (``data`` may be any parameter name):
    data["field"] == value
    data.get("field") == value
    data.field == value
    data["field"] in [v1, v2]
    data["field"] != value          (becomes the ``*_unless`` variant)

Anything else is evaluated once with no arguments and its truthiness
decides between the base keyword and no rule at all.

Example:
    analyzer = ConditionalRuleAnalyzer()
    analyzer.normalize(lambda data: data["role"] == "admin")
    # 'required_if:role,admin'
    analyzer.normalize(When("type", "a", "b"), base="present", conditional="present_if")
    # 'present_if:type,a,b'
"""

from __future__ import annotations

import ast
import inspect
import logging
import textwrap
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Trailing characters stripped while searching for a parseable lambda expression
_TRAILING_DELIMITERS = " \t\r\n,;)]}"
_MAX_TRIM_ATTEMPTS = 40


@dataclass(frozen=True)
class When:
    """Explicit condition: the rule applies when ``field`` equals one of ``values``."""

    field: str
    values: tuple[Any, ...]

    def __init__(self, field: str, *values: Any):
        object.__setattr__(self, "field", field)
        object.__setattr__(self, "values", tuple(values))


@dataclass
class ConditionalParameters:
    """Comparison extracted from a condition."""

    field: str
    values: list[Any]
    negated: bool = False


def stringify_condition_value(value: Any) -> str | None:
    """
    Render a comparison value the way a rule string expects it.

    Returns None for values that have no sensible rule-string form.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        inner = value.value
        if isinstance(inner, str | int | float) and not isinstance(inner, bool):
            return str(inner)
        return value.name
    if isinstance(value, str):
        return value
    if isinstance(value, int | float):
        return str(value)
    if value is None:
        return None
    if type(value).__str__ is not object.__str__:
        return str(value)
    return None


class ConditionalRuleAnalyzer:
    """Turns booleans, When conditions and callables into rule strings."""

    def normalize(
        self,
        condition: bool | When | Callable[..., Any],
        base: str = "required",
        conditional: str = "required_if",
    ) -> str:
        """
        Normalize a condition into a rule string.

        Args:
            condition: Boolean, When instance, or callable
            base: Keyword returned when the condition is unconditionally true
            conditional: Keyword used when a field comparison is recognized

        Returns:
            Rule string, or an empty string when the rule does not apply
        """
        if isinstance(condition, bool):
            return base if condition else ""

        parameters: ConditionalParameters | None
        if isinstance(condition, When):
            parameters = ConditionalParameters(condition.field, list(condition.values))
        else:
            parameters = self.extract_parameters(condition)

        if parameters is not None:
            values = [stringify_condition_value(v) for v in parameters.values]
            rendered = [v for v in values if v]
            if parameters.field and rendered:
                keyword = conditional
                if parameters.negated and conditional.endswith("_if"):
                    keyword = conditional[: -len("_if")] + "_unless"
                return f"{keyword}:{parameters.field},{','.join(rendered)}"

        if not callable(condition):
            return ""

        try:
            return base if condition() else ""
        except Exception as e:
            logger.debug(f"Conditional callable could not be evaluated statically: {e}")
            return ""

    def extract_parameters(self, func: Callable[..., Any]) -> ConditionalParameters | None:
        """
        Extract the compared field and values from a callable's source.

        Returns:
            ConditionalParameters, or None when the body is not a recognized comparison
        """
        expression = self._body_expression(func)
        if expression is None:
            return None

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return None
        params = list(signature.parameters)
        if not params:
            return None

        return self._analyze_comparison(expression, params[0], func)

    def _body_expression(self, func: Callable[..., Any]) -> ast.expr | None:
        try:
            source = inspect.getsource(func)
        except (OSError, TypeError):
            return None

        source = textwrap.dedent(source)
        name = getattr(func, "__name__", "")

        if name != "<lambda>":
            tree = self._parse(source)
            if tree is None:
                return None
            for node in ast.walk(tree):
                if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef) and node.name == name:
                    returns = [n for n in ast.walk(node) if isinstance(n, ast.Return)]
                    if len(returns) == 1 and returns[0].value is not None:
                        return returns[0].value
            return None

        start = source.find("lambda")
        if start < 0:
            return None
        candidate = source[start:].strip()

        for _ in range(_MAX_TRIM_ATTEMPTS):
            tree = self._parse(candidate)
            if tree is not None:
                lambdas = [n for n in ast.walk(tree) if isinstance(n, ast.Lambda)]
                return lambdas[0].body if lambdas else None
            trimmed = candidate[:-1].rstrip() if candidate else candidate
            if not trimmed or trimmed == candidate:
                return None
            candidate = trimmed
        return None

    @staticmethod
    def _parse(source: str) -> ast.Module | None:
        try:
            return ast.parse(source)
        except SyntaxError:
            return None

    def _analyze_comparison(
        self, node: ast.expr, arg: str, func: Callable[..., Any]
    ) -> ConditionalParameters | None:
        if not isinstance(node, ast.Compare) or len(node.ops) != 1:
            return None

        op = node.ops[0]
        left, right = node.left, node.comparators[0]

        field = self._field_access(left, arg)
        value_node = right
        if field is None and isinstance(op, ast.Eq | ast.NotEq):
            field = self._field_access(right, arg)
            value_node = left
        if field is None:
            return None

        if isinstance(op, ast.In | ast.NotIn):
            if not isinstance(value_node, ast.List | ast.Tuple | ast.Set):
                return None
            values = [self._literal(el, func) for el in value_node.elts]
            return ConditionalParameters(field, values, negated=isinstance(op, ast.NotIn))

        if isinstance(op, ast.Eq | ast.Is):
            return ConditionalParameters(field, [self._literal(value_node, func)])
        if isinstance(op, ast.NotEq | ast.IsNot):
            return ConditionalParameters(field, [self._literal(value_node, func)], negated=True)
        return None

    @staticmethod
    def _field_access(node: ast.expr, arg: str) -> str | None:
        # data["field"]
        if (
            isinstance(node, ast.Subscript)
            and isinstance(node.value, ast.Name)
            and node.value.id == arg
            and isinstance(node.slice, ast.Constant)
            and isinstance(node.slice.value, str)
        ):
            return node.slice.value
        # data.get("field")
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr == "get"
            and isinstance(node.func.value, ast.Name)
            and node.func.value.id == arg
            and node.args
            and isinstance(node.args[0], ast.Constant)
            and isinstance(node.args[0].value, str)
        ):
            return node.args[0].value
        # data.field
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            if node.value.id == arg:
                return node.attr
        return None

    @staticmethod
    def _literal(node: ast.expr, func: Callable[..., Any]) -> Any:
        """Evaluate a constant or a dotted name (e.g. an enum member) in the callable's scope."""
        if isinstance(node, ast.Constant):
            return node.value

        parts: list[str] = []
        current: ast.expr = node
        while isinstance(current, ast.Attribute):
            parts.append(current.attr)
            current = current.value
        if not isinstance(current, ast.Name):
            return None
        parts.append(current.id)
        parts.reverse()

        try:
            scope = inspect.getclosurevars(func)
        except (TypeError, ValueError):
            return None
        namespace = {**scope.builtins, **scope.globals, **scope.nonlocals}
        if parts[0] not in namespace:
            return None

        value = namespace[parts[0]]
        for attr in parts[1:]:
            value = getattr(value, attr, None)
            if value is None:
                return None
        return value


__all__ = ["When", "ConditionalParameters", "ConditionalRuleAnalyzer", "stringify_condition_value"]
