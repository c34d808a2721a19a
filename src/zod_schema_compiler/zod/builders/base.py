"""Base Zod builder.

A builder accumulates a chain of Zod method calls for one node and renders
it as TypeScript source text. Validation rules are applied through
``validate_<rule>`` methods, discovered by name: a builder supports a rule
exactly when it defines the matching method, so custom builders extend the
rule vocabulary by adding methods.

Rendering order:
    base expression, chained calls, appended fragment code,
    ``.nullable()``, ``.optional()``

A replace-mode fragment discards the base expression and the chain; only
the nullable/optional suffixes are still applied.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from ...engine.models import SchemaFragment

logger = logging.getLogger(__name__)

_JS_ESCAPES = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)


def escape_js(text: str | None) -> str:
    """Escape text for a single-quoted JavaScript string literal."""
    if text is None:
        return ""
    for raw, escaped in _JS_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def message_param(message: str | None) -> str:
    """Message as a trailing method argument (``, 'message'``), or empty."""
    if message is None:
        return ""
    return f", '{escape_js(message)}'"


def js_number(value: Any) -> int | float | str:
    """
    Coerce a rule parameter to a number for arithmetic.

    Integral values become int so they render without a decimal point;
    anything that is not numeric is returned unchanged.
    """
    if isinstance(value, int | float):
        return int(value) if float(value).is_integer() else value
    try:
        number = float(str(value).strip())
    except ValueError:
        return value
    return int(number) if number.is_integer() else number


def numeric_bound(parameters: Sequence[Any]) -> int | float | None:
    """First parameter as a number, or None when it names another field."""
    if not parameters:
        return None
    bound = js_number(parameters[0])
    return None if isinstance(bound, str) else bound


class ZodBuilder(ABC):
    """Fluent builder for one Zod expression."""

    def __init__(self) -> None:
        self.chain: list[str] = []
        self.is_nullable = False
        self.is_optional = False
        self.field_name: str | None = None
        self.required_message: str | None = None
        self.fragment: SchemaFragment | None = None

    @abstractmethod
    def base_type(self) -> str:
        """Base expression, e.g. ``z.string()``."""

    def nullable(self) -> ZodBuilder:
        self.is_nullable = True
        return self

    def optional(self) -> ZodBuilder:
        self.is_optional = True
        return self

    def set_field_name(self, field_name: str) -> ZodBuilder:
        self.field_name = field_name
        return self

    def with_fragment(self, fragment: SchemaFragment | None) -> ZodBuilder:
        self.fragment = fragment
        return self

    def build(self) -> str:
        """Render the expression."""
        if self.fragment is not None and self.fragment.is_replace():
            return self.fragment.code + self.suffixes()

        # base_type() may still adjust the chain, so it renders first
        code = self.base_type()
        code += self.render_chain()
        if self.fragment is not None:
            code += self.fragment.code
        return code + self.suffixes()

    def render_chain(self) -> str:
        return "".join(self.chain)

    def suffixes(self) -> str:
        code = ""
        if self.is_nullable:
            code += ".nullable()"
        if self.is_optional:
            code += ".optional()"
        return code

    # Chain manipulation

    def add_rule(self, rule: str) -> ZodBuilder:
        self.chain.append(rule)
        return self

    def replace_rule(self, rule_type: str, rule: str) -> ZodBuilder:
        """Drop chain entries calling ``rule_type(`` and append ``rule``."""
        self.chain = [entry for entry in self.chain if f"{rule_type}(" not in entry]
        self.chain.append(rule)
        return self

    def has_rule(self, rule_type: str) -> bool:
        return any(f"{rule_type}(" in entry for entry in self.chain)

    def remove_rule_containing(self, needle: str) -> None:
        self.chain = [entry for entry in self.chain if needle not in entry]

    # Rule dispatch

    def rule_method(self, rule: str) -> Callable[..., Any] | None:
        """``validate_<rule>`` method for a rule name (``password.letters`` included)."""
        name = "validate_" + rule.replace(".", "_").replace("-", "_")
        method = getattr(self, name, None)
        return method if callable(method) else None

    def supports(self, rule: str) -> bool:
        return self.rule_method(rule) is not None

    def apply_rule(self, rule: str, parameters: Sequence[Any], message: str | None) -> bool:
        """
        Apply one rule.

        Returns:
            False when the builder has no translation for the rule
        """
        method = self.rule_method(rule)
        if method is None:
            return False
        method(list(parameters), message)
        return True

    def validate_required(self, parameters: list[Any], message: str | None = None) -> ZodBuilder:
        if message:
            self.required_message = escape_js(message)
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(field={self.field_name!r}, chain={len(self.chain)})"


class SizeRulesMixin:
    """
    Length-style size rules shared by string, email and array builders.

    A chain keeps one ``.min`` and one ``.max``: when several rules set the
    same bound, the tighter one wins. Non-numeric parameters are skipped.
    """

    min_bound: int | float | None = None
    max_bound: int | float | None = None

    def validate_min(self, parameters: list[Any], message: str | None = None):
        bound = numeric_bound(parameters)
        if bound is None or (self.min_bound is not None and self.min_bound >= bound):
            return self
        self.min_bound = bound
        self.replace_rule("min", f".min({bound}{message_param(message)})")
        return self

    def validate_max(self, parameters: list[Any], message: str | None = None):
        bound = numeric_bound(parameters)
        if bound is None or (self.max_bound is not None and self.max_bound <= bound):
            return self
        self.max_bound = bound
        self.replace_rule("max", f".max({bound}{message_param(message)})")
        return self

    def require_non_empty(self, message: str | None = None):
        """``.min(1)`` carrying the required message, unless a larger minimum is set."""
        return self.validate_min([1], message)

    def validate_lt(self, parameters: list[Any], message: str | None = None):
        bound = numeric_bound(parameters)
        if bound is None:
            return self
        return self.validate_max([bound - 1], message)

    def validate_lte(self, parameters: list[Any], message: str | None = None):
        bound = numeric_bound(parameters)
        if bound is None:
            return self
        return self.validate_max([bound], message)

    def validate_gt(self, parameters: list[Any], message: str | None = None):
        bound = numeric_bound(parameters)
        if bound is None:
            return self
        return self.validate_min([bound + 1], message)

    def validate_gte(self, parameters: list[Any], message: str | None = None):
        bound = numeric_bound(parameters)
        if bound is None:
            return self
        return self.validate_min([bound], message)

    def validate_between(self, parameters: list[Any], message: str | None = None):
        if len(parameters) < 2:
            return self
        low, high = parameters[0], parameters[1]
        self.validate_min([low], message)
        return self.validate_max([high], message)

    def validate_size(self, parameters: list[Any], message: str | None = None):
        length = numeric_bound(parameters)
        if length is None:
            return self
        self.replace_rule("length", f".length({length}{message_param(message)})")
        return self

    def validate_trim(self, parameters: list[Any], message: str | None = None):
        if not self.has_rule("trim"):
            self.add_rule(".trim()")
        return self


__all__ = [
    "ZodBuilder",
    "SizeRulesMixin",
    "escape_js",
    "message_param",
    "js_number",
    "numeric_bound",
]
