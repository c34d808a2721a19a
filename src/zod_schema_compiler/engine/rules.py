"""
Rule objects.

Rules can be declared as plain strings (``"required|max:255"``) or as rule
objects. Rule objects render to one or more RuleEntry values and may carry
a SchemaFragment: literal Zod code that appends to, or replaces, whatever
the compiler would emit for the field.

Example:
    rules = {
        "status": [EnumRule(Status)],
        "password": [Password(min=12).mixed_case().numbers()],
        "code": [
            SchemaRule.make(check_code).append(
                lambda encoded: f".refine((v) => v.startsWith('X'), {{ message: {encoded} }})"
            ).fail_with("Codes start with X."),
        ],
        "notes": [RequiredIf(lambda data: data["status"] == "closed")],
    }
"""

from __future__ import annotations

import inspect
import json
import re
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from .categories import canonical_rule_name
from .conditional import ConditionalRuleAnalyzer, When
from .models import FragmentMode, RuleEntry, RuleParameter, SchemaFragment

LiteralSource = str | Callable[..., str]

_CLASS_NAME_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def synthetic_rule_name(obj: Any) -> str:
    """
    Name for a rule object that does not declare one.

    Class names are snake_cased (``UppercaseCode`` -> ``uppercase_code``);
    plain functions and lambdas are named ``closure``.
    """
    if inspect.isfunction(obj) or inspect.ismethod(obj):
        return "closure"
    return _CLASS_NAME_BOUNDARY.sub(r"_\1", type(obj).__name__).lower()


def _call_with_optional_raw(factory: Callable[..., str], encoded: str, raw: str | None) -> str:
    """Call a literal factory with the encoded message, plus the raw one if it accepts two arguments."""
    try:
        accepts = len(inspect.signature(factory).parameters)
    except (TypeError, ValueError):
        accepts = 1
    return factory(encoded, raw) if accepts >= 2 else factory(encoded)


class SchemaFragmentMixin:
    """
    Attach literal Zod code to a rule object.

    ``append()`` and ``replace()`` accept either a string or a callable.
    A callable receives the failure message JSON-encoded (ready to embed
    in the emitted code) and, when it takes two arguments, the raw message.
    """

    _schema_fragment: SchemaFragment | None = None
    _failure_message: str | None = None

    def with_schema_fragment(self, fragment: SchemaFragment) -> Any:
        self._schema_fragment = fragment
        return self

    def literal(self, code: str) -> Any:
        """Attach code, choosing append mode when it starts with a dot."""
        return self.with_schema_fragment(SchemaFragment.literal(code))

    def append(self, code: LiteralSource, message: str | None = None) -> Any:
        return self.with_schema_fragment(
            self._format_literal(code, FragmentMode.APPEND, message)
        )

    def replace(self, code: LiteralSource, message: str | None = None) -> Any:
        return self.with_schema_fragment(
            self._format_literal(code, FragmentMode.REPLACE, message)
        )

    def with_failure_message(self, message: str) -> Any:
        self._failure_message = message
        return self

    def failure_message(self) -> str | None:
        return self._failure_message

    def schema_fragment(self) -> SchemaFragment | None:
        return self._schema_fragment

    def has_schema_fragment(self) -> bool:
        return self._schema_fragment is not None

    def _format_literal(
        self, code: LiteralSource, mode: FragmentMode, message: str | None
    ) -> SchemaFragment:
        if message is not None:
            self._failure_message = message
        message = self._failure_message
        encoded = "null" if message is None else json.dumps(message)

        rendered = _call_with_optional_raw(code, encoded, message) if callable(code) else code
        if not isinstance(rendered, str):
            raise TypeError(
                f"Schema literal resolver for {type(self).__name__} must return a string, "
                f"got {type(rendered).__name__}"
            )

        if mode is FragmentMode.APPEND:
            return SchemaFragment.append(rendered)
        return SchemaFragment.replace(" ".join(rendered.split()))


class Rule(SchemaFragmentMixin):
    """
    Base rule object.

    Subclasses set ``rule_name`` (or inherit a synthetic one from the class
    name) and override parameters() or to_entries().
    """

    rule_name: str | None = None

    @property
    def name(self) -> str:
        return canonical_rule_name(self.rule_name) if self.rule_name else synthetic_rule_name(self)

    def parameters(self) -> tuple[RuleParameter, ...]:
        return ()

    def to_entries(self) -> list[RuleEntry]:
        return [RuleEntry(name=self.name, parameters=self.parameters())]

    def __str__(self) -> str:
        return "|".join(str(entry) for entry in self.to_entries())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class In(Rule):
    """Value must be one of the given values."""

    rule_name = "in"

    def __init__(self, values: Iterable[Any]):
        self.values = [_rule_value(v) for v in values]

    def parameters(self) -> tuple[RuleParameter, ...]:
        return tuple(self.values)


class NotIn(In):
    """Value must not be one of the given values."""

    rule_name = "not_in"


class EnumRule(Rule):
    """
    Value must be a case of a Python Enum.

    Renders as ``in:<values>``. With ``reference``, the compiled schema refers
    to a named TypeScript enum instead of listing the values inline.
    """

    rule_name = "in"

    def __init__(
        self,
        enum_cls: type[Enum],
        only: Iterable[Enum] | None = None,
        except_: Iterable[Enum] | None = None,
        reference: str | None = None,
    ):
        self.enum_cls = enum_cls
        self.only = list(only) if only is not None else None
        self.except_ = list(except_) if except_ is not None else []
        self.reference = reference

    def cases(self) -> list[Enum]:
        members = list(self.enum_cls)
        if self.only is not None:
            members = [m for m in members if m in self.only]
        return [m for m in members if m not in self.except_]

    def parameters(self) -> tuple[RuleParameter, ...]:
        return tuple(_rule_value(m) for m in self.cases())

    def to_entries(self) -> list[RuleEntry]:
        entries = [RuleEntry(name="in", parameters=self.parameters())]
        if self.reference:
            entries.append(RuleEntry(name="enum", parameters=(self.reference,)))
        return entries


class Password(Rule):
    """
    Password strength rule.

    Expands into ``password``, ``min``/``max`` and one ``password.<check>``
    entry per enabled check.
    """

    rule_name = "password"

    def __init__(self, min: int = 8):
        self.min_length = min
        self.max_length: int | None = None
        self.checks: list[str] = []

    def max(self, size: int) -> Password:
        self.max_length = size
        return self

    def _check(self, name: str) -> Password:
        if name not in self.checks:
            self.checks.append(name)
        return self

    def letters(self) -> Password:
        return self._check("letters")

    def mixed_case(self) -> Password:
        return self._check("mixed")

    def numbers(self) -> Password:
        return self._check("numbers")

    def symbols(self) -> Password:
        return self._check("symbols")

    def uncompromised(self) -> Password:
        return self._check("uncompromised")

    def to_entries(self) -> list[RuleEntry]:
        entries = [
            RuleEntry(name="password"),
            RuleEntry(name="min", parameters=(self.min_length,)),
        ]
        if self.max_length is not None:
            entries.append(RuleEntry(name="max", parameters=(self.max_length,)))
        entries.extend(RuleEntry(name=f"password.{check}", parameters=(1,)) for check in self.checks)
        return entries


class ConditionalRule(Rule):
    """Presence rule driven by a boolean, a When condition, or a callable."""

    base_keyword = "required"
    conditional_keyword = "required_if"

    def __init__(self, condition: bool | When | Callable[..., Any]):
        self.condition = condition

    def to_entries(self) -> list[RuleEntry]:
        rendered = ConditionalRuleAnalyzer().normalize(
            self.condition, base=self.base_keyword, conditional=self.conditional_keyword
        )
        return [RuleEntry.parse(rendered)] if rendered else []


class RequiredIf(ConditionalRule):
    pass


class ProhibitedIf(ConditionalRule):
    base_keyword = "prohibited"
    conditional_keyword = "prohibited_if"


class ExcludeIf(ConditionalRule):
    base_keyword = "exclude"
    conditional_keyword = "exclude_if"


class SchemaRule(Rule):
    """
    Closure-backed rule that describes its own Zod equivalent.

    The callback keeps the host's closure signature ``(attribute, value,
    fail)``; it is never invoked by the compiler and only documents the
    server-side behaviour next to its client-side literal.
    """

    _literal_source: tuple[LiteralSource, FragmentMode] | None = None

    def __init__(self, callback: Callable[..., Any], name: str | None = None):
        self.callback = callback
        self.rule_name = name

    @property
    def name(self) -> str:
        return canonical_rule_name(self.rule_name) if self.rule_name else "schema_rule"

    @classmethod
    def make(cls, callback: Callable[..., Any]) -> SchemaRule:
        return cls(callback)

    @classmethod
    def literal_rule(cls, callback: Callable[..., Any], code: str) -> SchemaRule:
        """Closure rule whose compiled output is replaced by ``code``."""
        return cls(callback).replace(code)

    @classmethod
    def with_fragment(cls, callback: Callable[..., Any], fragment: SchemaFragment) -> SchemaRule:
        return cls(callback).with_schema_fragment(fragment)

    def fail_with(self, message: str) -> SchemaRule:
        """Set the failure message and re-render an already attached literal."""
        self._failure_message = message
        if self._literal_source is not None:
            code, mode = self._literal_source
            self._schema_fragment = self._format_literal(code, mode, None)
        return self

    def append(self, code: LiteralSource, message: str | None = None) -> SchemaRule:
        self._literal_source = (code, FragmentMode.APPEND)
        return super().append(code, message)

    def replace(self, code: LiteralSource, message: str | None = None) -> SchemaRule:
        self._literal_source = (code, FragmentMode.REPLACE)
        return super().replace(code, message)


def _rule_value(value: Any) -> RuleParameter:
    if isinstance(value, Enum):
        inner = value.value
        return inner if isinstance(inner, str | int | float) and not isinstance(inner, bool) else value.name
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str | int | float):
        return value
    return str(value)


__all__ = [
    "SchemaFragmentMixin",
    "Rule",
    "In",
    "NotIn",
    "EnumRule",
    "Password",
    "ConditionalRule",
    "RequiredIf",
    "ProhibitedIf",
    "ExcludeIf",
    "SchemaRule",
    "When",
    "synthetic_rule_name",
]
