"""
Validation message resolution.

Resolves the human-readable message for one (field, rule) pair. The first
source that yields a message wins:

    1. custom message ``field.rule`` declared by the class (also accepted in
       the host's lower-camel spelling, ``field.requiredIf``, and as a bare
       ``rule`` key applying to every field)
    2. custom message registered under an alias of the rule (``in``/``enum``)
    3. catalog template: ``custom.field.rule`` first, then ``rule``; size
       rules pick the numeric/array/file/string variant for the field
    4. list templates (a mapping of candidate messages, e.g. password
       checks): the entry keyed by the rule, then the first entry, then a
       synthesized "The {field} field validation failed."
    5. placeholder substitution (``:attribute``, ``:min``, ``:other`` ...)
       and display-name substitution for the raw field token

Cross-field rules (``required_if`` and friends) name another field. Inside
a wildcard context that name is relative: ``sibling`` declared on
``parent.*.field`` means ``parent.*.sibling``. The other-field parameter is
normalized before templating so ``:other`` and ``:value`` are filled in.

Example:
    service = MessageResolutionService(YamlMessageCatalog())
    service.resolve("age", "min", ["18"], rules=["integer", "min:18"])
    # "The age field must be at least 18."
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ...exceptions import MessageResolutionError
from ..categories import (
    CONDITIONAL_FIELD_RULES,
    NUMERIC_RULES,
    SIZE_RULES,
    canonical_rule_name,
    lcfirst_camel,
)
from ..models import RuleEntry
from ..type_inference import FILE_TYPE_RULES
from .catalog import MessageSource

logger = logging.getLogger(__name__)

RULE_ALIASES: dict[str, tuple[str, ...]] = {
    "in": ("enum",),
    "enum": ("in",),
}

_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")

# Rules whose :values placeholder lists every parameter
_VALUES_RULES = frozenset(
    {
        "in",
        "not_in",
        "mimes",
        "mimetypes",
        "extensions",
        "starts_with",
        "ends_with",
        "doesnt_start_with",
        "doesnt_end_with",
        "required_array_keys",
    }
)

# Rules whose :values placeholder lists other fields
_FIELD_LIST_RULES = frozenset(
    {
        "required_with",
        "required_with_all",
        "required_without",
        "required_without_all",
        "present_with",
        "present_with_all",
        "missing_with",
        "missing_with_all",
    }
)

_DATE_RULES = frozenset({"after", "after_or_equal", "before", "before_or_equal", "date_equals"})

_DATE_KEYWORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def normalize_dependent_field(other: str, field: str) -> str:
    """
    Resolve a cross-field reference relative to the field's wildcard context.

    Examples:
        >>> normalize_dependent_field("type", "items.*.price")
        'items.*.type'
        >>> normalize_dependent_field("items.*.type", "items.*.price")
        'items.*.type'
        >>> normalize_dependent_field("type", "price")
        'type'
    """
    if "*" not in field.split(".") or "." in other:
        return other
    parent = field.rsplit(".", 1)[0]
    return f"{parent}.{other}"


def display_attribute(field: str) -> str:
    """Default display name of a field: snake_cased, underscores as spaces."""
    return _SNAKE_BOUNDARY.sub(r"_\1", field).lower().replace("_", " ")


def size_rule_variant(rule_names: Iterable[str], is_numeric_field: bool = False) -> str:
    """Pick the message variant of a size rule for a field's rule set."""
    names = set(rule_names)
    if is_numeric_field or names & NUMERIC_RULES:
        return "numeric"
    if names & {"array", "list"}:
        return "array"
    if names & FILE_TYPE_RULES:
        return "file"
    return "string"


class MessageResolutionService:
    """
    Resolves validation messages against custom messages and a MessageSource.

    The service is stateful in the same way a validator is: with_context()
    supplies the field, rule and surrounding data, resolve_message() uses
    them. resolve() does both in one call.
    """

    def __init__(
        self,
        source: MessageSource | None = None,
        custom_messages: Mapping[str, str] | None = None,
        custom_attributes: Mapping[str, str] | None = None,
    ):
        self.source = source
        self.custom_messages: dict[str, str] = dict(custom_messages or {})
        self.custom_attributes: dict[str, str] = dict(custom_attributes or {})
        self._field: str | None = None
        self._rule: str | None = None
        self._parameters: list[Any] = []
        self._is_numeric_field = False
        self._rule_names: list[str] = []

    def with_context(
        self,
        field: str,
        rule: str,
        parameters: Sequence[Any] = (),
        is_numeric_field: bool = False,
        rules: Iterable[str | RuleEntry] = (),
    ) -> MessageResolutionService:
        """
        Set the field and rule to resolve.

        Args:
            field: Field path
            rule: Rule name (any spelling; folded to snake_case)
            parameters: Rule parameters
            is_numeric_field: Field is numeric (selects numeric size variants)
            rules: Every rule of the field, as entries or rule strings

        Returns:
            self, for chaining into resolve_message()
        """
        self._field = field
        self._rule = canonical_rule_name(rule) if rule else rule
        self._parameters = list(parameters)
        self._is_numeric_field = is_numeric_field
        self._rule_names = [
            r.name if isinstance(r, RuleEntry) else RuleEntry.parse(r).name for r in rules
        ]
        return self

    def resolve(
        self,
        field: str,
        rule: str,
        parameters: Sequence[Any] = (),
        is_numeric_field: bool = False,
        rules: Iterable[str | RuleEntry] = (),
    ) -> str:
        """Resolve a message in one call. See with_context() for the arguments."""
        return self.with_context(field, rule, parameters, is_numeric_field, rules).resolve_message()

    def resolve_message(self) -> str:
        """
        Resolve the message for the current context.

        Returns:
            Resolved message with placeholders substituted

        Raises:
            MessageResolutionError: If the field, rule or message source is unset
        """
        if not self._field:
            raise MessageResolutionError("field", rule=self._rule)
        if not self._rule:
            raise MessageResolutionError("rule", field=self._field)
        if self.source is None:
            raise MessageResolutionError("message source", field=self._field, rule=self._rule)

        field, rule = self._field, self._rule
        parameters = self._normalized_parameters(field, rule, self._parameters)

        custom = self.find_custom_message(field, rule)
        if custom is not None:
            return self.make_replacements(custom, field, rule, parameters)

        message = self._template_message(field, rule)
        message = self.make_replacements(message, field, rule, parameters)

        return self.replace_raw_field_token(message, field)

    def replace_raw_field_token(self, message: str, field: str) -> str:
        """
        Swap a raw field token (``first_name``) left in a message for its display name.

        Plain lowercase words are left alone; they are indistinguishable from
        ordinary message text.
        """
        display = self.get_display_attribute(field)
        if display == field or not re.search(r"[_A-Z]", field):
            return message
        pattern = re.compile(rf"(?<![\w.*]){re.escape(field)}(?![\w*])")
        return pattern.sub(lambda _: display, message)

    def find_custom_message(self, field: str, rule: str) -> str | None:
        """Custom message for the rule or one of its aliases, if declared."""
        for candidate in (rule, *RULE_ALIASES.get(rule, ())):
            for key in self._custom_keys(field, candidate):
                if key in self.custom_messages:
                    return self.custom_messages[key]
        return None

    @staticmethod
    def _custom_keys(field: str, rule: str) -> list[str]:
        keys = [f"{field}.{rule}", f"{field}.{lcfirst_camel(rule)}"]
        keys.append(rule)
        return list(dict.fromkeys(keys))

    def _template_message(self, field: str, rule: str) -> str:
        assert self.source is not None
        template = self.source.get(f"custom.{field}.{rule}")
        if template is None:
            template = self.source.get(rule)

        if isinstance(template, dict) and rule in SIZE_RULES:
            variant = size_rule_variant(self._rule_names, self._is_numeric_field)
            selected = template.get(variant)
            if isinstance(selected, str):
                return selected

        if isinstance(template, dict):
            return self._select_from_list(template, field, rule)
        if isinstance(template, str):
            return template

        logger.debug(f"No message template for rule '{rule}' on field '{field}'")
        return f"The {field} field validation failed."

    @staticmethod
    def _select_from_list(candidates: Mapping[str, Any], field: str, rule: str) -> str:
        suffix = rule.rsplit(".", 1)[-1]
        for key in (rule, suffix):
            if isinstance(candidates.get(key), str):
                return candidates[key]
        first = next((v for v in candidates.values() if isinstance(v, str) and v), None)
        return first or f"The {field} field validation failed."

    @staticmethod
    def _normalized_parameters(field: str, rule: str, parameters: list[Any]) -> list[Any]:
        if rule in CONDITIONAL_FIELD_RULES and parameters:
            return [normalize_dependent_field(str(parameters[0]), field), *parameters[1:]]
        return parameters

    def get_display_attribute(self, field: str) -> str:
        """Display name of a field: custom attribute, then catalog attribute, then derived."""
        if field in self.custom_attributes:
            return self.custom_attributes[field]
        if self.source is not None:
            named = self.source.get(f"attributes.{field}")
            if isinstance(named, str):
                return named
        return display_attribute(field)

    def get_display_value(self, field: str, value: Any) -> str:
        """Display form of a value compared against ``field``."""
        if self.source is not None:
            named = self.source.get(f"values.{field}.{value}")
            if isinstance(named, str):
                return named
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "empty"
        return str(value)

    def make_replacements(
        self, message: str, field: str, rule: str, parameters: Sequence[Any]
    ) -> str:
        """Substitute ``:attribute`` and the rule-specific placeholders."""
        attribute = self.get_display_attribute(field)
        replacements = self._rule_replacements(field, rule, [str(p) for p in parameters])

        # Longest placeholders first so ":values" is not eaten by ":value"
        for token in sorted(replacements, key=len, reverse=True):
            message = message.replace(f":{token}", replacements[token])

        message = message.replace(":attribute", attribute)
        message = message.replace(":Attribute", attribute[:1].upper() + attribute[1:])
        message = message.replace(":ATTRIBUTE", attribute.upper())
        return message

    def _rule_replacements(self, field: str, rule: str, params: list[str]) -> dict[str, str]:
        first = params[0] if params else ""

        if rule in ("between", "digits_between"):
            return {"min": first, "max": params[1] if len(params) > 1 else ""}
        if rule in ("min", "min_digits"):
            return {"min": first}
        if rule in ("max", "max_digits"):
            return {"max": first}
        if rule == "size":
            return {"size": first}
        if rule == "digits":
            return {"digits": first}
        if rule == "decimal":
            return {"decimal": "-".join(params)}
        if rule == "date_format":
            return {"format": first}
        if rule in ("gt", "gte", "lt", "lte", "multiple_of"):
            return {"value": first}
        if rule in ("same", "different", "in_array", "prohibits"):
            return {"other": ", ".join(self.get_display_attribute(p) for p in params)}
        if rule in _DATE_RULES:
            date = first if _looks_like_date_literal(first) else self.get_display_attribute(first)
            return {"date": date}
        if rule in ("in", "not_in"):
            return {"values": ", ".join(self.get_display_value(field, p) for p in params)}
        if rule in _VALUES_RULES:
            return {"values": ", ".join(params)}
        if rule in _FIELD_LIST_RULES:
            return {"values": " / ".join(self.get_display_attribute(p) for p in params)}
        if rule in CONDITIONAL_FIELD_RULES:
            other = self.get_display_attribute(first)
            rest = params[1:]
            values = ", ".join(self.get_display_value(first, v) for v in rest)
            value = self.get_display_value(first, rest[0]) if rest else "empty"
            return {"other": other, "value": value, "values": values}
        if rule in ("required_if_accepted", "required_if_declined"):
            return {"other": self.get_display_attribute(first)}
        return {}


def _looks_like_date_literal(value: str) -> bool:
    return value.lower() in _DATE_KEYWORDS or bool(re.match(r"^[+-]?\d", value))


__all__ = [
    "MessageResolutionService",
    "RULE_ALIASES",
    "normalize_dependent_field",
    "display_attribute",
    "size_rule_variant",
]
