"""
Semantic type inference.

The inferred type of a field decides which builder compiles it. Inference
walks a fixed precedence table and returns the first category present in
the field's rules, so a field declared ``integer|string`` is a number and a
field declared ``boolean|in:0,1`` is a boolean.

Precedence (highest first):
    boolean      boolean, bool
    number       the host's numeric rules plus digit-count rules
    array        array, list
    email        email
    url          url
    uuid         uuid
    string       json
    password     password
    string       date rules
    file         file and image rules
    enum:<vals>  in with at least one value
    array        field path ending in ``.*``
    string       fallback
"""

from __future__ import annotations

from collections.abc import Iterable

from .categories import NUMERIC_RULES
from .models import RuleEntry
from .normalizer import NormalizedRules

BOOLEAN_TYPE_RULES: frozenset[str] = frozenset({"boolean", "bool"})
DIGIT_RULES: frozenset[str] = frozenset({"digits", "digits_between", "min_digits", "max_digits"})
NUMBER_TYPE_RULES: frozenset[str] = NUMERIC_RULES | DIGIT_RULES
ARRAY_TYPE_RULES: frozenset[str] = frozenset({"array", "list"})
DATE_TYPE_RULES: frozenset[str] = frozenset(
    {"date", "date_format", "date_equals", "before", "before_or_equal", "after", "after_or_equal"}
)
FILE_TYPE_RULES: frozenset[str] = frozenset(
    {"file", "image", "mimes", "mimetypes", "extensions", "dimensions"}
)
NULLABLE_RULES: frozenset[str] = frozenset({"nullable"})

# (rules, type) checked in order; first hit wins
TYPE_PRECEDENCE: tuple[tuple[frozenset[str], str], ...] = (
    (BOOLEAN_TYPE_RULES, "boolean"),
    (NUMBER_TYPE_RULES, "number"),
    (ARRAY_TYPE_RULES, "array"),
    (frozenset({"email"}), "email"),
    (frozenset({"url"}), "url"),
    (frozenset({"uuid"}), "uuid"),
    (frozenset({"json"}), "string"),
    (frozenset({"password"}), "password"),
    (DATE_TYPE_RULES, "string"),
    (FILE_TYPE_RULES, "file"),
)

RuleInput = NormalizedRules | Iterable[RuleEntry]


def _entries(rules: RuleInput) -> list[RuleEntry]:
    if isinstance(rules, NormalizedRules):
        return rules.entries
    return list(rules)


class TypeInferenceService:
    """Pure, deterministic type inference over normalized rules."""

    def infer_type(self, rules: RuleInput, field_name: str | None = None) -> str:
        """
        Infer the semantic type of a field.

        Args:
            rules: Normalized rules of the field
            field_name: Field path, used to detect a trailing wildcard

        Returns:
            Type name, or ``enum:<comma-joined values>`` for one-of rules
        """
        entries = _entries(rules)
        names = {entry.name for entry in entries}

        for category, inferred in TYPE_PRECEDENCE:
            if names & category:
                return inferred

        in_rule = next((e for e in entries if e.name == "in"), None)
        if in_rule is not None and in_rule.parameters:
            return "enum:" + ",".join(str(p) for p in in_rule.parameters)

        if field_name is not None and field_name.endswith(".*"):
            return "array"

        return "string"

    def is_numeric_field(self, rules: RuleInput) -> bool:
        """Whether the host would treat the field as numeric for size-rule messages."""
        return any(entry.name in NUMERIC_RULES for entry in _entries(rules))

    def infer_nullability(self, rules: RuleInput) -> bool:
        return any(entry.name in NULLABLE_RULES for entry in _entries(rules))

    def is_enum_type(self, inferred_type: str) -> bool:
        return inferred_type.startswith("enum:")

    def enum_values(self, inferred_type: str) -> list[str]:
        """Values encoded in an ``enum:`` type."""
        if not self.is_enum_type(inferred_type):
            return []
        raw = inferred_type[len("enum:") :]
        return [value for value in raw.split(",") if value != ""]


__all__ = [
    "TypeInferenceService",
    "TYPE_PRECEDENCE",
    "NUMBER_TYPE_RULES",
    "DIGIT_RULES",
    "DATE_TYPE_RULES",
    "FILE_TYPE_RULES",
]
