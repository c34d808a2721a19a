"""Laravel validation rule categories.

The host validator classifies its own rules into families (numeric rules,
file rules, size rules, implicit rules) and several compilation decisions
depend on that classification. The tables below are a pinned copy of those
families for the Laravel release named in LARAVEL_RULES_VERSION. The test
suite asserts the exact table contents so any edit is deliberate.

Rule names throughout the compiler use the host's snake_case spelling
(``digits_between``, ``required_if``). Studly spellings coming from rule
objects (``RequiredIf``) are folded by canonical_rule_name().
"""

from __future__ import annotations

import re

LARAVEL_RULES_VERSION = "11.x"

# Validator::$numericRules
NUMERIC_RULES: frozenset[str] = frozenset({"decimal", "numeric", "integer"})

# Validator::$fileRules
FILE_RULES: frozenset[str] = frozenset(
    {
        "between",
        "dimensions",
        "extensions",
        "file",
        "image",
        "max",
        "mimes",
        "mimetypes",
        "min",
        "size",
    }
)

# Validator::$sizeRules
SIZE_RULES: frozenset[str] = frozenset({"size", "between", "min", "max", "gt", "lt", "gte", "lte"})

# Validator::$implicitRules
IMPLICIT_RULES: frozenset[str] = frozenset(
    {
        "accepted",
        "accepted_if",
        "declined",
        "declined_if",
        "filled",
        "missing",
        "missing_if",
        "missing_unless",
        "missing_with",
        "missing_with_all",
        "present",
        "present_if",
        "present_unless",
        "present_with",
        "present_with_all",
        "required",
        "required_if",
        "required_if_accepted",
        "required_if_declined",
        "required_unless",
        "required_with",
        "required_with_all",
        "required_without",
        "required_without_all",
    }
)

# Validator::$dependentRules (first parameter names another field)
DEPENDENT_RULES: frozenset[str] = frozenset(
    {
        "after",
        "after_or_equal",
        "before",
        "before_or_equal",
        "confirmed",
        "different",
        "exclude_if",
        "exclude_unless",
        "exclude_with",
        "exclude_without",
        "gt",
        "gte",
        "lt",
        "lte",
        "accepted_if",
        "declined_if",
        "required_if",
        "required_if_accepted",
        "required_if_declined",
        "required_unless",
        "required_with",
        "required_with_all",
        "required_without",
        "required_without_all",
        "present_if",
        "present_unless",
        "present_with",
        "present_with_all",
        "prohibited",
        "prohibited_if",
        "prohibited_unless",
        "prohibits",
        "missing_if",
        "missing_unless",
        "missing_with",
        "missing_with_all",
        "same",
        "unique",
    }
)

# Rules that only describe presence; compiled structurally, never as chain calls
META_RULES: frozenset[str] = frozenset({"required", "nullable", "optional", "sometimes", "bail"})

# Rules that mark a field as required for the purpose of ResolvedValidation.is_required
REQUIRED_RULES: frozenset[str] = frozenset({"required", "present"})

# Rules whose other-field parameter is path-normalized before message templating
CONDITIONAL_FIELD_RULES: frozenset[str] = frozenset(
    {
        "required_if",
        "required_unless",
        "accepted_if",
        "declined_if",
        "prohibited_if",
        "prohibited_unless",
        "missing_if",
        "missing_unless",
        "present_if",
        "present_unless",
        "exclude_if",
        "exclude_unless",
    }
)

# Rules compiled into the enclosing object's superRefine instead of a field chain
CROSS_FIELD_RULES: frozenset[str] = frozenset(
    {
        "required_if",
        "accepted_if",
        "declined_if",
        "confirmed",
        "same",
        "different",
        "after",
        "after_or_equal",
        "before",
        "before_or_equal",
        "date_equals",
    }
)

# Rules whose single parameter must not be split on commas
UNSPLIT_PARAMETER_RULES: frozenset[str] = frozenset({"regex", "not_regex"})

RULE_ALIASES: dict[str, str] = {
    "int": "integer",
    "bool": "boolean",
}

_STUDLY_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def canonical_rule_name(name: str) -> str:
    """
    Fold a rule name to the host's snake_case spelling.

    Examples:
        >>> canonical_rule_name("RequiredIf")
        'required_if'
        >>> canonical_rule_name("digitsBetween")
        'digits_between'
        >>> canonical_rule_name("int")
        'integer'
        >>> canonical_rule_name("password.letters")
        'password.letters'
    """
    name = name.strip()
    snake = _STUDLY_BOUNDARY.sub(r"_\1", name).lower()
    return RULE_ALIASES.get(snake, snake)


def lcfirst_camel(name: str) -> str:
    """Return the lower-camel spelling of a snake_case rule name (``required_if`` -> ``requiredIf``)."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


__all__ = [
    "LARAVEL_RULES_VERSION",
    "NUMERIC_RULES",
    "FILE_RULES",
    "SIZE_RULES",
    "IMPLICIT_RULES",
    "DEPENDENT_RULES",
    "META_RULES",
    "REQUIRED_RULES",
    "CONDITIONAL_FIELD_RULES",
    "CROSS_FIELD_RULES",
    "UNSPLIT_PARAMETER_RULES",
    "RULE_ALIASES",
    "canonical_rule_name",
    "lcfirst_camel",
]
