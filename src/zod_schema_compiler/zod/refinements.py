"""
Cross-field refinements.

Rules relating a field to other fields (required_if, confirmed, same,
after, ...) cannot live on a single property's chain. They become branches
of one ``.superRefine((data, ctx) => {...})`` on the nearest enclosing
object: the schema's root object, or the inline object describing the
items of an array. Inside a branch ``data`` is that object, so accessors
and issue paths are relative to it.

Example:
    refinements = CrossFieldRefinements(scope="items.*.")
    blocks = refinements.collect_children(item_node)
    code = render_super_refine(blocks)
"""

from __future__ import annotations

import logging
import re

from ..engine.messages.resolver import normalize_dependent_field as resolve_wildcard_reference
from ..engine.models import ResolvedValidation, ResolvedValidationSet
from .builders import escape_js

logger = logging.getLogger(__name__)

INDENT = "    "

_IDENTIFIER_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_FIELD_PATH = re.compile(r"^[A-Za-z_][\w]*(\.[\w*]+)*$")

# Comparison that signals a violation, per date rule
DATE_VIOLATION_OPERATORS: dict[str, str] = {
    "after": "<=",
    "after_or_equal": "<",
    "before": ">=",
    "before_or_equal": ">",
    "date_equals": "!==",
}

RELATIVE_DATES: dict[str, str] = {
    "now": "Date.now()",
    "today": "(() => { const d = new Date(); d.setHours(0, 0, 0, 0); return d.getTime(); })()",
    "tomorrow": (
        "(() => { const d = new Date(); d.setHours(0, 0, 0, 0); "
        "d.setDate(d.getDate() + 1); return d.getTime(); })()"
    ),
    "yesterday": (
        "(() => { const d = new Date(); d.setHours(0, 0, 0, 0); "
        "d.setDate(d.getDate() - 1); return d.getTime(); })()"
    ),
}


def data_accessor(field: str) -> str:
    """Optional-chained accessor for a dotted path (``data.address?.city``)."""
    accessor = "data"
    for index, segment in enumerate(s for s in field.split(".") if s):
        link = "." if index == 0 else "?."
        if _IDENTIFIER_SEGMENT.match(segment):
            accessor += f"{link}{segment}"
        else:
            accessor += f"{'' if index == 0 else '?.'}['{escape_js(segment)}']"
    return accessor


def path_literal(field: str) -> str:
    """Issue path array for a dotted field (``['address', 'city']``)."""
    parts = [f"'{escape_js(s)}'" for s in field.split(".") if s]
    return "[" + ", ".join(parts) + "]"


def value_condition(dependent_accessor: str, values: list[str]) -> str:
    literals = [f"'{escape_js(v.strip())}'" for v in values]
    if len(literals) == 1:
        return f"String({dependent_accessor}) === {literals[0]}"
    return f"[{', '.join(literals)}].includes(String({dependent_accessor}))"


def empty_check(accessor: str, inferred_type: str) -> str:
    """JavaScript expression true when the value counts as absent for its type."""
    kind = inferred_type.lower()
    if kind == "array":
        return f"!Array.isArray({accessor}) || {accessor}.length === 0"
    if kind in ("number", "boolean", "object", "file"):
        return f"{accessor} === undefined || {accessor} === null"
    return (
        f"{accessor} === undefined || {accessor} === null || "
        f"String({accessor}).trim() === ''"
    )


def accepted_check(accessor: str, accepted: bool) -> str:
    words = '"yes" || normalized === "on" || normalized === "true" || normalized === "1"'
    if not accepted:
        words = '"no" || normalized === "off" || normalized === "false" || normalized === "0"'
    literal = "true" if accepted else "false"
    number = "1" if accepted else "0"
    return (
        "((val) => {"
        " if (val === undefined || val === null) { return false; }"
        ' if (typeof val === "string") {'
        " const normalized = val.toLowerCase();"
        f" if (normalized === {words}) {{ return true; }}"
        " }"
        f" return val === {literal} || val === {number};"
        f" }})({accessor})"
    )


def add_issue(message: str, path: str, depth: int = 1) -> list[str]:
    pad = INDENT * depth
    return [
        f"{pad}ctx.addIssue({{",
        f"{pad}{INDENT}code: 'custom',",
        f"{pad}{INDENT}message: '{escape_js(message)}',",
        f"{pad}{INDENT}path: {path},",
        f"{pad}}});",
    ]


def indent_block(block: str, level: int = 1) -> str:
    pad = INDENT * level
    return "\n".join(pad + line if line else line for line in block.split("\n"))


def render_super_refine(blocks: list[str]) -> str:
    """``.superRefine(...)`` running every branch, or an empty string without branches."""
    if not blocks:
        return ""
    return (
        ".superRefine((data, ctx) => {\n"
        + "\n\n".join(indent_block(block) for block in blocks)
        + "\n})"
    )


def normalize_dependent_field(dependent: str, field: str) -> str:
    """
    Resolve a dependent field written relative to the property's own path.

    ``items.0.type`` depending on ``items.0.type.kind`` keeps the shared
    parent: the result is ``items.0.kind``.
    """
    dependent = dependent.strip()
    if not dependent:
        return ""
    own = [s for s in field.split(".") if s]
    other = [s for s in dependent.split(".") if s]
    if not own or not other or len(other) <= len(own):
        return dependent
    if other[: len(own)] != own:
        return dependent
    return ".".join(own[:-1] + other[len(own) :])


def looks_like_date(value: str) -> bool:
    """A date literal rather than a field name: contains a digit and is not a field path."""
    return any(c.isdigit() for c in value) and not _FIELD_PATH.match(value)


def is_item_path(field: str) -> bool:
    """Whether a node path describes array items (``items.*``)."""
    return field.rsplit(".", 1)[-1] == "*"


class CrossFieldRefinements:
    """
    Builds the superRefine branches of one object scope.

    Attributes:
        scope: Path prefix of the object the branches run on, ending in a
            dot (``items.*.``); empty for the schema's root object
    """

    def __init__(self, scope: str = ""):
        self.scope = scope

    def collect(self, field: str, node: ResolvedValidationSet) -> list[str]:
        """
        Branches of a field and of the nested object properties below it.

        Arrays are not descended into: their item objects refine themselves.
        """
        if "*" in field:
            return []
        blocks = self.build_branches(field, node)
        if node.inferred_type == "object" and node.object_properties:
            for name, child in node.object_properties.items():
                if "." in name:
                    continue
                blocks.extend(self.collect(f"{field}.{name}", child))
        return blocks

    def collect_children(self, node: ResolvedValidationSet) -> list[str]:
        """Branches of every property of an object node, relative to that object."""
        blocks: list[str] = []
        for name, child in (node.object_properties or {}).items():
            if "." in name:
                continue
            blocks.extend(self.collect(name, child))
        return blocks

    def build_branches(self, field: str, node: ResolvedValidationSet) -> list[str]:
        """All branches contributed by the rules of one node."""
        branches: list[str | None] = []
        for validation in node.get_validations_by_type("required_if"):
            branches.append(self.build_required_if_block(validation, field, node))
        for validation in node.get_validations_by_type("accepted_if"):
            branches.append(self.build_conditional_acceptance_block(validation, field, node, True))
        for validation in node.get_validations_by_type("declined_if"):
            branches.append(self.build_conditional_acceptance_block(validation, field, node, False))

        confirmed = node.get_validation("confirmed")
        if confirmed is not None:
            branches.append(self.build_confirmed_block(confirmed, field))
        for validation in node.get_validations_by_type("same"):
            branches.append(self.build_equality_block(validation, field, node, must_match=True))
        for validation in node.get_validations_by_type("different"):
            branches.append(self.build_equality_block(validation, field, node, must_match=False))

        for rule in DATE_VIOLATION_OPERATORS:
            for validation in node.get_validations_by_type(rule):
                branches.append(self.build_date_comparison_block(validation, field, node))

        return [branch for branch in branches if branch]

    def reference(self, other: str, node: ResolvedValidationSet) -> str | None:
        """
        Path of another field relative to this scope, or None when out of reach.

        A bare sibling name inside a wildcard context refers to the sibling
        in the same item. Fields outside the scope object cannot be read
        from its refinement.
        """
        path = resolve_wildcard_reference(other.strip(), node.field_name)
        path = normalize_dependent_field(path, node.field_name)
        if not path:
            return None
        if self.scope:
            if not path.startswith(self.scope):
                logger.debug(
                    f"{node.field_name}: '{other}' lies outside {self.scope.rstrip('.')}, "
                    f"cross-field check skipped"
                )
                return None
            path = path[len(self.scope) :]
        if not path or "*" in path:
            return None
        return path

    def _conditional_parts(
        self, validation: ResolvedValidation, node: ResolvedValidationSet
    ) -> tuple[str, list[str]] | None:
        """Dependent field and expected values of a ``rule:field,v1,v2`` validation."""
        if len(validation.parameters) < 2:
            return None
        dependent = self.reference(str(validation.parameters[0]), node)
        if dependent is None:
            return None
        return dependent, [str(v) for v in validation.parameters[1:]]

    def build_required_if_block(
        self, validation: ResolvedValidation, field: str, node: ResolvedValidationSet
    ) -> str | None:
        parts = self._conditional_parts(validation, node)
        if parts is None:
            return None
        dependent, values = parts

        target = data_accessor(field)
        condition = value_condition(data_accessor(dependent), values)
        emptiness = empty_check(target, node.inferred_type)
        message = validation.message or "This field is required."
        return "\n".join(
            [f"if ({condition} && ({emptiness})) {{"]
            + add_issue(message, path_literal(field))
            + ["}"]
        )

    def build_conditional_acceptance_block(
        self,
        validation: ResolvedValidation,
        field: str,
        node: ResolvedValidationSet,
        accepted: bool,
    ) -> str | None:
        parts = self._conditional_parts(validation, node)
        if parts is None:
            return None
        dependent, values = parts

        condition = value_condition(data_accessor(dependent), values)
        check = accepted_check(data_accessor(field), accepted)
        default = "This field must be accepted." if accepted else "This field must be declined."
        return "\n".join(
            [f"if ({condition} && !({check})) {{"]
            + add_issue(validation.message or default, path_literal(field))
            + ["}"]
        )

    def build_confirmed_block(self, validation: ResolvedValidation, field: str) -> str:
        message = validation.message or "The confirmation does not match."
        path = path_literal(field)
        return "\n".join(
            [
                "{",
                f"{INDENT}const confirmationValue = {data_accessor(field + '_confirmation')};",
                f"{INDENT}const currentValue = {data_accessor(field)};",
                f"{INDENT}if (confirmationValue === undefined || confirmationValue === null) {{",
            ]
            + add_issue(message, path, depth=2)
            + [f"{INDENT}}} else if (String(currentValue ?? '') !== String(confirmationValue ?? '')) {{"]
            + add_issue(message, path, depth=2)
            + [f"{INDENT}}}", "}"]
        )

    def build_equality_block(
        self,
        validation: ResolvedValidation,
        field: str,
        node: ResolvedValidationSet,
        must_match: bool,
    ) -> str | None:
        other = str(validation.first_parameter(""))
        if not other:
            return None
        other = self.reference(other, node)
        if other is None:
            return None
        operator = "!==" if must_match else "==="
        default = "The fields must match." if must_match else "The fields must be different."
        return "\n".join(
            [
                "{",
                f"{INDENT}const currentValue = {data_accessor(field)};",
                f"{INDENT}const otherValue = {data_accessor(other)};",
                f"{INDENT}if (String(currentValue ?? '') {operator} String(otherValue ?? '')) {{",
            ]
            + add_issue(validation.message or default, path_literal(field), depth=2)
            + [f"{INDENT}}}", "}"]
        )

    def build_date_comparison_block(
        self, validation: ResolvedValidation, field: str, node: ResolvedValidationSet
    ) -> str | None:
        """
        Compare the field's date with a relative date, a date literal or another field.

        The branch runs in its own arrow function so its early returns only
        end this comparison.
        """
        reference = str(validation.first_parameter("")).strip()
        if not reference:
            return None
        comparison = self.date_reference_expression(reference, node)
        if comparison is None:
            return None

        operator = DATE_VIOLATION_OPERATORS[validation.rule]
        message = validation.message or "Invalid date comparison."
        path = path_literal(field)
        return "\n".join(
            [
                "(() => {",
                f"{INDENT}const currentRaw = {data_accessor(field)};",
                f"{INDENT}if (currentRaw === undefined || currentRaw === null || currentRaw === '') {{",
                f"{INDENT * 2}return;",
                f"{INDENT}}}",
                f"{INDENT}const valueTimestamp = Date.parse(String(currentRaw));",
                f"{INDENT}if (Number.isNaN(valueTimestamp)) {{",
            ]
            + add_issue(message, path, depth=2)
            + [
                f"{INDENT * 2}return;",
                f"{INDENT}}}",
                f"{INDENT}const referenceTimestamp = {comparison};",
                f"{INDENT}if (Number.isNaN(referenceTimestamp)) {{",
                f"{INDENT * 2}return;",
                f"{INDENT}}}",
                f"{INDENT}if ((valueTimestamp {operator} referenceTimestamp)) {{",
            ]
            + add_issue(message, path, depth=2)
            + [f"{INDENT}}}", "})();"]
        )

    def date_reference_expression(self, reference: str, node: ResolvedValidationSet) -> str | None:
        relative = RELATIVE_DATES.get(reference.lower())
        if relative is not None:
            return relative
        if looks_like_date(reference):
            return (
                f"(() => {{ const ts = Date.parse('{escape_js(reference)}'); "
                f"return Number.isNaN(ts) ? NaN : ts; }})()"
            )
        other = self.reference(reference, node)
        if other is None:
            return None
        return (
            f"(() => {{ const raw = {data_accessor(other)}; "
            "if (raw === undefined || raw === null || raw === '') { return NaN; } "
            "const ts = Date.parse(String(raw)); return Number.isNaN(ts) ? NaN : ts; })()"
        )


__all__ = [
    "CrossFieldRefinements",
    "render_super_refine",
    "is_item_path",
    "data_accessor",
    "path_literal",
    "empty_check",
    "normalize_dependent_field",
    "looks_like_date",
    "DATE_VIOLATION_OPERATORS",
    "RELATIVE_DATES",
]
