"""
Nested rule grouping.

Rule maps address nested data with flat dotted paths. The grouper rebuilds
the data shape from those paths so that every top-level field becomes one
RuleGroup tree.

Example:
    {
        "items": "array",
        "items.*.variations": "array",
        "items.*.variations.*.type": "required|string",
        "items.*.variations.*.size": "string",
        "items.*.pricing.*.component": "required|in:base,tax",
    }

groups into::

    items            rules="array"
      variations     rules="array"
        type         rules="required|string"
        size         rules="string"
      pricing        rules=None
        component    rules="required|in:base,tax"

Wildcard segments become array containers; ``base.*`` alone (no remainder)
is an array of scalars recorded under the ``*`` key.

Object-vs-array disambiguation for a dotted remainder (``items.*.address.city``)
follows a marker-first policy:

1. Explicit markers in the rule map mark ``x`` as a nested object:
   ``x.__is_nested_object: "true"`` or ``x.__type: "nested_object"``.
   ``x.__base_rules`` supplies the object's own rules, ``x.__nested.<p>``
   overrides the rules of property ``p``, ``x.__class`` names its class.
2. FieldMetadata with ``is_nested_object`` for ``x``.
3. Heuristic fallback, only when no metadata is supplied at all: every
   dotted remainder reads as a nested object. With metadata present and
   silent about ``x``, the remainder is kept as a flat dotted property
   name, which the compiler never emits.

The heuristic misreads a rule-array class that uses literal dotted keys for
flat properties; such classes need explicit markers or metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .models import FieldMetadata

logger = logging.getLogger(__name__)

WILDCARD = "*"

MARKER_IS_NESTED_OBJECT = "__is_nested_object"
MARKER_TYPE = "__type"
MARKER_BASE_RULES = "__base_rules"
MARKER_NESTED = "__nested"
MARKER_CLASS = "__class"

_MARKER_SEGMENTS = frozenset(
    {MARKER_IS_NESTED_OBJECT, MARKER_TYPE, MARKER_BASE_RULES, MARKER_NESTED, MARKER_CLASS}
)


@dataclass
class RuleGroup:
    """
    One node of the grouped rule tree.

    Attributes:
        rules: Raw rule value declared for this path (None when only implied
            by deeper paths)
        nested: Child groups keyed by property name, or ``*`` for array items
        is_nested_object: Node was identified as a nested object
        has_nested_rules: Set by cleanup when ``nested`` is non-empty
        class_name: Class of a nested object, when known from markers
    """

    rules: Any = None
    nested: dict[str, RuleGroup] = field(default_factory=dict)
    is_nested_object: bool = False
    has_nested_rules: bool = False
    class_name: str | None = None

    def is_leaf(self) -> bool:
        return not self.nested

    def is_array_container(self) -> bool:
        return WILDCARD in self.nested

    def child(self, name: str) -> RuleGroup:
        """Get or create a child group."""
        if name not in self.nested:
            self.nested[name] = RuleGroup()
        return self.nested[name]

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view (``{rules}`` for leaves, ``{rules, nested}`` for containers)."""
        data: dict[str, Any] = {"rules": self.rules}
        if self.nested:
            data["nested"] = {k: v.to_dict() for k, v in self.nested.items()}
        if self.is_nested_object:
            data["is_nested_object"] = True
        return data


def is_marker_path(path: str) -> bool:
    """Whether a rule-map key is a synthetic marker entry."""
    return any(segment in _MARKER_SEGMENTS for segment in path.split("."))


def get_base_field_name(path: str) -> str:
    """Top-level field of a path (``items.*.name`` -> ``items``)."""
    return path.split(".", 1)[0]


def get_nested_path(path: str) -> str:
    """Path below the top-level field (``items.*.name`` -> ``*.name``)."""
    return path.split(".", 1)[1] if "." in path else ""


def has_wildcard(path: str) -> bool:
    return WILDCARD in path.split(".")


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


class NestedRuleGrouper:
    """Groups a flat rule map into RuleGroup trees, one per top-level field."""

    def group_rules_by_base_field(self, rules: Mapping[str, Any]) -> dict[str, RuleGroup]:
        """Group rules using markers and the naming heuristic only."""
        return self.group_rules_with_metadata(rules, {})

    def group_rules_with_metadata(
        self, rules: Mapping[str, Any], metadata: Mapping[str, FieldMetadata]
    ) -> dict[str, RuleGroup]:
        """
        Group rules, treating metadata as authoritative for nested objects.

        Args:
            rules: Field path -> raw rule value (may include marker entries)
            metadata: Field path -> FieldMetadata from the extraction layer

        Returns:
            Top-level field name -> RuleGroup, in first-seen order
        """
        context = _GroupingContext(
            metadata=metadata,
            nested_objects=self.identify_nested_object_fields(rules, metadata),
        )
        root = RuleGroup()

        for path, rule_value in rules.items():
            if is_marker_path(path):
                continue
            self._insert(root, path, rule_value, "", context)

        self._apply_markers(root, rules)
        self.cleanup_grouped_rules(root.nested)
        return root.nested

    def identify_nested_object_fields(
        self, rules: Mapping[str, Any], metadata: Mapping[str, FieldMetadata]
    ) -> set[str]:
        """Paths declared as nested objects through markers or metadata."""
        nested: set[str] = set()

        for path, value in rules.items():
            base, _, marker = path.rpartition(".")
            if marker == MARKER_IS_NESTED_OBJECT and str(value).lower() == "true":
                nested.add(base)
            elif marker == MARKER_TYPE and value == "nested_object":
                nested.add(base)
            elif marker == MARKER_BASE_RULES or marker == MARKER_CLASS:
                nested.add(base)
            elif f".{MARKER_NESTED}." in f".{path}":
                nested.add(path.split(f".{MARKER_NESTED}.", 1)[0])

        for path, meta in metadata.items():
            if meta.is_nested_object:
                nested.add(path)

        return nested

    def _insert(
        self,
        container: RuleGroup,
        path: str,
        rule_value: Any,
        prefix: str,
        context: _GroupingContext,
    ) -> None:
        segments = path.split(".")

        if WILDCARD not in segments:
            node, rest = self._descend_objects(container, segments, prefix, context)
            if rest:
                node.child(".".join(rest)).rules = rule_value
            else:
                node.rules = rule_value
            return

        star = segments.index(WILDCARD)
        head, remainder = segments[:star], segments[star + 1 :]

        array_node, rest = self._descend_objects(container, head, prefix, context)
        if rest:
            # Head stops at a flat dotted name; the array lives under that name
            array_node = array_node.child(".".join(rest))
        array_path = _join(prefix, ".".join(head))
        item_prefix = _join(array_path, WILDCARD)

        if not remainder:
            array_node.child(WILDCARD).rules = rule_value
            return

        self._insert(array_node, ".".join(remainder), rule_value, item_prefix, context)

    def _descend_objects(
        self,
        container: RuleGroup,
        segments: list[str],
        prefix: str,
        context: _GroupingContext,
    ) -> tuple[RuleGroup, list[str]]:
        """
        Walk ``segments`` through nested objects.

        Returns the node for the full path, or the deepest object reached plus
        the leftover segments when a segment is not a nested object.
        """
        node = container
        path = prefix
        for index, segment in enumerate(segments):
            path = _join(path, segment)
            if index == len(segments) - 1:
                return node.child(segment), []
            if not context.is_nested_object(path):
                return node, segments[index:]
            node = node.child(segment)
            node.is_nested_object = True
        return node, []

    def _apply_markers(self, root: RuleGroup, rules: Mapping[str, Any]) -> None:
        for path, value in rules.items():
            base, _, marker = path.rpartition(".")
            if marker in (MARKER_BASE_RULES, MARKER_CLASS) and base:
                node = self._ensure(root, base)
                node.is_nested_object = True
                if marker == MARKER_CLASS:
                    node.class_name = str(value)
                elif node.rules is None:
                    node.rules = value
            elif f".{MARKER_NESTED}." in f".{path}":
                base, prop = path.split(f".{MARKER_NESTED}.", 1)
                node = self._ensure(root, base)
                node.is_nested_object = True
                node.child(prop).rules = value

    @staticmethod
    def _ensure(root: RuleGroup, path: str) -> RuleGroup:
        """
        Get or create the group for ``path``.

        A wildcard segment stays on the current group unless it holds scalar
        items, because item properties live directly in the array's nested map.
        """
        node = root
        for segment in path.split("."):
            if segment == WILDCARD and WILDCARD not in node.nested:
                continue
            node = node.child(segment)
        return node

    def cleanup_grouped_rules(self, grouped: dict[str, RuleGroup]) -> None:
        """Demote empty containers to leaves and flag containers with children."""
        for group in grouped.values():
            if group.nested:
                self.cleanup_grouped_rules(group.nested)
                group.has_nested_rules = True
            else:
                group.has_nested_rules = False

    def extract_nested_fields(self, rules: Mapping[str, Any], base_field: str) -> dict[str, Any]:
        """Rules below ``base_field``, keyed by their path relative to it."""
        prefix = f"{base_field}."
        return {
            path[len(prefix) :]: value
            for path, value in rules.items()
            if path.startswith(prefix) and not is_marker_path(path)
        }

    def is_nested_object_path(
        self,
        path: str,
        rules: Mapping[str, Any],
        metadata: Mapping[str, FieldMetadata] | None = None,
    ) -> bool:
        return path in self.identify_nested_object_fields(rules, metadata or {})

    @staticmethod
    def has_nested_rules(group: RuleGroup) -> bool:
        return bool(group.nested)


@dataclass
class _GroupingContext:
    metadata: Mapping[str, FieldMetadata]
    nested_objects: set[str]

    def is_nested_object(self, path: str) -> bool:
        """Whether a dotted path continues through ``path`` as a nested object."""
        if path in self.nested_objects:
            return True
        meta = self.metadata.get(path)
        if meta is not None:
            return meta.is_nested_object
        # Without any metadata every dotted remainder reads as an object
        return not self.metadata


__all__ = [
    "RuleGroup",
    "NestedRuleGrouper",
    "WILDCARD",
    "is_marker_path",
    "get_base_field_name",
    "get_nested_path",
    "has_wildcard",
]
