"""
Validation tree construction.

Converts the RuleGroup trees produced by the grouper into typed
ResolvedValidationSet trees:

- a group holding ``*`` is an array; the ``*`` group describes its items
- a group flagged as a nested object becomes an ``object`` node whose
  object_properties hold one child node per property
- any other group with children is an array of objects (the children are
  properties of the item object)

Field names follow the data path: the item node of ``items`` is
``items.*`` and its properties are ``items.*.name``, which is also the key
custom messages use.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .grouper import WILDCARD, RuleGroup
from .models import FieldMetadata, ResolvedValidationSet
from .validation_resolver import ValidationResolver

logger = logging.getLogger(__name__)

DEFAULT_ARRAY_RULES = "array"


class NestedValidationBuilder:
    """Builds resolved validation trees from grouped rules."""

    def __init__(self, resolver: ValidationResolver):
        self.resolver = resolver

    def build_nested_validations(
        self,
        grouped: Mapping[str, RuleGroup],
        metadata: Mapping[str, FieldMetadata] | None = None,
    ) -> dict[str, ResolvedValidationSet]:
        """
        Build one tree per top-level field.

        Args:
            grouped: Top-level field -> RuleGroup, from the grouper
            metadata: Field metadata, consulted for typed references

        Returns:
            Top-level field -> resolved tree, in grouped order
        """
        metadata = metadata or {}
        return {
            name: self.build_from_metadata(name, group, metadata)
            for name, group in grouped.items()
        }

    def build_from_metadata(
        self, field: str, group: RuleGroup, metadata: Mapping[str, FieldMetadata]
    ) -> ResolvedValidationSet:
        """
        Build a field, letting metadata turn rule-less typed fields into references.

        A field declared as a typed collection (or typed nested object) with no
        rules of its own below it compiles to a reference to the other class's
        schema instead of an inline shape.
        """
        meta = metadata.get(field)
        if meta is not None and group.is_leaf():
            if meta.is_collection and meta.element_class:
                node = self.resolver.resolve(field, group.rules or DEFAULT_ARRAY_RULES)
                return node.model_copy(
                    update={"inferred_type": f"DataCollection:{meta.element_class}"}
                )
            if meta.is_nested_object and meta.nested_class:
                node = self.resolver.resolve(field, group.rules or "")
                return node.model_copy(
                    update={"inferred_type": f"DataObject:{meta.nested_class}"}
                )
        return self.build_node(field, group)

    def build_node(self, path: str, group: RuleGroup) -> ResolvedValidationSet:
        """Build the node for ``path`` and everything below it."""
        if group.is_leaf():
            return self.resolver.resolve(path, group.rules or "")
        if group.is_array_container() or not group.is_nested_object:
            return self.build_array_validation(path, group)
        return self.build_nested_object_structure(path, group)

    def build_array_validation(self, path: str, group: RuleGroup) -> ResolvedValidationSet:
        """Array node; rules default to ``array`` when only implied by item paths."""
        base = self.resolver.resolve(path, group.rules or DEFAULT_ARRAY_RULES)
        item = self.build_item(f"{path}.{WILDCARD}", group)
        return base.model_copy(
            update={"inferred_type": "array", "nested_validations": item}
        )

    def build_item(self, item_path: str, group: RuleGroup) -> ResolvedValidationSet:
        """
        Item node of an array group.

        Scalar item rules live under ``*``; any other children are properties
        of an item object, which then takes the ``*`` rules as its own.
        """
        scalar = group.nested.get(WILDCARD)
        properties = {k: v for k, v in group.nested.items() if k != WILDCARD}

        if not properties:
            if scalar is None:
                return self.resolver.resolve(item_path, "", is_item=True)
            if scalar.is_leaf():
                return self.resolver.resolve(item_path, scalar.rules or "", is_item=True)
            return self.build_node(item_path, scalar)

        item_rules = scalar.rules if scalar is not None else None
        base = self.resolver.resolve(item_path, item_rules or "", is_item=True)
        return base.model_copy(
            update={
                "inferred_type": "object",
                "object_properties": self._build_properties(item_path, properties),
            }
        )

    def build_nested_object_structure(
        self, path: str, group: RuleGroup
    ) -> ResolvedValidationSet:
        """Object node with one child per nested property."""
        base = self.resolver.resolve(path, group.rules or "")
        return base.model_copy(
            update={
                "inferred_type": "object",
                "object_properties": self._build_properties(path, group.nested),
            }
        )

    def process_nested_property(
        self, parent_path: str, name: str, group: RuleGroup
    ) -> ResolvedValidationSet:
        return self.build_node(f"{parent_path}.{name}", group)

    def _build_properties(
        self, parent_path: str, nested: Mapping[str, RuleGroup]
    ) -> dict[str, ResolvedValidationSet]:
        properties: dict[str, ResolvedValidationSet] = {}
        for name, child in nested.items():
            if "." in name:
                logger.debug(
                    f"Flat dotted property '{parent_path}.{name}' is not a nested "
                    f"object; it has no place in the generated shape"
                )
            properties[name] = self.process_nested_property(parent_path, name, child)
        return properties


__all__ = ["NestedValidationBuilder", "DEFAULT_ARRAY_RULES"]
