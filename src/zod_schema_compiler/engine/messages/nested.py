"""
Custom messages across nested and inherited declarations.

A class's custom messages are keyed relative to the class itself. When the
class is used as a nested object or as the item type of a collection, the
same messages apply under a prefix (``address.city.required`` or
``items.*.name.required``). Inherited fields also inherit the messages of
their source field.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..models import SchemaSource

logger = logging.getLogger(__name__)


class NestedMessageHandler:
    """Collects prefixed and inherited custom messages for a class."""

    def __init__(self, sources: Mapping[str, SchemaSource]):
        self.sources = sources
        self._collecting: set[str] = set()

    def collect_messages(self, class_name: str, prefix: str = "") -> dict[str, str]:
        """
        Collect the messages of a class and of every nested class it references.

        Args:
            class_name: Class to collect from
            prefix: Path prefix for the collected keys

        Returns:
            Message key -> message, keys prefixed with ``prefix``
        """
        source = self.sources.get(class_name)
        if source is None or class_name in self._collecting:
            return {}

        self._collecting.add(class_name)
        try:
            messages = {self._join(prefix, key): msg for key, msg in source.messages.items()}

            for field, meta in source.metadata.items():
                if meta.is_collection and meta.element_class:
                    nested_prefix = f"{self._join(prefix, field)}.*"
                    nested_class = meta.element_class
                elif meta.is_nested_object and meta.nested_class:
                    nested_prefix = self.build_nested_prefix(prefix, field)
                    nested_class = meta.nested_class
                else:
                    continue

                if nested_class in self._collecting:
                    continue
                for key, msg in self.collect_messages(nested_class, nested_prefix).items():
                    messages.setdefault(key, msg)
        finally:
            self._collecting.discard(class_name)

        return messages

    def merge_inherited_messages(self, source: SchemaSource) -> dict[str, str]:
        """
        Messages a class inherits through its InheritValidationFrom declarations.

        A source key ``<source_field>.<rule>`` becomes ``<target_field>.<rule>``.
        Keys the class declares itself are never overwritten.
        """
        inherited: dict[str, str] = {}
        for target_field, declaration in source.inheritance.items():
            origin = self.sources.get(declaration.source_class)
            if origin is None:
                continue
            source_field = declaration.source_field or target_field
            for key, message in origin.messages.items():
                if not key.startswith(f"{source_field}."):
                    continue
                new_key = f"{target_field}.{key[len(source_field) + 1 :]}"
                if new_key not in source.messages:
                    inherited.setdefault(new_key, message)

        if inherited:
            logger.debug(f"{source.class_name}: inherited {len(inherited)} custom messages")
        return inherited

    def messages_for(self, source: SchemaSource) -> dict[str, str]:
        """Own messages, then nested-class messages, then inherited messages."""
        messages = self.collect_messages(source.class_name)
        for key, message in self.merge_inherited_messages(source).items():
            messages.setdefault(key, message)
        return messages

    @staticmethod
    def build_nested_prefix(prefix: str, field: str) -> str:
        # Inside an array context nested objects are addressed per item
        if ".*" in prefix:
            return f"{prefix}.{field}.*"
        return f"{prefix}.{field}" if prefix else field

    @staticmethod
    def _join(prefix: str, key: str) -> str:
        return f"{prefix}.{key}" if prefix else key


__all__ = ["NestedMessageHandler"]
