"""
Inherited validation propagation.

A field may declare that it takes its rules from a field of another class
(InheritValidationFrom). Before grouping, DataClassRuleProcessor expands
those declarations into the target class's own rule map:

- the source field's rules are merged into the target field's rules
- rules below the source field (``src.*``, ``src.x``) are copied below
  the target field
- the source field's fragment is copied unless the target declares one
- a typed collection whose fragment only appends gets a base
  ``z.array(<ItemSchema>)`` to append to

Expansion is recursive (a source may inherit from a third class) and
cycle-safe: a class that is re-entered while it is being resolved sees
its raw rules. Results are cached for the lifetime of the processor,
which is one compilation run.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import InheritanceResolutionError
from .models import FragmentMode, SchemaFragment, SchemaSource
from .naming import SchemaNameGenerator
from .normalizer import split_rule_string

logger = logging.getLogger(__name__)


@dataclass
class ProcessedRules:
    """Rule map and field fragments of a class after inheritance expansion."""

    rules: dict[str, Any] = field(default_factory=dict)
    fragments: dict[str, SchemaFragment] = field(default_factory=dict)


def as_rule_list(value: Any) -> list[Any]:
    """Rule value as a list of items (pipe strings are split into segments)."""
    if value is None:
        return []
    if isinstance(value, str):
        return split_rule_string(value)
    if isinstance(value, list | tuple):
        items: list[Any] = []
        for item in value:
            items.extend(split_rule_string(item) if isinstance(item, str) else [item])
        return items
    return [value]


def merge_rule_sets(existing: Any, incoming: Any) -> list[Any]:
    """
    Merge two rule values.

    String rules already present (by exact text) are skipped; rule objects
    are always appended.
    """
    merged = as_rule_list(existing)
    for rule in as_rule_list(incoming):
        if isinstance(rule, str) and rule in merged:
            continue
        merged.append(rule)
    return merged


class DataClassRuleProcessor:
    """
    Expands InheritValidationFrom declarations for one compilation run.

    Example:
        processor = DataClassRuleProcessor(sources, names)
        processed = processor.process("ProfileData")
        processed.rules["email"]  # own rules merged with UserData.email
    """

    def __init__(self, sources: Mapping[str, SchemaSource], names: SchemaNameGenerator):
        self.sources = sources
        self.names = names
        self._cache: dict[str, ProcessedRules] = {}
        self._resolving: set[str] = set()
        self._lock = threading.Lock()

    def process(self, class_name: str) -> ProcessedRules:
        """
        Rules of a class with every inheritance declaration expanded.

        Args:
            class_name: Class to process (must be one of the run's sources)

        Returns:
            A fresh deep copy of the processed rules

        Raises:
            InheritanceResolutionError: A declaration names a class outside the run,
                or a field the source class does not declare
        """
        with self._lock:
            cached = self._cache.get(class_name)
            if cached is not None:
                return copy.deepcopy(cached)
            if class_name in self._resolving:
                logger.debug(f"Inheritance cycle through {class_name}; using its own rules")
                return self._own_rules(self.sources[class_name])
            self._resolving.add(class_name)

        try:
            processed = self._expand(self.sources[class_name])
        finally:
            with self._lock:
                self._resolving.discard(class_name)

        with self._lock:
            self._cache[class_name] = processed
        return copy.deepcopy(processed)

    def _expand(self, source: SchemaSource) -> ProcessedRules:
        processed = self._own_rules(source)

        for target_field, declaration in source.inheritance.items():
            origin = self.sources.get(declaration.source_class)
            if origin is None:
                raise InheritanceResolutionError(
                    source.class_name,
                    target_field,
                    declaration.source_class,
                    "source class is not part of this generation run",
                )

            source_field = declaration.source_field or target_field
            inherited = self.process(origin.class_name)
            if source_field not in inherited.rules and not any(
                key.startswith(f"{source_field}.") for key in inherited.rules
            ):
                raise InheritanceResolutionError(
                    source.class_name,
                    target_field,
                    declaration.source_class,
                    f"'{declaration.source_class}' declares no rules for '{source_field}'",
                )

            self.merge_field(processed, target_field, inherited, source_field)
            self.copy_fragment(processed, source, target_field, inherited, source_field)
            logger.debug(
                f"{source.class_name}.{target_field}: inherited rules from "
                f"{declaration.source_class}.{source_field}"
            )

        return processed

    @staticmethod
    def _own_rules(source: SchemaSource) -> ProcessedRules:
        return ProcessedRules(
            rules=copy.deepcopy(source.rules),
            fragments=dict(source.fragments),
        )

    def merge_field(
        self,
        target: ProcessedRules,
        target_field: str,
        inherited: ProcessedRules,
        source_field: str,
    ) -> None:
        """Merge the source field and its sub-paths into the target field."""
        prefix = f"{source_field}."
        for key, rules in inherited.rules.items():
            if key == source_field:
                new_key = target_field
            elif key.startswith(prefix):
                new_key = f"{target_field}.{key[len(prefix):]}"
            else:
                continue
            target.rules[new_key] = merge_rule_sets(target.rules.get(new_key), rules)

    def copy_fragment(
        self,
        target: ProcessedRules,
        source: SchemaSource,
        target_field: str,
        inherited: ProcessedRules,
        source_field: str,
    ) -> None:
        """Copy the source field's fragment, then give collection appends a base."""
        if target_field not in target.fragments and source_field in inherited.fragments:
            target.fragments[target_field] = inherited.fragments[source_field]

        fragment = target.fragments.get(target_field)
        meta = source.metadata.get(target_field)
        if (
            fragment is not None
            and fragment.mode is FragmentMode.APPEND
            and meta is not None
            and meta.is_collection
            and meta.element_class
        ):
            schema_name = self.names.generate(meta.element_class)
            target.fragments[target_field] = SchemaFragment.replace(
                f"z.array({schema_name}){fragment.code}"
            )


__all__ = ["DataClassRuleProcessor", "ProcessedRules", "merge_rule_sets", "as_rule_list"]
