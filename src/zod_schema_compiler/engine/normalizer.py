"""
Rule normalization.

Coerces every accepted rule shape into an ordered list of RuleEntry values
plus at most one SchemaFragment:

    "required|string|max:255"                  pipe string
    ["required", "regex:/^a|b$/", In([...])]   list of strings and rule objects
    Password(min=12).numbers()                 single rule object
    Status                                     an Enum class (treated as EnumRule)

Strings inside a list are single rules and are never split on ``|``, which
is how patterns containing pipes are normally written. In a pipe string
the split happens at top level only: a pipe inside a regex literal or
inside brackets stays part of its rule.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .categories import UNSPLIT_PARAMETER_RULES, canonical_rule_name
from .models import FragmentMode, RuleEntry, SchemaFragment
from .rules import EnumRule, synthetic_rule_name

logger = logging.getLogger(__name__)

_OPENERS = {"(": ")", "[": "]", "{": "}"}


@dataclass
class NormalizedRules:
    """Normalized form of one field's rules."""

    entries: list[RuleEntry] = field(default_factory=list)
    fragment: SchemaFragment | None = None

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def has(self, name: str) -> bool:
        return any(entry.name == name for entry in self.entries)

    def get(self, name: str) -> RuleEntry | None:
        return next((entry for entry in self.entries if entry.name == name), None)

    def as_map(self) -> dict[str, tuple[Any, ...]]:
        """Rule name -> parameters of its first occurrence."""
        lookup: dict[str, tuple[Any, ...]] = {}
        for entry in self.entries:
            lookup.setdefault(entry.name, entry.parameters)
        return lookup

    def to_strings(self) -> list[str]:
        return [str(entry) for entry in self.entries]


def split_rule_string(rules: str) -> list[str]:
    """
    Split a pipe-delimited rule string at top level.

    Example:
        >>> split_rule_string("required|regex:/^(a|b)$/i|max:3")
        ['required', 'regex:/^(a|b)$/i', 'max:3']
    """
    segments: list[str] = []
    current: list[str] = []
    depth: list[str] = []
    i = 0
    length = len(rules)

    while i < length:
        char = rules[i]

        if not current and not depth:
            regex_end = _regex_segment_end(rules, i)
            if regex_end is not None:
                segments.append(rules[i:regex_end])
                i = regex_end
                # Skip the pipe that terminated the regex segment
                if i < length and rules[i] == "|":
                    i += 1
                continue

        if char == "\\" and i + 1 < length:
            current.append(rules[i : i + 2])
            i += 2
            continue
        if char in _OPENERS:
            depth.append(_OPENERS[char])
        elif depth and char == depth[-1]:
            depth.pop()
        elif char == "|" and not depth:
            segments.append("".join(current))
            current = []
            i += 1
            continue

        current.append(char)
        i += 1

    segments.append("".join(current))
    return [segment.strip() for segment in segments if segment.strip()]


def _regex_segment_end(rules: str, start: int) -> int | None:
    """
    Find where a ``regex:``/``not_regex:`` segment starting at ``start`` ends.

    The pattern is delimited (``/.../flags``, ``#...#``), so everything up to
    the closing delimiter belongs to the rule. Returns None when the segment
    is not a delimited regex rule.
    """
    head, sep, _ = rules[start:].partition(":")
    if not sep or canonical_rule_name(head) not in UNSPLIT_PARAMETER_RULES:
        return None

    pattern_start = start + len(head) + 1
    if pattern_start >= len(rules):
        return None
    delimiter = rules[pattern_start]
    if delimiter.isalnum() or delimiter in "\\ |":
        return None

    i = pattern_start + 1
    while i < len(rules):
        if rules[i] == "\\":
            i += 2
            continue
        if rules[i] == delimiter:
            i += 1
            while i < len(rules) and rules[i].isalpha():
                i += 1
            return i
        i += 1
    return len(rules)


class RuleNormalizer:
    """Normalizes heterogeneous rule values for one field at a time."""

    def normalize(self, value: Any) -> NormalizedRules:
        """
        Normalize a rule value.

        Args:
            value: Pipe string, list/tuple of rules, rule object, Enum class,
                or an already normalized value

        Returns:
            NormalizedRules with ordered entries and the winning fragment
        """
        if isinstance(value, NormalizedRules):
            return value

        result = NormalizedRules()

        if value is None:
            return result
        if isinstance(value, str):
            for segment in split_rule_string(value):
                result.entries.append(RuleEntry.parse(segment))
            return result
        if isinstance(value, list | tuple):
            for item in value:
                self._add_item(result, item)
            return result

        self._add_item(result, value)
        return result

    def _add_item(self, result: NormalizedRules, item: Any) -> None:
        if item is None or isinstance(item, bool):
            return
        if isinstance(item, RuleEntry):
            result.entries.append(item)
            return
        if isinstance(item, str):
            if item.strip():
                result.entries.append(RuleEntry.parse(item))
            return
        if isinstance(item, type) and issubclass(item, Enum):
            item = EnumRule(item)

        result.entries.extend(self._entries_for_object(item))
        fragment = self._fragment_of(item)
        if fragment is not None:
            result.fragment = self.merge_fragments(result.fragment, fragment)

    @staticmethod
    def _entries_for_object(item: Any) -> list[RuleEntry]:
        to_entries: Callable[[], list[RuleEntry]] | None = getattr(item, "to_entries", None)
        if callable(to_entries):
            return list(to_entries())

        # Foreign rule objects: use their string form when they define one
        if type(item).__str__ is not object.__str__ and not callable(item):
            rendered = str(item)
            if rendered:
                return [RuleEntry.parse(segment) for segment in split_rule_string(rendered)]

        return [RuleEntry(name=synthetic_rule_name(item))]

    @staticmethod
    def _fragment_of(item: Any) -> SchemaFragment | None:
        has_fragment = getattr(item, "has_schema_fragment", None)
        get_fragment = getattr(item, "schema_fragment", None)
        if not callable(has_fragment) or not callable(get_fragment) or not has_fragment():
            return None
        fragment = get_fragment()
        return fragment if isinstance(fragment, SchemaFragment) else None

    @staticmethod
    def merge_fragments(
        current: SchemaFragment | None, incoming: SchemaFragment
    ) -> SchemaFragment:
        """
        Combine the fragment already collected with a later one.

        The first fragment wins. Identical code is ignored; two append
        fragments with different code are concatenated.
        """
        if current is None:
            return incoming
        if current.code == incoming.code:
            return current
        if current.mode is FragmentMode.APPEND and incoming.mode is FragmentMode.APPEND:
            return SchemaFragment(code=current.code + incoming.code, mode=FragmentMode.APPEND)
        logger.warning(
            f"Ignoring {incoming.mode.value} schema fragment {incoming.code!r}: "
            f"field already has a {current.mode.value} fragment"
        )
        return current


__all__ = ["NormalizedRules", "RuleNormalizer", "split_rule_string"]
