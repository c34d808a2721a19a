"""
Validation message catalogs.

The message resolver only needs one capability from the host validation
engine: look up a message template by dotted key (``required``,
``min.numeric``, ``custom.email.required``, ``attributes.email``). That
capability is the MessageSource protocol.

YamlMessageCatalog implements it with YAML files shaped like the host's
language files. The package ships ``locales/en.yml``; projects can layer
their own files on top (a directory containing ``<locale>.yml`` or single
YAML files), and a fallback locale is consulted for keys the primary
locale does not define.

Example:
    catalog = YamlMessageCatalog(locale="nl", fallback_locale="en",
                                 extra_paths=["lang/validation"])
    catalog.get("min.numeric")  # "The :attribute field must be at least :min."
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BUILT_IN_LOCALES = Path(__file__).parent / "locales"

MessageTemplate = str | dict[str, Any]


@runtime_checkable
class MessageSource(Protocol):
    """Lookup of message templates by dotted key."""

    def get(self, key: str) -> MessageTemplate | None:
        """Return the template (or mapping of templates) stored under ``key``."""
        ...


def lookup_dotted(messages: Mapping[str, Any], key: str) -> Any:
    """
    Resolve a dotted key against nested mappings.

    A literal key containing dots (``custom: {"items.*.name": {...}}``) is
    tried before descending, so field paths can be used as keys.
    """
    if key in messages:
        return messages[key]

    head, sep, rest = key.partition(".")
    while sep:
        node = messages.get(head)
        if isinstance(node, Mapping):
            found = lookup_dotted(node, rest)
            if found is not None:
                return found
        next_head, sep, rest = rest.partition(".")
        head = f"{head}.{next_head}"
    return None


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested mappings merge recursively."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def load_message_file(path: Path) -> dict[str, Any]:
    """
    Load one YAML message file.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise ConfigurationError(str(path), str(e))

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(str(path), "message file must contain a YAML mapping")
    return raw


class YamlMessageCatalog:
    """MessageSource backed by YAML language files."""

    def __init__(
        self,
        locale: str = "en",
        fallback_locale: str | None = "en",
        extra_paths: Iterable[str | Path] | None = None,
    ):
        """
        Initialize catalog.

        Args:
            locale: Primary locale
            fallback_locale: Locale consulted when a key is missing (None disables)
            extra_paths: Directories (containing ``<locale>.yml``) or YAML files
                layered over the built-in messages, in order
        """
        self.locale = locale
        self.fallback_locale = fallback_locale if fallback_locale != locale else None
        self._extra_paths = [Path(p).expanduser() for p in extra_paths or []]
        self._messages: dict[str, dict[str, Any]] = {}

    @classmethod
    def from_mapping(
        cls, messages: Mapping[str, Any], locale: str = "en", include_defaults: bool = True
    ) -> YamlMessageCatalog:
        """Build a catalog from an in-memory mapping layered over the built-in messages."""
        catalog = cls(locale=locale, fallback_locale=None)
        base = catalog._load_locale(locale) if include_defaults else {}
        catalog._messages[locale] = deep_merge(base, messages)
        return catalog

    def messages_for(self, locale: str) -> dict[str, Any]:
        """All messages of a locale, loaded on first use."""
        if locale not in self._messages:
            self._messages[locale] = self._load_locale(locale)
        return self._messages[locale]

    def get(self, key: str) -> MessageTemplate | None:
        found = lookup_dotted(self.messages_for(self.locale), key)
        if found is None and self.fallback_locale:
            found = lookup_dotted(self.messages_for(self.fallback_locale), key)
        if found is None or isinstance(found, str | dict):
            return found
        return str(found)

    def _load_locale(self, locale: str) -> dict[str, Any]:
        messages: dict[str, Any] = {}

        built_in = BUILT_IN_LOCALES / f"{locale}.yml"
        if built_in.exists():
            messages = load_message_file(built_in)

        for path in self._extra_paths:
            candidate = path / f"{locale}.yml" if path.is_dir() else path
            if path.is_dir() and not candidate.exists():
                continue
            if not candidate.exists():
                logger.warning(f"Validation message file does not exist: {candidate}")
                continue
            logger.debug(f"Loading validation messages from: {candidate}")
            messages = deep_merge(messages, load_message_file(candidate))

        if not messages:
            logger.warning(f"No validation messages found for locale '{locale}'")
        return messages


__all__ = [
    "MessageSource",
    "MessageTemplate",
    "YamlMessageCatalog",
    "lookup_dotted",
    "deep_merge",
    "load_message_file",
    "BUILT_IN_LOCALES",
]
