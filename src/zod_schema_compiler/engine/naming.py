"""Schema variable naming."""

from __future__ import annotations

import re
from collections.abc import Mapping

COLLECTION_PREFIX = "DataCollection:"
OBJECT_PREFIX = "DataObject:"

SCHEMA_SUFFIX = "Schema"


def class_basename(class_name: str) -> str:
    """Last segment of a dotted or backslash-namespaced class name."""
    return re.split(r"[.\\]", class_name.strip("\\."))[-1]


class SchemaNameGenerator:
    """
    Maps class identifiers to schema variable names.

    ``App.Data.UserData`` becomes ``UserDataSchema``; a name already ending
    in ``Schema`` is kept. Explicit names (the ``schema_name`` of a source)
    win over generated ones.

    Example:
        names = SchemaNameGenerator({"App.Data.UserData": "AccountSchema"})
        names.generate("App.Data.UserData")  # "AccountSchema"
        names.generate("OrderRequest")       # "OrderRequestSchema"
    """

    def __init__(self, overrides: Mapping[str, str] | None = None):
        self.overrides: dict[str, str] = dict(overrides or {})

    def generate(self, class_name: str, override: str | None = None) -> str:
        if override:
            return override
        if class_name in self.overrides:
            return self.overrides[class_name]

        short_name = class_basename(class_name)
        # Overrides may be registered under the short name too
        if short_name in self.overrides:
            return self.overrides[short_name]
        if short_name.endswith(SCHEMA_SUFFIX):
            return short_name
        return f"{short_name}{SCHEMA_SUFFIX}"

    def from_reference_type(self, inferred_type: str) -> str:
        """Schema name for a ``DataCollection:<cls>``/``DataObject:<cls>`` type or a bare class."""
        for prefix in (COLLECTION_PREFIX, OBJECT_PREFIX):
            if inferred_type.startswith(prefix):
                return self.generate(inferred_type[len(prefix) :])
        return self.generate(inferred_type)

    def register(self, class_name: str, schema_name: str) -> None:
        self.overrides[class_name] = schema_name


__all__ = [
    "SchemaNameGenerator",
    "class_basename",
    "COLLECTION_PREFIX",
    "OBJECT_PREFIX",
]
