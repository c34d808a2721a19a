"""Object builders: inline ``z.object({...})`` and references to named schemas."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from .base import ZodBuilder, escape_js

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


def property_key(name: str) -> str:
    """Object literal key: bare when it is a valid identifier, quoted otherwise."""
    return name if _IDENTIFIER.match(name) else f"'{escape_js(name)}'"


class ZodInlineObjectBuilder(ZodBuilder):
    """Inline object literal; property expressions are compiled by the caller."""

    def __init__(self, properties: Mapping[str, str] | None = None) -> None:
        super().__init__()
        self.properties: dict[str, str] = dict(properties or {})

    def add_property(self, name: str, expression: str) -> ZodInlineObjectBuilder:
        self.properties[name] = expression
        return self

    def base_type(self) -> str:
        entries = []
        for name, expression in self.properties.items():
            if "." in name:
                logger.debug(f"{self.field_name}: skipping dotted property '{name}'")
                continue
            entries.append(f"{property_key(name)}: {expression}")
        if not entries:
            return "z.object({})"
        return "z.object({ " + ", ".join(entries) + " })"


class ZodObjectReferenceBuilder(ZodBuilder):
    """A named schema used by reference; only nullable/optional apply."""

    def __init__(self, schema_name: str) -> None:
        super().__init__()
        self.schema_name = schema_name

    def base_type(self) -> str:
        return self.schema_name

    def render_chain(self) -> str:
        return ""


__all__ = ["ZodInlineObjectBuilder", "ZodObjectReferenceBuilder", "property_key"]
