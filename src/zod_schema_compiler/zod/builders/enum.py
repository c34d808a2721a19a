"""Enum builder."""

from __future__ import annotations

import json
from typing import Any

from .base import ZodBuilder


def addslashes(text: str) -> str:
    """Backslash-escape quotes, backslashes and NUL for a double-quoted literal."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\x00", "\\0")
    )


class ZodEnumBuilder(ZodBuilder):
    """
    ``z.enum([...])`` from literal values, or ``z.enum(Ref)`` for a named enum.

    Rule chains do not apply to enums: the enum carries a single message,
    set by the required rule or with set_message().

    Example:
        ZodEnumBuilder().set_values(["draft", "published"]).build()
        # z.enum(["draft", "published"])
    """

    def __init__(self) -> None:
        super().__init__()
        self.values: list[str] = []
        self.reference: str | None = None
        self.enum_message: str | None = None

    def set_values(self, values: list[Any]) -> ZodEnumBuilder:
        self.values = [str(v) for v in values]
        return self

    def set_reference(self, reference: str) -> ZodEnumBuilder:
        self.reference = reference
        return self

    def set_message(self, message: str | None) -> ZodEnumBuilder:
        if message:
            self.enum_message = addslashes(message)
        return self

    def base_type(self) -> str:
        options = f', {{ message: "{self.enum_message}" }}' if self.enum_message else ""
        if self.reference:
            return f"z.enum({self.reference}{options})"
        literals = ", ".join(json.dumps(v) for v in self.values)
        return f"z.enum([{literals}]{options})"

    def render_chain(self) -> str:
        return ""

    def validate_required(self, parameters: list[Any], message: str | None = None):
        if message:
            self.enum_message = addslashes(message)
        return self

    def validate_in(self, parameters: list[Any], message: str | None = None):
        if parameters and not self.reference:
            self.set_values(parameters)
        return self

    def validate_enum(self, parameters: list[Any], message: str | None = None):
        if parameters and not self.values:
            self.set_reference(str(parameters[0]))
        return self


__all__ = ["ZodEnumBuilder", "addslashes"]
