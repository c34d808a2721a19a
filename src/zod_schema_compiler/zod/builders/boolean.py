"""Boolean builder."""

from __future__ import annotations

from typing import Any

from .base import ZodBuilder, escape_js

# Form posts deliver booleans as strings ("on", "1", "true") or 0/1
BOOLEAN_PREPROCESS = (
    "(val) => {"
    ' if (typeof val === "string") {'
    " const normalized = val.toLowerCase();"
    ' if (normalized === "true" || normalized === "1" || normalized === "on" || normalized === "yes") { return true; }'
    ' if (normalized === "false" || normalized === "0" || normalized === "off" || normalized === "no") { return false; }'
    " }"
    " if (val === 1) { return true; }"
    " if (val === 0) { return false; }"
    " return val;"
    " }"
)


class ZodBooleanBuilder(ZodBuilder):
    """
    ``z.boolean()`` wrapped in a coercing ``z.preprocess``.

    The wrapper encloses the whole expression including the nullable and
    optional suffixes, so a replace fragment is emitted unwrapped.
    """

    def base_type(self) -> str:
        return "z.boolean()"

    def build(self) -> str:
        if self.fragment is not None and self.fragment.is_replace():
            return super().build()
        return f"z.preprocess({BOOLEAN_PREPROCESS}, {super().build()})"

    def validate_boolean(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_accepted(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "This field must be accepted.")
        return self.replace_rule(
            "refine", f".refine((val) => val === true, {{ message: '{escaped}' }})"
        )

    def validate_declined(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "This field must be declined.")
        return self.replace_rule(
            "refine", f".refine((val) => val === false, {{ message: '{escaped}' }})"
        )


__all__ = ["ZodBooleanBuilder", "BOOLEAN_PREPROCESS"]
