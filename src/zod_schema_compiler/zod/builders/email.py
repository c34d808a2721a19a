"""Email builder."""

from __future__ import annotations

from typing import Any

from .base import SizeRulesMixin, ZodBuilder, escape_js


class ZodEmailBuilder(SizeRulesMixin, ZodBuilder):
    """``z.email()``; the email message wins over the required message for the format error."""

    def __init__(self) -> None:
        super().__init__()
        self.email_message: str | None = None

    def base_type(self) -> str:
        error = self.email_message or self.required_message
        base = f"z.email({{ error: '{error}' }})" if error else "z.email()"
        return base + ".trim()"

    def validate_email(self, parameters: list[Any], message: str | None = None):
        if message is not None:
            self.email_message = escape_js(message)
        return self

    def validate_string(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_required(self, parameters: list[Any], message: str | None = None):
        if message is not None:
            self.required_message = escape_js(message)
        return self.require_non_empty(message)


__all__ = ["ZodEmailBuilder"]
