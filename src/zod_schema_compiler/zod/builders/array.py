"""Array builder."""

from __future__ import annotations

from typing import Any

from .base import SizeRulesMixin, ZodBuilder, escape_js


class ZodArrayBuilder(SizeRulesMixin, ZodBuilder):
    """``z.array(<item>)`` followed by the array's own size rules."""

    def __init__(self, item_expression: str = "z.any()") -> None:
        super().__init__()
        self.item_expression = item_expression

    def set_item(self, item_expression: str) -> ZodArrayBuilder:
        self.item_expression = item_expression
        return self

    def base_type(self) -> str:
        return f"z.array({self.item_expression})"

    def validate_array(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_list(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_distinct(self, parameters: list[Any], message: str | None = None):
        """Items compare by JSON form; ``distinct:ignore_case`` lowercases strings first."""
        escaped = escape_js(message or "The items must be distinct.")
        if "ignore_case" in [str(p) for p in parameters]:
            key = '(typeof item === "string" ? item.toLowerCase() : JSON.stringify(item))'
        else:
            key = "JSON.stringify(item)"
        return self.replace_rule(
            "refine",
            f".refine((val) => new Set(val.map((item) => {key})).size === val.length, "
            f"{{ message: '{escaped}' }})",
        )


__all__ = ["ZodArrayBuilder"]
