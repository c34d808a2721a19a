"""
Number builder.

Comparison rules with a numeric parameter become native Zod checks; a
parameter naming another field cannot be checked per field and is
skipped. Digit and decimal-place rules have no Zod counterpart and
compile to refines over the value's string form.
"""

from __future__ import annotations

import logging
from typing import Any

from .base import ZodBuilder, escape_js, js_number, message_param, numeric_bound

logger = logging.getLogger(__name__)


def _js_literal(value: Any) -> str:
    number = js_number(value)
    return f"'{escape_js(str(number))}'" if isinstance(number, str) else str(number)


class ZodNumberBuilder(ZodBuilder):
    """``z.number()`` with comparison, integer and digit rules."""

    def __init__(self) -> None:
        super().__init__()
        self.integer_message: str | None = None

    def base_type(self) -> str:
        if self.integer_message is not None:
            base = (
                "z.number({error: (val) => (val != undefined && val != null ? "
                f"'{self.integer_message}' : undefined)}})"
            )
        else:
            base = "z.number()"

        if self.required_message is not None and self.integer_message is None:
            base += (
                f".refine((val) => val != undefined && val != null, "
                f"{{ error: '{self.required_message}'}})"
            )
        return base

    def validate_numeric(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_integer(self, parameters: list[Any], message: str | None = None):
        if message is not None:
            self.integer_message = escape_js(message)
        rule = ".int()" if message is None else f".int('{escape_js(message)}')"
        return self.replace_rule("int", rule)

    def _bounded(self, method: str, parameters: list[Any], message: str | None):
        bound = numeric_bound(parameters)
        if bound is None:
            logger.debug(f"{self.field_name}: non-numeric bound for {method}, skipped")
            return self
        return self.replace_rule(method, f".{method}({bound}{message_param(message)})")

    def validate_min(self, parameters: list[Any], message: str | None = None):
        return self._bounded("min", parameters, message)

    def validate_max(self, parameters: list[Any], message: str | None = None):
        return self._bounded("max", parameters, message)

    def validate_gt(self, parameters: list[Any], message: str | None = None):
        return self._bounded("gt", parameters, message)

    def validate_gte(self, parameters: list[Any], message: str | None = None):
        return self._bounded("gte", parameters, message)

    def validate_lt(self, parameters: list[Any], message: str | None = None):
        return self._bounded("lt", parameters, message)

    def validate_lte(self, parameters: list[Any], message: str | None = None):
        return self._bounded("lte", parameters, message)

    def validate_multiple_of(self, parameters: list[Any], message: str | None = None):
        return self._bounded("multipleOf", parameters, message)

    def validate_between(self, parameters: list[Any], message: str | None = None):
        self.validate_min(parameters[:1], message)
        return self.validate_max(parameters[1:2], message)

    def validate_size(self, parameters: list[Any], message: str | None = None):
        self.validate_min(parameters[:1], message)
        return self.validate_max(parameters[:1], message)

    def validate_decimal(self, parameters: list[Any], message: str | None = None):
        """``decimal:2`` requires exactly two places, ``decimal:1,3`` one to three."""
        if not parameters:
            return self
        escaped = escape_js(message or "The value has an invalid number of decimal places.")
        if len(parameters) == 1:
            places = js_number(parameters[0])
            return self.add_rule(
                ".refine((val) => {const str = String(val); const parts = str.split('.'); "
                f"return parts.length === 1 || (parts.length === 2 && parts[1].length === {places}); "
                f"}}, {{ message: '{escaped}' }})"
            )

        low, high = js_number(parameters[0]), js_number(parameters[1])
        return self.add_rule(
            ".refine((val) => {const str = String(val); const parts = str.split('.'); "
            "if (parts.length === 1) return true; const decimals = parts[1].length; "
            f"return decimals >= {low} && decimals <= {high}; }}, {{ message: '{escaped}' }})"
        )

    def _digits_refine(self, operator: str, count: Any, message: str | None):
        escaped = escape_js(message or "The value has an invalid number of digits.")
        return self.add_rule(
            ".refine((val) => {const str = String(Math.abs(Math.floor(val))); "
            f"return str.length {operator} {js_number(count)}; }}, {{ message: '{escaped}' }})"
        )

    def validate_digits(self, parameters: list[Any], message: str | None = None):
        return self._digits_refine("===", parameters[0], message)

    def validate_max_digits(self, parameters: list[Any], message: str | None = None):
        return self._digits_refine("<=", parameters[0], message)

    def validate_min_digits(self, parameters: list[Any], message: str | None = None):
        return self._digits_refine(">=", parameters[0], message)

    def validate_digits_between(self, parameters: list[Any], message: str | None = None):
        self.validate_min_digits(parameters[:1], message)
        return self.validate_max_digits(parameters[1:2], message)

    def validate_in(self, parameters: list[Any], message: str | None = None):
        return self._membership("", parameters, message)

    def validate_not_in(self, parameters: list[Any], message: str | None = None):
        return self._membership("!", parameters, message)

    def _membership(self, negation: str, parameters: list[Any], message: str | None):
        if not parameters:
            return self
        values = ", ".join(_js_literal(p) for p in parameters)
        escaped = escape_js(message or "The selected value is invalid.")
        return self.add_rule(
            f".refine((val) => {negation}[{values}].includes(val), {{ message: '{escaped}' }})"
        )


__all__ = ["ZodNumberBuilder"]
