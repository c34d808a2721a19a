"""String builders: plain strings, URLs and passwords."""

from __future__ import annotations

import logging
import re
from typing import Any

from .base import SizeRulesMixin, ZodBuilder, escape_js, message_param

logger = logging.getLogger(__name__)

DEFAULT_REQUIRED_MESSAGE = "This field is required."

# PHP regex flags with a JavaScript equivalent
_JS_REGEX_FLAGS = frozenset("imsu")

_DELIMITED_REGEX = re.compile(r"^([^\w\s\\])(.*)\1([a-zA-Z]*)$", re.DOTALL)
_DOUBLE_WRAPPED_REGEX = re.compile(r"^//(.*)/(.*)/$", re.DOTALL)
_CHARACTER_CLASS = re.compile(r"\[[^\]]*\]")

# PHP date() format characters -> regex fragments
DATE_FORMAT_TOKENS: dict[str, str] = {
    "d": r"\d{2}",
    "j": r"\d{1,2}",
    "D": r"[A-Za-z]{3}",
    "l": r"[A-Za-z]+",
    "N": r"[1-7]",
    "S": r"(?:st|nd|rd|th)",
    "w": r"[0-6]",
    "z": r"\d{1,3}",
    "W": r"\d{2}",
    "F": r"[A-Za-z]+",
    "M": r"[A-Za-z]{3}",
    "m": r"\d{2}",
    "n": r"\d{1,2}",
    "t": r"\d{2}",
    "L": r"[01]",
    "o": r"\d{4}",
    "Y": r"\d{4}",
    "y": r"\d{2}",
    "a": r"(?:am|pm)",
    "A": r"(?:AM|PM)",
    "g": r"\d{1,2}",
    "G": r"\d{1,2}",
    "h": r"\d{2}",
    "H": r"\d{2}",
    "i": r"\d{2}",
    "s": r"\d{2}",
    "u": r"\d{6}",
    "v": r"\d{3}",
    "e": r"[A-Za-z_]+(?:\/[A-Za-z_]+)*",
    "I": r"[01]",
    "O": r"[+-]\d{4}",
    "P": r"[+-]\d{2}:\d{2}",
    "p": r"(?:Z|[+-]\d{2}:\d{2})",
    "T": r"[A-Z]{1,5}",
    "Z": r"-?\d{1,5}",
    "U": r"-?\d+",
}

_JS_REGEX_SPECIALS = set(r"\^$.|?*+()[]{}/")


def convert_php_regex(php_regex: str) -> str:
    """
    Convert a PHP (PCRE) regex to a JavaScript regex literal.

    Delimiters are stripped (including a mistakenly double-wrapped
    ``//pattern/flags/``), flags without a JavaScript equivalent are dropped
    and escapes that JavaScript does not need inside character classes are
    removed.

    Example:
        convert_php_regex("/^[a-z\\.]+$/i")  # "/^[a-z.]+$/i"
    """
    pattern, flags, delimiter = php_regex, "", "/"

    double = _DOUBLE_WRAPPED_REGEX.match(php_regex)
    delimited = _DELIMITED_REGEX.match(php_regex)
    if double:
        pattern, flags = double.group(1), double.group(2)
    elif delimited:
        delimiter, pattern, flags = delimited.group(1), delimited.group(2), delimited.group(3)

    if delimiter != "/":
        pattern = re.sub(r"(?<!\\)/", r"\/", pattern)

    pattern = _CHARACTER_CLASS.sub(lambda m: normalize_character_class(m.group(0)), pattern)
    js_flags = "".join(flag for flag in dict.fromkeys(flags) if flag in _JS_REGEX_FLAGS)
    return f"/{pattern}/{js_flags}"


def normalize_character_class(character_class: str) -> str:
    """Drop ``\\.`` escapes and literal-hyphen escapes at class edges."""
    if len(character_class) < 2 or character_class[0] != "[" or character_class[-1] != "]":
        return character_class

    body = character_class[1:-1]
    negated = body.startswith("^")
    if negated:
        body = body[1:]

    result: list[str] = []
    has_literal_before = False
    index = 0
    while index < len(body):
        char = body[index]
        if char != "\\":
            result.append(char)
            has_literal_before = True
            index += 1
            continue

        if index + 1 >= len(body):
            result.append("\\")
            break

        next_char = body[index + 1]
        if next_char == ".":
            result.append(".")
        elif next_char == "-":
            has_literal_after = index + 2 < len(body)
            result.append("\\-" if has_literal_before and has_literal_after else "-")
        else:
            result.append("\\" + next_char)
        has_literal_before = True
        index += 2

    return "[" + ("^" if negated else "") + "".join(result) + "]"


def date_format_pattern(php_format: str) -> str | None:
    """
    Regex literal matching a PHP date format, or None for unsupported formats.

    Backslash-escaped characters are literal. Format characters without a
    fixed textual shape (``c``, ``r``, ``B``, ``X``, ``x``) are unsupported.
    """
    parts: list[str] = []
    index = 0
    while index < len(php_format):
        char = php_format[index]
        if char == "\\" and index + 1 < len(php_format):
            literal = php_format[index + 1]
            parts.append("\\" + literal if literal in _JS_REGEX_SPECIALS else literal)
            index += 2
            continue
        if char.isalpha():
            token = DATE_FORMAT_TOKENS.get(char)
            if token is None:
                return None
            parts.append(token)
        else:
            parts.append("\\" + char if char in _JS_REGEX_SPECIALS else char)
        index += 1
    return "/^" + "".join(parts) + "$/"


def _string_list(values: list[Any]) -> str:
    return "[" + ", ".join(f"'{escape_js(str(v))}'" for v in values) + "]"


class ZodStringBuilder(SizeRulesMixin, ZodBuilder):
    """``z.string()`` with the string rule vocabulary."""

    def __init__(self) -> None:
        super().__init__()
        self.base_override: str | None = None

    def set_base_override(self, expression: str) -> ZodStringBuilder:
        self.base_override = expression
        return self

    def base_type(self) -> str:
        if self.base_override is not None:
            return self.base_override

        if self.required_message is not None:
            return (
                f"z.string({{ error: '{self.required_message}' }}).trim()"
                f".refine((val) => val != undefined && val != null && val != '', "
                f"{{ error: '{self.required_message}' }})"
            )

        self.replace_rule("trim", ".trim()")
        return "z.string()"

    def validate_required(self, parameters: list[Any], message: str | None = None):
        if self.base_override is not None:
            escaped = escape_js(message or DEFAULT_REQUIRED_MESSAGE)
            self.remove_rule_containing("__required_refine__")
            self.add_rule(
                ".refine((val) => {"
                " if (val === undefined || val === null) { return false; }"
                ' if (typeof val === "string") { return val.trim() !== ""; }'
                " return true;"
                f" }}, {{ message: '{escaped}' }}) /*__required_refine__*/"
            )
            return self

        self.required_message = escape_js(message or DEFAULT_REQUIRED_MESSAGE)
        self.require_non_empty(message)
        return self

    def validate_string(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_regex(self, parameters: list[Any], message: str | None = None):
        if not parameters or not str(parameters[0]):
            return self
        pattern = convert_php_regex(str(parameters[0]))
        self.remove_rule_containing(f".regex({pattern}")
        return self.add_rule(f".regex({pattern}{message_param(message)})")

    def validate_not_regex(self, parameters: list[Any], message: str | None = None):
        if not parameters or not str(parameters[0]):
            return self
        pattern = convert_php_regex(str(parameters[0]))
        escaped = escape_js(message or "The value format is invalid.")
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            f" return !{pattern}.test(val);"
            f" }}, {{ message: '{escaped}' }})"
        )

    def validate_uuid(self, parameters: list[Any], message: str | None = None):
        rule = ".uuid()" if message is None else f".uuid('{escape_js(message)}')"
        return self.replace_rule("uuid", rule)

    def validate_alpha(self, parameters: list[Any], message: str | None = None):
        return self.apply_regex_rule("__alpha__", "/^[A-Za-z]+$/", message)

    def validate_alpha_dash(self, parameters: list[Any], message: str | None = None):
        return self.apply_regex_rule("__alpha_dash__", "/^[A-Za-z0-9_-]+$/", message)

    def validate_alpha_num(self, parameters: list[Any], message: str | None = None):
        return self.apply_regex_rule("__alpha_num__", "/^[A-Za-z0-9]+$/", message)

    def validate_ascii(self, parameters: list[Any], message: str | None = None):
        return self.apply_regex_rule("__ascii__", r"/^[\x00-\x7F]+$/", message)

    def validate_lowercase(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The value must be lowercase.")
        return self.replace_rule("lowercase", f".lowercase('{escaped}')")

    def validate_uppercase(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The value must be uppercase.")
        return self.replace_rule("uppercase", f".uppercase('{escaped}')")

    def validate_starts_with(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        if len(parameters) == 1:
            prefix = escape_js(str(parameters[0]))
            return self.replace_rule("startsWith", f".startsWith('{prefix}'{message_param(message)})")

        escaped = escape_js(message or "The value has an invalid prefix.")
        return self.replace_rule(
            "startsWith",
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return false; }'
            f" return {_string_list(parameters)}.some((prefix) => val.startsWith(prefix));"
            f" }}, {{ message: '{escaped}' }})",
        )

    def validate_ends_with(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        if len(parameters) == 1:
            suffix = escape_js(str(parameters[0]))
            return self.replace_rule("endsWith", f".endsWith('{suffix}'{message_param(message)})")

        escaped = escape_js(message or "The value has an invalid ending.")
        return self.replace_rule(
            "endsWith",
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return false; }'
            f" return {_string_list(parameters)}.some((suffix) => val.endsWith(suffix));"
            f" }}, {{ message: '{escaped}' }})",
        )

    def validate_doesnt_start_with(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        escaped = escape_js(message or "The value has a forbidden prefix.")
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return true; }'
            f" return !{_string_list(parameters)}.some((prefix) => val.startsWith(prefix));"
            f" }}, {{ message: '{escaped}' }})"
        )

    def validate_doesnt_end_with(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        escaped = escape_js(message or "The value has a forbidden ending.")
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return true; }'
            f" return !{_string_list(parameters)}.some((suffix) => val.endsWith(suffix));"
            f" }}, {{ message: '{escaped}' }})"
        )

    def validate_in(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        escaped = escape_js(message or "The selected value is invalid.")
        return self.add_rule(
            f".refine((val) => {_string_list(parameters)}.includes(val), "
            f"{{ message: '{escaped}' }})"
        )

    def validate_not_in(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        escaped = escape_js(message or "The selected value is invalid.")
        return self.add_rule(
            f".refine((val) => !{_string_list(parameters)}.includes(val), "
            f"{{ message: '{escaped}' }})"
        )

    def validate_json(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The value must be valid JSON.")
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return false; }'
            " try { JSON.parse(val); return true; } catch (error) { return false; }"
            f" }}, {{ message: '{escaped}' }})"
        )

    def validate_ip(self, parameters: list[Any], message: str | None = None):
        if message is None:
            return self.set_base_override("z.union([z.ipv4(), z.ipv6()])")
        escaped = escape_js(message)
        return self.set_base_override(
            f"z.union([z.ipv4({{ message: '{escaped}' }}), z.ipv6({{ message: '{escaped}' }})])"
        )

    def validate_ipv4(self, parameters: list[Any], message: str | None = None):
        return self._format_override("ipv4", message)

    def validate_ipv6(self, parameters: list[Any], message: str | None = None):
        return self._format_override("ipv6", message)

    def validate_ulid(self, parameters: list[Any], message: str | None = None):
        return self._format_override("ulid", message)

    def validate_mac_address(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The value must be a valid MAC address.")
        pattern = (
            r"/^(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$"
            r"|^[0-9A-Fa-f]{4}\.[0-9A-Fa-f]{4}\.[0-9A-Fa-f]{4}$/"
        )
        self.remove_rule_containing("__mac_refine__")
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return false; }'
            f" return {pattern}.test(val);"
            f" }}, {{ message: '{escaped}' }}) /*__mac_refine__*/"
        )

    def validate_date(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The value must be a valid date.")
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            ' if (typeof val !== "string") { return false; }'
            " const timestamp = Date.parse(val);"
            " return !Number.isNaN(timestamp);"
            f" }}, {{ message: '{escaped}' }})"
        )

    def validate_date_format(self, parameters: list[Any], message: str | None = None):
        patterns = [date_format_pattern(str(p)) for p in parameters if str(p)]
        if not patterns:
            return self
        if any(p is None for p in patterns):
            logger.debug(
                f"{self.field_name}: unsupported date format {parameters!r}; "
                f"accepting any non-empty value"
            )
            patterns = ["/^.+$/"]

        self.remove_rule_containing("__date_format__")
        if len(patterns) == 1:
            return self.add_rule(f".regex({patterns[0]}{message_param(message)}) /*__date_format__*/")

        escaped = escape_js(message or "The value does not match the expected date format.")
        checks = " || ".join(f"{p}.test(val)" for p in patterns)
        return self.add_rule(
            ".refine((val) => {"
            " if (val === undefined || val === null) { return true; }"
            f" return {checks};"
            f" }}, {{ message: '{escaped}' }}) /*__date_format__*/"
        )

    def apply_regex_rule(self, marker: str, pattern: str, message: str | None):
        self.remove_rule_containing(marker)
        return self.add_rule(f".regex({pattern}{message_param(message)}) /*{marker}*/")

    def _format_override(self, zod_format: str, message: str | None):
        if message is None:
            return self.set_base_override(f"z.{zod_format}()")
        return self.set_base_override(f"z.{zod_format}({{ message: '{escape_js(message)}' }})")


class ZodUrlBuilder(ZodStringBuilder):
    """``z.url(...)`` with an optional protocol filter from ``url:http,https``."""

    def __init__(self) -> None:
        super().__init__()
        self.url_error_message: str | None = None
        self.protocol_pattern: str | None = None

    def base_type(self) -> str:
        options: list[str] = []
        if self.url_error_message:
            options.append(f"error: '{self.url_error_message}'")
        elif self.required_message is not None:
            options.append(f"error: '{self.required_message}'")
        if self.protocol_pattern is not None:
            options.append(f"protocol: {self.protocol_pattern}")

        content = f"z.url({{ {', '.join(options)} }})" if options else "z.url()"
        if self.required_message is not None:
            content += (
                f".refine((val) => val != undefined && val != null && val != '', "
                f"{{ error: '{self.required_message}' }})"
            )
        return content

    def validate_url(self, parameters: list[Any], message: str | None = None):
        if message is not None:
            self.url_error_message = escape_js(message)
        protocols = [str(p) for p in parameters if p is not None and str(p) != ""]
        if protocols:
            self.protocol_pattern = self.build_protocol_pattern(protocols)
        return self

    @staticmethod
    def build_protocol_pattern(protocols: list[str]) -> str:
        escaped = [re.escape(p).replace("/", r"\/") for p in protocols]
        if len(escaped) == 1:
            return f"/^{escaped[0]}$/"
        return f"/^(?:{'|'.join(escaped)})$/"


class ZodPasswordBuilder(ZodStringBuilder):
    """
    Password fields.

    The ``password`` rule object expands to ``password.<check>`` entries,
    each applied as a regex or refine. The breached-password check only
    exists server side and compiles to nothing.
    """

    def base_type(self) -> str:
        self.replace_rule("trim", ".trim()")
        content = "z.string()"
        if self.required_message is not None:
            content += (
                f".refine((val) => val != undefined && val != null && val != '', "
                f"{{ error: '{self.required_message}'}})"
            )
        return content

    def validate_password(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_password_letters(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The password must contain at least one letter.")
        return self.add_rule(f".regex(/[a-zA-Z]/, '{escaped}')")

    def validate_password_mixed(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(
            message or "The password must contain at least one uppercase and one lowercase letter."
        )
        return self.add_rule(
            f".refine((val) => /[a-z]/.test(val) && /[A-Z]/.test(val), {{ message: '{escaped}' }})"
        )

    def validate_password_numbers(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The password must contain at least one number.")
        return self.add_rule(f".regex(/\\d/, '{escaped}')")

    def validate_password_symbols(self, parameters: list[Any], message: str | None = None):
        escaped = escape_js(message or "The password must contain at least one symbol.")
        return self.add_rule(f".regex(/[^a-zA-Z0-9]/, '{escaped}')")

    def validate_password_uncompromised(self, parameters: list[Any], message: str | None = None):
        return self


__all__ = [
    "ZodStringBuilder",
    "ZodUrlBuilder",
    "ZodPasswordBuilder",
    "convert_php_regex",
    "normalize_character_class",
    "date_format_pattern",
    "DATE_FORMAT_TOKENS",
]
