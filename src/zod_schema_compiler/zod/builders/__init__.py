"""Zod expression builders, one per semantic type."""

from .array import ZodArrayBuilder
from .base import SizeRulesMixin, ZodBuilder, escape_js, message_param
from .boolean import ZodBooleanBuilder
from .email import ZodEmailBuilder
from .enum import ZodEnumBuilder
from .factory import ZodBuilderFactory
from .file import ZodFileBuilder
from .number import ZodNumberBuilder
from .object import ZodInlineObjectBuilder, ZodObjectReferenceBuilder, property_key
from .string import ZodPasswordBuilder, ZodStringBuilder, ZodUrlBuilder, convert_php_regex

__all__ = [
    "ZodBuilder",
    "SizeRulesMixin",
    "ZodBuilderFactory",
    "ZodStringBuilder",
    "ZodUrlBuilder",
    "ZodPasswordBuilder",
    "ZodEmailBuilder",
    "ZodNumberBuilder",
    "ZodBooleanBuilder",
    "ZodArrayBuilder",
    "ZodEnumBuilder",
    "ZodInlineObjectBuilder",
    "ZodObjectReferenceBuilder",
    "ZodFileBuilder",
    "escape_js",
    "message_param",
    "property_key",
    "convert_php_regex",
]
