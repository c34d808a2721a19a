"""Type handlers: pick and drive a builder for each validation node."""

from .base import STRUCTURAL_RULES, TypeHandler
from .data_class import DataClassTypeHandler
from .enum import EnumTypeHandler, InRuleTypeHandler
from .registry import TypeHandlerRegistry, create_default_registry
from .universal import UniversalTypeHandler

__all__ = [
    "TypeHandler",
    "TypeHandlerRegistry",
    "create_default_registry",
    "InRuleTypeHandler",
    "EnumTypeHandler",
    "DataClassTypeHandler",
    "UniversalTypeHandler",
    "STRUCTURAL_RULES",
]
