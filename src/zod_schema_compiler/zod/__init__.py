"""Zod code generation: builders, type handlers, schema generator and writer."""

from .builders import ZodBuilder, ZodBuilderFactory
from .generator import ValidationSchemaGenerator
from .handlers import TypeHandler, TypeHandlerRegistry, create_default_registry
from .node_compiler import ZodNodeCompiler
from .writer import ZodTypeScriptWriter

__all__ = [
    "ZodBuilder",
    "ZodBuilderFactory",
    "TypeHandler",
    "TypeHandlerRegistry",
    "create_default_registry",
    "ZodNodeCompiler",
    "ValidationSchemaGenerator",
    "ZodTypeScriptWriter",
]
