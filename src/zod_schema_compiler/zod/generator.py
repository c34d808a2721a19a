"""
Schema generation.

ValidationSchemaGenerator renders one ExtractedSchemaData as a root
``z.object({...})``. Field rules compile through the node compiler;
rules relating fields to each other become a ``.superRefine`` on the
root object (see refinements.py). Array items refine themselves, so
only top-level fields and nested objects outside arrays are collected
here.

Example:
    generator = ValidationSchemaGenerator(ZodNodeCompiler())
    definition = generator.generate(schema)
    ordered = generator.sort_schemas_by_dependencies()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config import CompilerConfig
from ..engine.models import ExtractedSchemaData, SchemaPropertyData
from ..engine.naming import class_basename
from .builders import property_key
from .node_compiler import ZodNodeCompiler
from .refinements import INDENT, CrossFieldRefinements, render_super_refine

logger = logging.getLogger(__name__)


class ValidationSchemaGenerator:
    """
    Renders extracted schemas and tracks their dependencies for ordering.

    Attributes:
        compiler: Node compiler used for property expressions
        config: Compiler configuration (App type annotations)
        processed_schemas: Schemas generated so far, by name, in order
        schema_dependencies: Schema name -> names it references
    """

    def __init__(self, compiler: ZodNodeCompiler | None = None, config: CompilerConfig | None = None):
        self.compiler = compiler or ZodNodeCompiler()
        self.config = config or CompilerConfig()
        self.refinements = CrossFieldRefinements()
        self.processed_schemas: dict[str, ExtractedSchemaData] = {}
        self.schema_dependencies: dict[str, list[str]] = {}

    def generate(self, schema: ExtractedSchemaData) -> str:
        """
        Render a schema's root object expression.

        Raises:
            NoHandlerFoundError: If a property cannot be compiled
        """
        self.processed_schemas[schema.name] = schema
        self.schema_dependencies[schema.name] = list(schema.dependencies)
        logger.info(f"Generating {schema.name} ({len(schema.properties)} properties)")
        return self.build_validation_schema(schema.properties)

    def build_validation_schema(self, properties: list[SchemaPropertyData]) -> str:
        if not properties:
            return "z.object({})"

        entries: list[str] = []
        blocks: list[str] = []
        for prop in properties:
            blocks.extend(self.refinements.collect(prop.name, prop.validations))
            if "." in prop.name:
                continue
            entries.append(f"{INDENT}{property_key(prop.name)}: {self.compiler.compile_property(prop)}")

        if not entries:
            schema = "z.object({})"
        else:
            schema = "z.object({\n" + ",\n".join(entries) + ",\n})"
        return schema + render_super_refine(blocks)

    # Output assembly

    def generate_header(self, schemas: Iterable[ExtractedSchemaData]) -> str:
        content = "import { z } from 'zod';\n\n"
        if self.needs_app_types_import(list(schemas)):
            content += (
                f"import {{ {self.config.app_prefix} }} from "
                f"'{self.config.app_types_import_path}';\n\n"
            )
        return content

    def needs_app_types_import(self, schemas: list[ExtractedSchemaData]) -> bool:
        """Whether any schema is annotated with an App type (requires use_app_types)."""
        if not self.config.use_app_types:
            return False
        return any(self.app_type_name(schema) is not None for schema in schemas)

    def app_type_name(self, schema: ExtractedSchemaData) -> str | None:
        """
        Name of the App type a schema is annotated with, if any.

        Data classes always map to their App type; request classes only
        when App types are enabled.
        """
        if not schema.class_name:
            return None
        basename = class_basename(schema.class_name)
        if basename.endswith("Data"):
            return basename
        if basename.endswith("Request") and self.config.use_app_types:
            return basename
        return None

    def sort_schemas_by_dependencies(self) -> list[ExtractedSchemaData]:
        """
        Processed schemas with every schema after the schemas it references.

        Unknown dependencies are ignored; a cycle is broken where it is
        first entered, keeping generation order for the rest.
        """
        ordered: list[ExtractedSchemaData] = []
        visited: set[str] = set()

        def visit(name: str) -> None:
            if name in visited:
                return
            visited.add(name)
            for dependency in self.schema_dependencies.get(name, []):
                if dependency in self.processed_schemas:
                    visit(dependency)
            ordered.append(self.processed_schemas[name])

        for name in self.processed_schemas:
            visit(name)
        return ordered


__all__ = ["ValidationSchemaGenerator"]
