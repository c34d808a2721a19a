"""
TypeScript output.

Renders generated schemas through Jinja2 templates, either as one module
(top-level exports or a TS namespace) or as one file per schema with
relative imports between them.

Module format output:

    import { z } from 'zod';

    export const AddressDataSchema = z.object({...});
    export type AddressDataSchemaType = z.infer<typeof AddressDataSchema>;
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pydantic import BaseModel, Field

from ..config import CompilerConfig
from ..engine.models import ExtractedSchemaData
from .generator import ValidationSchemaGenerator

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class SchemaEntry(BaseModel):
    """One exported schema as the templates see it."""

    name: str = Field(description="Schema constant name")
    type_name: str = Field(description="Inferred type alias name")
    definition: str = Field(description="Zod expression")
    app_type: str | None = Field(default=None, description="App type annotation, if any")
    dependencies: list[str] = Field(default_factory=list)


def type_alias_name(schema_name: str) -> str:
    """Exported type alias of a schema: ``UserSchema`` -> ``UserSchemaType``."""
    return f"{schema_name}Type"


class ZodTypeScriptWriter:
    """
    Writes generated schemas as TypeScript.

    Example:
        writer = ZodTypeScriptWriter(generator, config)
        source = writer.render(schemas)
        writer.write(schemas, "resources/js/schemas.ts")
    """

    def __init__(self, generator: ValidationSchemaGenerator, config: CompilerConfig | None = None):
        self.generator = generator
        self.config = config or generator.config
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

    def build_entries(self, schemas: list[ExtractedSchemaData], annotate: bool = True) -> list[SchemaEntry]:
        """Generate every schema, then return entries in dependency order."""
        definitions = {schema.name: self.generator.generate(schema) for schema in schemas}
        annotate = annotate and self.generator.needs_app_types_import(schemas)

        entries = []
        for schema in self.generator.sort_schemas_by_dependencies():
            if schema.name not in definitions:
                continue
            entries.append(
                SchemaEntry(
                    name=schema.name,
                    type_name=type_alias_name(schema.name),
                    definition=definitions[schema.name],
                    app_type=self.generator.app_type_name(schema) if annotate else None,
                    dependencies=[d for d in schema.dependencies if d in definitions],
                )
            )
        return entries

    def render(self, schemas: list[ExtractedSchemaData]) -> str:
        """Render all schemas as a single TypeScript file in the configured format."""
        if self.config.output.format == "namespace":
            template = self.env.get_template("namespace.ts.j2")
            return template.render(
                header="import { z } from 'zod';\n\n",
                namespace=self.config.output.namespace,
                entries=self.build_entries(schemas, annotate=False),
            )

        template = self.env.get_template("module.ts.j2")
        return template.render(
            header=self.generator.generate_header(schemas),
            app_prefix=self.config.app_prefix,
            entries=self.build_entries(schemas),
        )

    def render_files(self, schemas: list[ExtractedSchemaData]) -> dict[str, str]:
        """Render one file per schema, keyed by ``<SchemaName>.ts``."""
        template = self.env.get_template("schema_file.ts.j2")
        files: dict[str, str] = {}
        for entry in self.build_entries(schemas):
            header = "import { z } from 'zod';\n"
            if entry.app_type:
                header += (
                    f"import {{ {self.config.app_prefix} }} from "
                    f"'{self.config.app_types_import_path}';\n"
                )
            header += "\n" if not entry.dependencies else ""
            files[f"{entry.name}.ts"] = template.render(
                header=header,
                imports=entry.dependencies,
                app_prefix=self.config.app_prefix,
                entry=entry,
            )
        return files

    def write(self, schemas: list[ExtractedSchemaData], output_path: str | Path) -> Path:
        """Write a single file, creating parent directories as needed."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(schemas), encoding="utf-8")
        logger.info(f"Wrote {len(schemas)} schemas to {path}")
        return path

    def write_separate(self, schemas: list[ExtractedSchemaData], directory: str | Path) -> list[Path]:
        """Write one file per schema into a directory, creating it as needed."""
        target = Path(directory)
        target.mkdir(parents=True, exist_ok=True)
        written = []
        for filename, content in self.render_files(schemas).items():
            path = target / filename
            path.write_text(content, encoding="utf-8")
            written.append(path)
        logger.info(f"Wrote {len(written)} schema files to {target}")
        return written


__all__ = ["ZodTypeScriptWriter", "SchemaEntry", "type_alias_name", "TEMPLATES_DIR"]
