"""
Compilation runs.

SchemaCompiler is the context object of one run: it owns the run-scoped
state (inheritance cache, schema name registry, handler registry,
generator dependency tracking) and wires the pipeline together:

    SchemaSource -> SchemaExtractor -> ExtractedSchemaData
        -> ValidationSchemaGenerator -> ZodTypeScriptWriter -> TypeScript

A new SchemaCompiler starts from a clean slate, so compiling the same
sources twice yields identical output.

Example:
    source = SchemaSource(
        class_name="App.Data.ProfileData",
        rules={"age": "nullable|integer|min:0"},
    )
    print(compile_sources([source]))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .config import CompilerConfig
from .engine.extractor import SchemaExtractor
from .engine.messages import MessageSource, YamlMessageCatalog
from .engine.models import ExtractedSchemaData, SchemaSource
from .engine.naming import SchemaNameGenerator
from .zod.builders import ZodBuilderFactory
from .zod.generator import ValidationSchemaGenerator
from .zod.handlers import TypeHandlerRegistry, create_default_registry
from .zod.node_compiler import ZodNodeCompiler
from .zod.writer import ZodTypeScriptWriter

logger = logging.getLogger(__name__)


class SchemaCompiler:
    """
    One compilation run over a set of schema sources.

    Attributes:
        config: Compiler configuration
        sources: Sources by class name, in input order
        names: Schema name registry shared by extraction and compilation
        registry: Type handlers, including configured custom handlers
        generator: Root-object generator (tracks dependencies for ordering)
        writer: TypeScript writer
    """

    def __init__(
        self,
        sources: Iterable[SchemaSource],
        config: CompilerConfig | None = None,
        message_source: MessageSource | None = None,
        registry: TypeHandlerRegistry | None = None,
    ):
        self.config = config or CompilerConfig()
        self.sources: dict[str, SchemaSource] = {}
        for source in sources:
            if source.class_name in self.sources:
                logger.warning(f"Duplicate source {source.class_name}; the later definition wins")
            self.sources[source.class_name] = source

        self.message_source = message_source or YamlMessageCatalog(
            locale=self.config.locale,
            fallback_locale=self.config.fallback_locale,
            extra_paths=self.config.message_paths,
        )
        self.names = SchemaNameGenerator(
            {s.class_name: s.schema_name for s in self.sources.values() if s.schema_name}
        )

        self.registry = registry or create_default_registry()
        if self.config.custom_handlers:
            self.registry.load_custom_handlers(self.config.custom_handlers)

        self.extractor = SchemaExtractor(self.sources, self.message_source, self.names)
        self.node_compiler = ZodNodeCompiler(self.registry, ZodBuilderFactory(), self.names)
        self.generator = ValidationSchemaGenerator(self.node_compiler, self.config)
        self.writer = ZodTypeScriptWriter(self.generator, self.config)
        self._extracted: list[ExtractedSchemaData] | None = None

    def extract(self) -> list[ExtractedSchemaData]:
        """
        Extract every source (cached for the run).

        Raises:
            InheritanceResolutionError: If an inheritance declaration cannot be resolved
        """
        if self._extracted is None:
            self._extracted = self.extractor.extract_all()
        return self._extracted

    def compile(self) -> str:
        """
        Compile every source into a single TypeScript file.

        Raises:
            InheritanceResolutionError: If an inheritance declaration cannot be resolved
            NoHandlerFoundError: If a property cannot be compiled
        """
        schemas = self.extract()
        logger.info(f"Compiling {len(schemas)} schemas")
        return self.writer.render(schemas)

    def compile_files(self) -> dict[str, str]:
        """Compile every source into one TypeScript file per schema."""
        return self.writer.render_files(self.extract())

    def write(self, output: str | Path | None = None) -> list[Path]:
        """
        Write output to disk according to the output config.

        Args:
            output: File (or directory in separate-file mode) overriding the config

        Returns:
            Paths written
        """
        schemas = self.extract()
        if self.config.output.separate_files:
            directory = output or self.config.output.directory or "."
            return self.writer.write_separate(schemas, directory)

        path = output or self.config.output.path
        if path is None:
            raise ValueError("No output path given and output.path is not configured")
        return [self.writer.write(schemas, path)]


def compile_sources(
    sources: Iterable[SchemaSource],
    config: CompilerConfig | None = None,
    message_source: MessageSource | None = None,
) -> str:
    """Compile sources to TypeScript in a fresh run."""
    return SchemaCompiler(sources, config, message_source).compile()


__all__ = ["SchemaCompiler", "compile_sources"]
