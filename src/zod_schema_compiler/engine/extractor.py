"""
Schema extraction.

Runs the resolution pipeline for one source class and packages the result
as ExtractedSchemaData:

    inheritance expansion -> custom message collection -> grouping
        -> tree building (type inference + message resolution per node)
        -> one SchemaPropertyData per top-level field -> dependencies
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

from .grouper import NestedRuleGrouper
from .inheritance import DataClassRuleProcessor
from .messages.catalog import MessageSource
from .messages.nested import NestedMessageHandler
from .messages.resolver import MessageResolutionService
from .models import (
    ExtractedSchemaData,
    ResolvedValidationSet,
    SchemaPropertyData,
    SchemaSource,
)
from .naming import COLLECTION_PREFIX, OBJECT_PREFIX, SchemaNameGenerator
from .tree_builder import NestedValidationBuilder
from .type_inference import TypeInferenceService
from .validation_resolver import ValidationResolver

logger = logging.getLogger(__name__)


def iter_nodes(node: ResolvedValidationSet) -> Iterator[ResolvedValidationSet]:
    """Depth-first walk over a validation tree, the node itself first."""
    yield node
    if node.nested_validations is not None:
        yield from iter_nodes(node.nested_validations)
    for child in (node.object_properties or {}).values():
        yield from iter_nodes(child)


def is_reference_type(inferred_type: str) -> bool:
    return inferred_type.startswith((COLLECTION_PREFIX, OBJECT_PREFIX))


class SchemaExtractor:
    """
    Extracts ExtractedSchemaData for the sources of one compilation run.

    The extractor owns the run-scoped state shared across classes: the
    inheritance cache and the schema name registry.
    """

    def __init__(
        self,
        sources: Mapping[str, SchemaSource],
        message_source: MessageSource,
        names: SchemaNameGenerator | None = None,
    ):
        self.sources = sources
        self.message_source = message_source
        self.names = names or SchemaNameGenerator(
            {s.class_name: s.schema_name for s in sources.values() if s.schema_name}
        )
        self.rule_processor = DataClassRuleProcessor(sources, self.names)
        self.message_handler = NestedMessageHandler(sources)
        self.grouper = NestedRuleGrouper()
        self.type_inference = TypeInferenceService()

    def extract(self, class_name: str) -> ExtractedSchemaData:
        """
        Extract one class.

        Args:
            class_name: Class identifier of one of the run's sources

        Returns:
            Schema name, ordered properties and referenced schema names

        Raises:
            KeyError: If the class is not part of the run
            InheritanceResolutionError: If an inheritance declaration cannot be resolved
        """
        source = self.sources[class_name]
        processed = self.rule_processor.process(class_name)

        messages = MessageResolutionService(
            source=self.message_source,
            custom_messages=self.message_handler.messages_for(source),
            custom_attributes=source.attributes,
        )
        builder = NestedValidationBuilder(ValidationResolver(messages, self.type_inference))

        grouped = self.grouper.group_rules_with_metadata(processed.rules, source.metadata)
        trees = builder.build_nested_validations(grouped, source.metadata)

        properties: list[SchemaPropertyData] = []
        for name, tree in trees.items():
            if "." in name:
                logger.debug(f"{class_name}: skipping flat dotted field '{name}'")
                continue
            meta = source.metadata.get(name)
            is_optional = not tree.is_field_required() or (meta is not None and meta.is_optional)
            properties.append(
                SchemaPropertyData(
                    name=name,
                    is_optional=is_optional,
                    validations=tree,
                    schema_override=processed.fragments.get(name),
                )
            )

        schema_name = self.names.generate(class_name, source.schema_name)
        data = ExtractedSchemaData(
            name=schema_name,
            class_name=class_name,
            type=source.type,
            properties=properties,
        )
        data.dependencies = self.extract_dependencies(data)
        logger.info(
            f"Extracted {schema_name}: {len(properties)} properties, "
            f"{len(data.dependencies)} dependencies"
        )
        return data

    def extract_all(self) -> list[ExtractedSchemaData]:
        return [self.extract(class_name) for class_name in self.sources]

    def extract_dependencies(self, data: ExtractedSchemaData) -> list[str]:
        """
        Other schema names referenced by a schema, in first-reference order.

        References come from typed object/collection nodes anywhere in the
        trees, and from schema names of the run that appear in fragments.
        """
        known = {
            self.names.generate(s.class_name, s.schema_name) for s in self.sources.values()
        }
        dependencies: list[str] = []

        def add(name: str) -> None:
            if name != data.name and name not in dependencies:
                dependencies.append(name)

        for prop in data.properties:
            for node in iter_nodes(prop.validations):
                if is_reference_type(node.inferred_type):
                    add(self.names.from_reference_type(node.inferred_type))
                if node.schema_fragment is not None:
                    self._fragment_references(node.schema_fragment.code, known, add)
            if prop.schema_override is not None:
                self._fragment_references(prop.schema_override.code, known, add)

        return dependencies

    @staticmethod
    def _fragment_references(code: str, known: set[str], add) -> None:
        for token in re.findall(r"\b[A-Za-z_$][\w$]*\b", code):
            if token in known:
                add(token)


__all__ = ["SchemaExtractor", "iter_nodes", "is_reference_type"]
