"""Per-node compilation: picks a handler and lets it render the node."""

from __future__ import annotations

from ..engine.models import ResolvedValidationSet, SchemaFragment, SchemaPropertyData
from ..engine.naming import SchemaNameGenerator
from .builders import ZodBuilderFactory
from .handlers.registry import TypeHandlerRegistry, create_default_registry


class ZodNodeCompiler:
    """
    Compiles validation nodes to Zod expressions.

    Handlers call back into compile() for array items and object
    properties, so one compiler instance renders a whole property tree.

    Example:
        compiler = ZodNodeCompiler()
        compiler.compile_property(prop)
        # z.number({error: ...}).int('...').min(0, '...').nullable().optional()
    """

    def __init__(
        self,
        registry: TypeHandlerRegistry | None = None,
        factory: ZodBuilderFactory | None = None,
        names: SchemaNameGenerator | None = None,
    ):
        self.registry = registry or create_default_registry()
        self.factory = factory or ZodBuilderFactory()
        self.names = names or SchemaNameGenerator()

    def compile(
        self,
        node: ResolvedValidationSet,
        is_optional: bool = False,
        fragment: SchemaFragment | None = None,
    ) -> str:
        """
        Compile one node.

        Args:
            node: Resolved validation node
            is_optional: Whether the property may be omitted
            fragment: Fragment to apply; defaults to the node's own fragment

        Raises:
            NoHandlerFoundError: If no registered handler accepts the node
        """
        handler = self.registry.get_handler_for_property(node)
        return handler.handle(
            node,
            self,
            is_optional=is_optional,
            fragment=fragment if fragment is not None else node.schema_fragment,
        )

    def compile_property(self, prop: SchemaPropertyData) -> str:
        """Compile a top-level property, honouring its schema override."""
        return self.compile(
            prop.validations,
            is_optional=prop.is_optional,
            fragment=prop.effective_fragment(),
        )


__all__ = ["ZodNodeCompiler"]
