"""Catch-all handler: builder by inferred type, then every chain rule."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...engine.models import ResolvedValidationSet, SchemaFragment
from ..builders import ZodBuilder
from ..refinements import CrossFieldRefinements, is_item_path, render_super_refine
from .base import TypeHandler

if TYPE_CHECKING:
    from ..node_compiler import ZodNodeCompiler


class UniversalTypeHandler(TypeHandler):
    """
    Compiles any node.

    Arrays compile their item node first and wrap it in ``z.array(...)``;
    objects compile each property (optional unless required) into an
    inline ``z.object({...})``. The object describing array items also
    carries the cross-field checks between its properties. A replace
    fragment short-circuits both, since its code discards whatever the
    children would produce.
    """

    priority = 1
    description = "Builder chosen by inferred type with all rules applied"

    def can_handle_type(self, inferred_type: str) -> bool:
        return True

    def handle(
        self,
        node: ResolvedValidationSet,
        compiler: ZodNodeCompiler,
        is_optional: bool = False,
        fragment: SchemaFragment | None = None,
    ) -> str:
        if fragment is not None and fragment.is_replace():
            builder = compiler.factory.create(node.inferred_type)
            return self.finish(builder, node, is_optional, fragment)

        builder = self.create_builder(node, compiler)
        self.apply_validations(builder, node)
        self.apply_item_refinements(builder, node)
        return self.finish(builder, node, is_optional, fragment)

    def create_builder(self, node: ResolvedValidationSet, compiler: ZodNodeCompiler) -> ZodBuilder:
        if node.inferred_type == "array":
            item = node.nested_validations
            item_expression = compiler.compile(item) if item is not None else "z.any()"
            return compiler.factory.create_array(item_expression)

        if node.inferred_type == "object":
            properties = {
                name: compiler.compile(child, is_optional=not child.is_field_required())
                for name, child in (node.object_properties or {}).items()
                if "." not in name
            }
            return compiler.factory.create_inline_object(properties)

        return compiler.factory.create(node.inferred_type)

    def apply_item_refinements(self, builder: ZodBuilder, node: ResolvedValidationSet) -> None:
        """Refine an array item object with the cross-field rules of its properties."""
        if node.inferred_type != "object" or not is_item_path(node.field_name):
            return
        scope = CrossFieldRefinements(scope=f"{node.field_name}.")
        refinement = render_super_refine(scope.collect_children(node))
        if refinement:
            builder.add_rule(refinement)


__all__ = ["UniversalTypeHandler"]
