"""Handler for fields typed as another schema or a collection of one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...engine.models import ResolvedValidationSet, SchemaFragment
from ...engine.naming import COLLECTION_PREFIX, OBJECT_PREFIX
from .base import TypeHandler

if TYPE_CHECKING:
    from ..node_compiler import ZodNodeCompiler


class DataClassTypeHandler(TypeHandler):
    """
    ``DataCollection:<cls>`` becomes ``z.array(<ClsSchema>)`` plus the
    collection's size rules; ``DataObject:<cls>`` (or a bare type ending in
    ``Data``) becomes a reference to ``<ClsSchema>``.
    """

    priority = 200
    description = "References to other generated schemas"

    def can_handle_type(self, inferred_type: str) -> bool:
        return inferred_type.startswith((COLLECTION_PREFIX, OBJECT_PREFIX)) or inferred_type.endswith(
            "Data"
        )

    def handle(
        self,
        node: ResolvedValidationSet,
        compiler: ZodNodeCompiler,
        is_optional: bool = False,
        fragment: SchemaFragment | None = None,
    ) -> str:
        schema_name = compiler.names.from_reference_type(node.inferred_type)

        if node.inferred_type.startswith(COLLECTION_PREFIX):
            builder = compiler.factory.create_array(schema_name)
            self.apply_validations(builder, node)
        else:
            builder = compiler.factory.create_reference(schema_name)

        return self.finish(builder, node, is_optional, fragment)


__all__ = ["DataClassTypeHandler"]
