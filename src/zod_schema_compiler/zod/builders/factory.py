"""Builder factory: maps inferred types to builder classes."""

from __future__ import annotations

from .array import ZodArrayBuilder
from .base import ZodBuilder
from .boolean import ZodBooleanBuilder
from .email import ZodEmailBuilder
from .enum import ZodEnumBuilder
from .file import ZodFileBuilder
from .number import ZodNumberBuilder
from .object import ZodInlineObjectBuilder, ZodObjectReferenceBuilder
from .string import ZodPasswordBuilder, ZodStringBuilder, ZodUrlBuilder


class ZodBuilderFactory:
    """
    Creates a fresh builder per node.

    Types without a dedicated builder (``string``, ``uuid``, date-like
    strings) get ZodStringBuilder. ``enum:<values>`` types get an enum
    builder preloaded with the values. Extra types can be mapped with
    register().

    Example:
        factory = ZodBuilderFactory()
        factory.create("number").build()  # z.number()
    """

    def __init__(self) -> None:
        self.builders: dict[str, type[ZodBuilder]] = {
            "string": ZodStringBuilder,
            "boolean": ZodBooleanBuilder,
            "number": ZodNumberBuilder,
            "array": ZodArrayBuilder,
            "object": ZodInlineObjectBuilder,
            "email": ZodEmailBuilder,
            "url": ZodUrlBuilder,
            "password": ZodPasswordBuilder,
            "file": ZodFileBuilder,
        }

    def register(self, inferred_type: str, builder_cls: type[ZodBuilder]) -> None:
        self.builders[inferred_type] = builder_cls

    def create(self, inferred_type: str) -> ZodBuilder:
        if inferred_type.startswith("enum:"):
            values = [v for v in inferred_type[len("enum:") :].split(",") if v != ""]
            return ZodEnumBuilder().set_values(values)
        return self.builders.get(inferred_type, ZodStringBuilder)()

    def create_enum(self, values: list[str] | None = None, reference: str | None = None) -> ZodEnumBuilder:
        builder = ZodEnumBuilder()
        if reference:
            return builder.set_reference(reference)
        return builder.set_values(values or [])

    def create_array(self, item_expression: str) -> ZodArrayBuilder:
        return ZodArrayBuilder(item_expression)

    def create_inline_object(self, properties: dict[str, str]) -> ZodInlineObjectBuilder:
        return ZodInlineObjectBuilder(properties)

    def create_reference(self, schema_name: str) -> ZodObjectReferenceBuilder:
        return ZodObjectReferenceBuilder(schema_name)


__all__ = ["ZodBuilderFactory"]
