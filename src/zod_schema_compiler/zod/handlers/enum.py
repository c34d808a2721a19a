"""Handlers that compile one-of rules to ``z.enum``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...engine.models import ResolvedValidationSet, SchemaFragment
from ..builders import ZodEnumBuilder
from .base import TypeHandler

if TYPE_CHECKING:
    from ..node_compiler import ZodNodeCompiler

ENUM_PREFIX = "enum:"

# Types an ``in`` rule may narrow to an enum; every other type keeps its
# own builder and checks membership with a refine
STRING_LIKE_TYPES: frozenset[str] = frozenset({"string", "uuid", "email", "url"})


def _enum_message(node: ResolvedValidationSet) -> str | None:
    """The required message of a required field; optional enums carry none."""
    if not node.is_field_required():
        return None
    return node.get_message("required") or None


def _finish_enum(
    handler: TypeHandler,
    builder: ZodEnumBuilder,
    node: ResolvedValidationSet,
    is_optional: bool,
    fragment: SchemaFragment | None,
) -> str:
    builder.set_message(_enum_message(node))
    return handler.finish(builder, node, is_optional, fragment)


class EnumTypeHandler(TypeHandler):
    """
    ``enum:<values>`` nodes.

    Values come from the ``in`` rule itself, so values containing commas
    survive. An ``enum`` rule naming a TypeScript enum makes the schema
    refer to it instead of listing values.
    """

    priority = 300
    description = "One-of values as z.enum, by literal list or enum reference"

    def can_handle_type(self, inferred_type: str) -> bool:
        return inferred_type.startswith(ENUM_PREFIX)

    def handle(
        self,
        node: ResolvedValidationSet,
        compiler: ZodNodeCompiler,
        is_optional: bool = False,
        fragment: SchemaFragment | None = None,
    ) -> str:
        reference = node.get_validation("enum")
        in_rule = node.get_validation("in")
        if reference is not None and reference.parameters:
            builder = compiler.factory.create_enum(reference=str(reference.parameters[0]))
        elif in_rule is not None and in_rule.parameters:
            builder = compiler.factory.create_enum(values=[str(v) for v in in_rule.parameters])
        else:
            values = [v for v in node.inferred_type[len(ENUM_PREFIX) :].split(",") if v != ""]
            builder = compiler.factory.create_enum(values=values)
        return _finish_enum(self, builder, node, is_optional, fragment)


class InRuleTypeHandler(TypeHandler):
    """
    String-like nodes restricted by ``in`` whose type came from another rule.

    ``date|in:2024-01-01,2024-06-01`` infers as a string, not an enum; the
    ``in`` values still fully describe the accepted inputs.
    """

    priority = 400
    description = "String-like fields with an in rule as z.enum"

    def can_handle_type(self, inferred_type: str) -> bool:
        return False

    def can_handle_property(self, node: ResolvedValidationSet) -> bool:
        if node.inferred_type not in STRING_LIKE_TYPES:
            return False
        in_rule = node.get_validation("in")
        return in_rule is not None and bool(in_rule.parameters)

    def handle(
        self,
        node: ResolvedValidationSet,
        compiler: ZodNodeCompiler,
        is_optional: bool = False,
        fragment: SchemaFragment | None = None,
    ) -> str:
        in_rule = node.get_validation("in")
        values = [str(v) for v in in_rule.parameters] if in_rule is not None else []
        builder = compiler.factory.create_enum(values=values)
        return _finish_enum(self, builder, node, is_optional, fragment)


__all__ = ["EnumTypeHandler", "InRuleTypeHandler", "STRING_LIKE_TYPES"]
