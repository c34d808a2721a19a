"""
Type handler base class.

A handler turns one resolved validation node into a Zod expression. The
registry asks handlers in descending priority order whether they can
handle a node; the first that accepts compiles it.

Subclasses must:
1. Set class attributes (priority, description)
2. Implement can_handle_type() and handle()
3. Optionally override can_handle_property() to look past the inferred type

Example:
    class MoneyHandler(TypeHandler):
        priority = 250
        description = "Money amounts as positive numbers with two decimals"

        def can_handle_type(self, inferred_type: str) -> bool:
            return inferred_type == "money"

        def handle(self, node, compiler, is_optional=False, fragment=None) -> str:
            builder = compiler.factory.create("number")
            builder.validate_decimal([2])
            return self.finish(builder, node, is_optional, fragment)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from ...engine.categories import CROSS_FIELD_RULES, META_RULES
from ...engine.models import ResolvedValidationSet, SchemaFragment
from ..builders import ZodBuilder

if TYPE_CHECKING:
    from ..node_compiler import ZodNodeCompiler

logger = logging.getLogger(__name__)

# Applied structurally (nullable/optional suffixes) or not at all; "required"
# still reaches the builder, which turns it into a defined-ness check.
STRUCTURAL_RULES: frozenset[str] = META_RULES - {"required"}


class TypeHandler(ABC):
    """Base class for node handlers."""

    priority: ClassVar[int] = 100
    description: ClassVar[str]

    @abstractmethod
    def can_handle_type(self, inferred_type: str) -> bool:
        """Whether this handler compiles nodes of the given inferred type."""

    def can_handle_property(self, node: ResolvedValidationSet) -> bool:
        return self.can_handle_type(node.inferred_type)

    @abstractmethod
    def handle(
        self,
        node: ResolvedValidationSet,
        compiler: ZodNodeCompiler,
        is_optional: bool = False,
        fragment: SchemaFragment | None = None,
    ) -> str:
        """
        Compile a node.

        Args:
            node: Resolved validation node
            compiler: Node compiler, for nested nodes and the builder factory
            is_optional: Whether the property may be omitted
            fragment: Literal fragment to apply (node fragment or property override)

        Returns:
            Zod expression source
        """

    def apply_validations(self, builder: ZodBuilder, node: ResolvedValidationSet) -> None:
        """Apply every chain rule of a node to a builder; untranslatable rules are skipped."""
        for validation in node.validations:
            if validation.rule in STRUCTURAL_RULES or validation.rule in CROSS_FIELD_RULES:
                continue
            try:
                applied = builder.apply_rule(
                    validation.rule, validation.parameters, validation.message
                )
            except (IndexError, ValueError) as e:
                logger.debug(
                    f"{node.field_name}: rule '{validation.rule}' has unusable parameters "
                    f"{validation.parameters!r}, skipped: {e}"
                )
                continue
            if not applied:
                logger.debug(
                    f"{node.field_name}: no {type(builder).__name__} translation for "
                    f"rule '{validation.rule}', skipped"
                )

    def finish(
        self,
        builder: ZodBuilder,
        node: ResolvedValidationSet,
        is_optional: bool,
        fragment: SchemaFragment | None,
    ) -> str:
        """Attach the fragment and presence suffixes, then render."""
        builder.set_field_name(node.field_name)
        builder.with_fragment(fragment)
        if node.is_field_nullable():
            builder.nullable()
        if is_optional and not node.is_field_required():
            builder.optional()
        return builder.build()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority})"


__all__ = ["TypeHandler", "STRUCTURAL_RULES"]
