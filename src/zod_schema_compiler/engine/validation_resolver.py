"""
Single-field validation resolution.

Turns the raw rules of one field path into a ResolvedValidationSet node:
rules are normalized, the semantic type is inferred, a message is resolved
for every rule and any fragment carried by a rule object is attached.
"""

from __future__ import annotations

import logging
from typing import Any

from .categories import META_RULES, REQUIRED_RULES
from .messages.resolver import MessageResolutionService
from .models import ResolvedValidation, ResolvedValidationSet
from .normalizer import NormalizedRules, RuleNormalizer
from .type_inference import TypeInferenceService

logger = logging.getLogger(__name__)

# Structural rules that never carry a message of their own
_MESSAGELESS_RULES = META_RULES - REQUIRED_RULES


class ValidationResolver:
    """Resolves one field's raw rules into a tree node."""

    def __init__(
        self,
        messages: MessageResolutionService,
        type_inference: TypeInferenceService | None = None,
        normalizer: RuleNormalizer | None = None,
    ):
        self.messages = messages
        self.type_inference = type_inference or TypeInferenceService()
        self.normalizer = normalizer or RuleNormalizer()

    def resolve(self, field: str, rules: Any, is_item: bool = False) -> ResolvedValidationSet:
        """
        Resolve a field's rules.

        Args:
            field: Field path used for messages (and wildcard type detection)
            rules: Raw rule value, or NormalizedRules
            is_item: The node describes array items; a trailing wildcard in
                ``field`` then does not imply an array type

        Returns:
            Leaf ResolvedValidationSet (callers attach nesting)
        """
        normalized = self.normalizer.normalize(rules)
        if not normalized.entries:
            return ResolvedValidationSet(
                field_name=field, inferred_type="string", schema_fragment=normalized.fragment
            )

        inferred = self.type_inference.infer_type(normalized, None if is_item else field)
        return ResolvedValidationSet(
            field_name=field,
            validations=self.resolve_validations(field, normalized),
            inferred_type=inferred,
            schema_fragment=normalized.fragment,
        )

    def resolve_validations(
        self, field: str, normalized: NormalizedRules
    ) -> list[ResolvedValidation]:
        """Resolve the message of every rule, in declaration order."""
        is_numeric = self.type_inference.is_numeric_field(normalized)
        resolved: list[ResolvedValidation] = []

        for entry in normalized.entries:
            message = None
            if entry.name not in _MESSAGELESS_RULES:
                message = self.messages.resolve(
                    field,
                    entry.name,
                    entry.parameters,
                    is_numeric_field=is_numeric,
                    rules=normalized.entries,
                )
            resolved.append(
                ResolvedValidation(
                    rule=entry.name,
                    parameters=entry.parameters,
                    message=message,
                    is_required=entry.name in REQUIRED_RULES,
                    is_nullable=entry.name == "nullable",
                )
            )

        return resolved


__all__ = ["ValidationResolver"]
