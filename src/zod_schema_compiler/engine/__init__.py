"""Rule resolution engine.

Turns raw rule maps into resolved validation trees:

- RuleNormalizer: rule strings, lists and rule objects -> RuleEntry lists
- TypeInferenceService: semantic type of a field from its rules
- MessageResolutionService: human-readable messages per rule
- NestedRuleGrouper / NestedValidationBuilder: flat dotted paths -> trees
- DataClassRuleProcessor: inherited validation expansion
- SchemaExtractor: the whole pipeline for one class
"""

from .categories import LARAVEL_RULES_VERSION
from .conditional import ConditionalRuleAnalyzer, When
from .extractor import SchemaExtractor
from .grouper import NestedRuleGrouper, RuleGroup
from .inheritance import DataClassRuleProcessor
from .messages import MessageResolutionService, MessageSource, YamlMessageCatalog
from .models import (
    ExtractedSchemaData,
    FieldMetadata,
    FragmentMode,
    InheritValidationFrom,
    ResolvedValidation,
    ResolvedValidationSet,
    RuleEntry,
    SchemaFragment,
    SchemaPropertyData,
    SchemaSource,
)
from .naming import SchemaNameGenerator
from .normalizer import NormalizedRules, RuleNormalizer
from .tree_builder import NestedValidationBuilder
from .type_inference import TypeInferenceService
from .validation_resolver import ValidationResolver

__all__ = [
    "LARAVEL_RULES_VERSION",
    "ConditionalRuleAnalyzer",
    "When",
    "SchemaExtractor",
    "NestedRuleGrouper",
    "RuleGroup",
    "DataClassRuleProcessor",
    "MessageResolutionService",
    "MessageSource",
    "YamlMessageCatalog",
    "ExtractedSchemaData",
    "FieldMetadata",
    "FragmentMode",
    "InheritValidationFrom",
    "ResolvedValidation",
    "ResolvedValidationSet",
    "RuleEntry",
    "SchemaFragment",
    "SchemaPropertyData",
    "SchemaSource",
    "SchemaNameGenerator",
    "NormalizedRules",
    "RuleNormalizer",
    "NestedValidationBuilder",
    "TypeInferenceService",
    "ValidationResolver",
]
