"""Compile Laravel-style validation rules into Zod schemas.

Example:
    from zod_schema_compiler import SchemaSource, compile_sources

    source = SchemaSource(
        class_name="App.Http.Requests.StoreOrderRequest",
        type="request",
        rules={
            "status": "required|in:draft,published",
            "items": "required|array",
            "items.*.name": "required|string|max:10",
            "items.*.qty": "required|integer|min:1",
        },
    )
    print(compile_sources([source]))
"""

from .compiler import SchemaCompiler, compile_sources
from .config import CompilerConfig, CompilerConfigLoader, OutputConfig
from .engine.conditional import ConditionalRuleAnalyzer, When
from .engine.models import (
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
from .engine.rules import (
    EnumRule,
    ExcludeIf,
    In,
    NotIn,
    Password,
    ProhibitedIf,
    RequiredIf,
    Rule,
    SchemaRule,
)
from .exceptions import (
    ConfigurationError,
    InheritanceResolutionError,
    MessageResolutionError,
    NoHandlerFoundError,
    SchemaCompilerError,
)

__version__ = "0.4.0"

__all__ = [
    "SchemaCompiler",
    "compile_sources",
    "CompilerConfig",
    "CompilerConfigLoader",
    "OutputConfig",
    "ConditionalRuleAnalyzer",
    "When",
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
    "Rule",
    "In",
    "NotIn",
    "EnumRule",
    "Password",
    "RequiredIf",
    "ProhibitedIf",
    "ExcludeIf",
    "SchemaRule",
    "SchemaCompilerError",
    "MessageResolutionError",
    "InheritanceResolutionError",
    "NoHandlerFoundError",
    "ConfigurationError",
    "__version__",
]
