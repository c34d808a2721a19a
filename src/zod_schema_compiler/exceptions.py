"""Schema compilation exceptions.

Only precondition violations and configuration problems surface as
exceptions. Soft gaps (unknown rules, unknown date formats, ambiguous
nesting) are handled where they occur and never raise.
"""

from __future__ import annotations


class SchemaCompilerError(Exception):
    """Base class for every error raised by the compiler."""


class MessageResolutionError(SchemaCompilerError):
    """
    Message resolution invoked without its required context.

    Raised when the message service is asked to resolve a message before the
    field, the rule, or the message source has been supplied. This is a
    programmer error in the calling code, not a data edge case.

    Attributes:
        missing: Name of the missing piece of context
        field: Field path being resolved (if known)
        rule: Rule name being resolved (if known)
    """

    def __init__(self, missing: str, field: str | None = None, rule: str | None = None):
        """
        Initialize message resolution exception.

        Args:
            missing: Which precondition was not met (e.g. "field", "rule", "message source")
            field: Field path being resolved
            rule: Rule name being resolved
        """
        self.missing = missing
        self.field = field
        self.rule = rule
        super().__init__(
            f"Cannot resolve validation message: {missing} is not set "
            f"(field={field!r}, rule={rule!r}). "
            f"Call with_context() with a field, a rule and a message source first."
        )

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"MessageResolutionError(missing={self.missing!r}, "
            f"field={self.field!r}, rule={self.rule!r})"
        )


class InheritanceResolutionError(SchemaCompilerError):
    """
    Inherited validation rules could not be resolved.

    Raised when a field declares that it inherits its rules from another
    class which is not part of the current generation run, or from a field
    that the source class does not declare.

    Attributes:
        target_class: Class declaring the inheritance
        target_field: Field carrying the declaration
        source_class: Class the rules should come from
        reason: Short explanation of what went wrong
    """

    def __init__(self, target_class: str, target_field: str, source_class: str, reason: str):
        self.target_class = target_class
        self.target_field = target_field
        self.source_class = source_class
        self.reason = reason
        super().__init__(
            f"Cannot inherit validation for '{target_class}.{target_field}' "
            f"from '{source_class}': {reason}"
        )

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"InheritanceResolutionError(target={self.target_class}.{self.target_field}, "
            f"source={self.source_class!r})"
        )


class NoHandlerFoundError(SchemaCompilerError):
    """
    No registered type handler accepts a property.

    The universal handler accepts every type, so this only happens when the
    registry was cleared or populated with restrictive custom handlers.
    Silently dropping a whole field is never acceptable, so generation stops.

    Attributes:
        field: Property name that could not be compiled
        inferred_type: Inferred type of the property
    """

    def __init__(self, field: str | None, inferred_type: str):
        self.field = field
        self.inferred_type = inferred_type
        super().__init__(
            f"No type handler registered for field '{field}' "
            f"(inferred type: '{inferred_type}'). "
            f"Register a handler for this type or keep the universal fallback handler."
        )

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"NoHandlerFoundError(field={self.field!r}, type={self.inferred_type!r})"


class ConfigurationError(SchemaCompilerError):
    """Compiler configuration or schema definition file is invalid."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to load configuration from {path}: {detail}")

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"ConfigurationError(path={self.path!r})"


__all__ = [
    "SchemaCompilerError",
    "MessageResolutionError",
    "InheritanceResolutionError",
    "NoHandlerFoundError",
    "ConfigurationError",
]
