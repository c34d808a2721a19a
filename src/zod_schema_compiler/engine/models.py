"""Data model for the rule-resolution and schema-compilation pipeline.

The pipeline moves through these shapes:

    SchemaSource (raw rule map of one class)
        -> RuleEntry lists (normalized rules, one list per field path)
        -> ResolvedValidationSet trees (typed, nested, messages resolved)
        -> SchemaPropertyData / ExtractedSchemaData (handed to the compiler)

ResolvedValidationSet is the tree node. A node is either a scalar leaf, an
array (nested_validations describes the item), or an object
(object_properties maps property names to child nodes). Nodes are never
mutated once the resolver returns them; compilation only reads them.

Example:
    node = ResolvedValidationSet(
        field_name="age",
        inferred_type="number",
        validations=[
            ResolvedValidation(rule="nullable", is_nullable=True),
            ResolvedValidation(rule="integer", message="The age field must be an integer."),
        ],
    )
    node.is_field_nullable()  # True
    node.is_field_required()  # False
"""

from __future__ import annotations

import csv
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .categories import UNSPLIT_PARAMETER_RULES, canonical_rule_name

RuleParameter = str | int | float


class RuleEntry(BaseModel):
    """
    One normalized rule: a canonical name plus its ordered parameters.

    Equality for de-duplication is by name only (see same_rule()); full
    model equality still compares parameters.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Canonical snake_case rule name")
    parameters: tuple[RuleParameter, ...] = Field(
        default=(), description="Ordered rule parameters"
    )

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Fold the rule name to its canonical spelling."""
        return canonical_rule_name(v)

    @classmethod
    def parse(cls, segment: str) -> RuleEntry:
        """
        Parse a single ``name:p1,p2`` segment.

        ``regex`` and ``not_regex`` keep their parameter whole because the
        pattern itself may contain commas. Other parameters are read as one
        CSV record, so quoted values (``in:"a,b",c``) survive intact.

        Args:
            segment: One rule segment, already split off a pipe string

        Returns:
            Parsed RuleEntry
        """
        name, sep, raw = segment.strip().partition(":")
        name = canonical_rule_name(name)
        if not sep:
            return cls(name=name)
        if name in UNSPLIT_PARAMETER_RULES:
            return cls(name=name, parameters=(raw,))
        record = next(csv.reader([raw], skipinitialspace=True), [])
        return cls(name=name, parameters=tuple(p.strip() for p in record))

    def same_rule(self, other: RuleEntry) -> bool:
        """Whether both entries name the same rule."""
        return self.name == other.name

    def __str__(self) -> str:
        if not self.parameters:
            return self.name
        return f"{self.name}:{','.join(str(p) for p in self.parameters)}"


class FragmentMode(str, Enum):
    """How a schema fragment combines with the compiled chain."""

    APPEND = "append"  # Concatenated after the compiled chain
    REPLACE = "replace"  # Discards the compiled chain for the node


class SchemaFragment(BaseModel):
    """
    User-authored literal Zod code attached to a field.

    The code is opaque: it is never parsed or validated, only placed in the
    output verbatim.
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Literal Zod code")
    mode: FragmentMode = Field(default=FragmentMode.REPLACE, description="Append or replace")

    @classmethod
    def literal(cls, code: str) -> SchemaFragment:
        """Create a fragment, choosing append mode when the code starts with a dot."""
        mode = FragmentMode.APPEND if code.lstrip().startswith(".") else FragmentMode.REPLACE
        return cls(code=code, mode=mode)

    @classmethod
    def append(cls, code: str) -> SchemaFragment:
        """Create an append fragment; whitespace is collapsed and a leading dot ensured."""
        collapsed = " ".join(code.split())
        if not collapsed.startswith("."):
            collapsed = "." + collapsed
        return cls(code=collapsed, mode=FragmentMode.APPEND)

    @classmethod
    def replace(cls, code: str) -> SchemaFragment:
        """Create a replace fragment."""
        return cls(code=code.strip(), mode=FragmentMode.REPLACE)

    def is_append(self) -> bool:
        return self.mode is FragmentMode.APPEND

    def is_replace(self) -> bool:
        return self.mode is FragmentMode.REPLACE


class ResolvedValidation(BaseModel):
    """A rule with its resolved human-readable message."""

    model_config = ConfigDict(frozen=True)

    rule: str = Field(description="Canonical rule name")
    parameters: tuple[RuleParameter, ...] = Field(default=(), description="Rule parameters")
    message: str | None = Field(default=None, description="Resolved error message")
    is_required: bool = Field(default=False, description="Rule makes the field required")
    is_nullable: bool = Field(default=False, description="Rule makes the field nullable")

    def first_parameter(self, default: Any = None) -> Any:
        return self.parameters[0] if self.parameters else default


class ResolvedValidationSet(BaseModel):
    """
    Fully resolved validation tree for one field path.

    Attributes:
        field_name: Field path (may contain ``*`` segments)
        validations: Resolved rules in declaration order
        inferred_type: Semantic type (string, number, boolean, array, object,
            email, url, uuid, password, file, ``enum:<values>`` or a
            schema reference type)
        nested_validations: Item node for arrays
        object_properties: Child nodes for objects
        schema_fragment: Literal fragment attached to this node
    """

    field_name: str = Field(description="Field path")
    validations: list[ResolvedValidation] = Field(default_factory=list)
    inferred_type: str = Field(default="string", description="Semantic type of the field")
    nested_validations: ResolvedValidationSet | None = Field(
        default=None, description="Item node when the field is an array"
    )
    object_properties: dict[str, ResolvedValidationSet] | None = Field(
        default=None, description="Property nodes when the field is an object"
    )
    schema_fragment: SchemaFragment | None = Field(
        default=None, description="Literal fragment attached during normalization"
    )

    @model_validator(mode="after")
    def check_single_shape(self) -> ResolvedValidationSet:
        """A node cannot be both an array and an object."""
        if self.nested_validations is not None and self.object_properties is not None:
            raise ValueError(
                f"Field '{self.field_name}' cannot carry both nested_validations "
                f"and object_properties"
            )
        return self

    def is_field_required(self) -> bool:
        return any(v.is_required for v in self.validations)

    def is_field_nullable(self) -> bool:
        return any(v.is_nullable for v in self.validations)

    def has_validation(self, rule: str) -> bool:
        return any(v.rule == rule for v in self.validations)

    def get_validation(self, rule: str) -> ResolvedValidation | None:
        return next((v for v in self.validations if v.rule == rule), None)

    def get_validations_by_type(self, rule: str) -> list[ResolvedValidation]:
        return [v for v in self.validations if v.rule == rule]

    def get_message(self, rule: str) -> str | None:
        validation = self.get_validation(rule)
        return validation.message if validation else None

    def get_rule_names(self) -> list[str]:
        return [v.rule for v in self.validations]

    def has_nested_validations(self) -> bool:
        return self.nested_validations is not None

    def has_object_properties(self) -> bool:
        return bool(self.object_properties)

    def is_array_type(self) -> bool:
        return self.inferred_type == "array"

    def is_object_type(self) -> bool:
        return self.inferred_type == "object"

    def with_fragment(self, fragment: SchemaFragment | None) -> ResolvedValidationSet:
        """Return a copy carrying a different fragment."""
        return self.model_copy(update={"schema_fragment": fragment})


class SchemaPropertyData(BaseModel):
    """One top-level property handed to the compiler."""

    name: str = Field(description="Property name")
    is_optional: bool = Field(default=False, description="Property may be omitted")
    validations: ResolvedValidationSet = Field(description="Resolved validation tree")
    schema_override: SchemaFragment | None = Field(
        default=None, description="Fragment overriding or extending the compiled output"
    )

    def effective_fragment(self) -> SchemaFragment | None:
        """Property-level override first, then the fragment attached to the node."""
        return self.schema_override or self.validations.schema_fragment


SchemaType = Literal["request", "data", "rules"]


class ExtractedSchemaData(BaseModel):
    """Everything the compiler needs to render one named schema."""

    name: str = Field(description="Schema variable name, e.g. UserSchema")
    class_name: str | None = Field(default=None, description="Source class identifier")
    type: SchemaType = Field(default="rules", description="Kind of source class")
    properties: list[SchemaPropertyData] = Field(default_factory=list)
    dependencies: list[str] = Field(
        default_factory=list, description="Other schema names referenced by properties"
    )

    def get_property(self, name: str) -> SchemaPropertyData | None:
        return next((p for p in self.properties if p.name == name), None)


class FieldMetadata(BaseModel):
    """
    Extraction-layer knowledge about one field.

    Data classes know whether a constructor parameter is a nested typed
    object or a collection of typed items. Plain rule arrays carry none of
    this, in which case the grouper falls back to marker entries and its
    naming heuristic.
    """

    model_config = ConfigDict(frozen=True)

    is_nested_object: bool = False
    is_optional: bool = False
    is_collection: bool = False
    nested_class: str | None = Field(
        default=None, description="Class of a nested typed object"
    )
    element_class: str | None = Field(
        default=None, description="Class of the items of a typed collection"
    )


class InheritValidationFrom(BaseModel):
    """Declaration that a field takes its rules from another class's field."""

    model_config = ConfigDict(frozen=True)

    source_class: str = Field(min_length=1, description="Class to inherit from")
    source_field: str | None = Field(
        default=None, description="Field on the source class (defaults to the target field)"
    )


class SchemaSource(BaseModel):
    """
    Raw input for one class, as produced by class discovery.

    Attributes:
        class_name: Class identifier (may be namespaced with dots or backslashes)
        rules: Field path -> rule value (pipe string, list, or rule object)
        messages: ``field.rule`` -> custom message
        attributes: Field path -> display name used in messages
        metadata: Field path -> FieldMetadata
        inheritance: Target field -> InheritValidationFrom
        fragments: Field path -> SchemaFragment declared on the field itself
        type: Kind of source class
        schema_name: Explicit schema name (overrides the generated name)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    class_name: str = Field(min_length=1)
    rules: dict[str, Any] = Field(default_factory=dict)
    messages: dict[str, str] = Field(default_factory=dict)
    attributes: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, FieldMetadata] = Field(default_factory=dict)
    inheritance: dict[str, InheritValidationFrom] = Field(default_factory=dict)
    fragments: dict[str, SchemaFragment] = Field(default_factory=dict)
    type: SchemaType = "rules"
    schema_name: str | None = None


__all__ = [
    "RuleParameter",
    "RuleEntry",
    "FragmentMode",
    "SchemaFragment",
    "ResolvedValidation",
    "ResolvedValidationSet",
    "SchemaPropertyData",
    "SchemaType",
    "ExtractedSchemaData",
    "FieldMetadata",
    "InheritValidationFrom",
    "SchemaSource",
]
