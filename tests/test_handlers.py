"""Tests for the type handler registry and the built-in handlers."""

import pytest

from zod_schema_compiler.engine.models import (
    ResolvedValidation,
    ResolvedValidationSet,
    SchemaFragment,
)
from zod_schema_compiler.engine.validation_resolver import ValidationResolver
from zod_schema_compiler.exceptions import ConfigurationError, NoHandlerFoundError
from zod_schema_compiler.zod.handlers import (
    DataClassTypeHandler,
    EnumTypeHandler,
    InRuleTypeHandler,
    TypeHandler,
    TypeHandlerRegistry,
    UniversalTypeHandler,
    create_default_registry,
)
from zod_schema_compiler.zod.node_compiler import ZodNodeCompiler


class MoneyHandler(TypeHandler):
    """Money amounts as numbers with two decimal places."""

    priority = 250
    description = "Money amounts"

    def can_handle_type(self, inferred_type: str) -> bool:
        return inferred_type == "money"

    def handle(self, node, compiler, is_optional=False, fragment=None) -> str:
        builder = compiler.factory.create("number")
        self.apply_validations(builder, node)
        builder.validate_decimal([2])
        return self.finish(builder, node, is_optional, fragment)


def money_node() -> ResolvedValidationSet:
    return ResolvedValidationSet(
        field_name="price",
        inferred_type="money",
        validations=[ResolvedValidation(rule="min", parameters=("0",))],
    )


class TestTypeHandlerRegistry:
    """Handlers are consulted by descending priority."""

    def test_default_order(self) -> None:
        handlers = create_default_registry().get_handlers()
        assert [type(h) for h in handlers] == [
            InRuleTypeHandler,
            EnumTypeHandler,
            DataClassTypeHandler,
            UniversalTypeHandler,
        ]
        assert [h.priority for h in handlers] == [400, 300, 200, 1]

    def test_registries_are_independent(self) -> None:
        first = create_default_registry()
        first.register(MoneyHandler())
        assert len(create_default_registry().get_handlers()) == 4

    def test_get_handler_by_type(self) -> None:
        registry = create_default_registry()
        assert isinstance(registry.get_handler("enum:a,b"), EnumTypeHandler)
        assert isinstance(registry.get_handler("DataObject:App.Data.AddressData"), DataClassTypeHandler)
        assert isinstance(registry.get_handler("UserData"), DataClassTypeHandler)
        assert isinstance(registry.get_handler("string"), UniversalTypeHandler)

    def test_custom_handler_slots_in_by_priority(self) -> None:
        registry = create_default_registry()
        registry.register(MoneyHandler())
        assert [type(h).__name__ for h in registry.get_handlers()] == [
            "InRuleTypeHandler",
            "EnumTypeHandler",
            "MoneyHandler",
            "DataClassTypeHandler",
            "UniversalTypeHandler",
        ]

    def test_custom_handler_compiles_nodes(self) -> None:
        registry = create_default_registry()
        registry.register(MoneyHandler())
        code = ZodNodeCompiler(registry).compile(money_node(), is_optional=True)

        assert code.startswith("z.number().min(0).refine((val) => {const str = String(val);")
        assert "parts[1].length === 2" in code
        assert code.endswith(".optional()")

    def test_unregister(self) -> None:
        registry = create_default_registry()
        assert registry.unregister(UniversalTypeHandler) == 1
        assert registry.unregister(UniversalTypeHandler) == 0
        assert len(registry.get_handlers()) == 3

    def test_no_handler_found(self) -> None:
        registry = create_default_registry()
        registry.clear()

        with pytest.raises(NoHandlerFoundError):
            registry.get_handler("string")

        node = ResolvedValidationSet(field_name="name", inferred_type="string")
        with pytest.raises(NoHandlerFoundError) as exc_info:
            ZodNodeCompiler(registry).compile(node)
        assert exc_info.value.field == "name"
        assert exc_info.value.inferred_type == "string"

    def test_repr(self) -> None:
        assert repr(EnumTypeHandler()) == "EnumTypeHandler(priority=300)"


class TestLoadCustomHandlers:
    """Handlers can be named by import path in configuration."""

    def test_colon_path(self) -> None:
        registry = TypeHandlerRegistry()
        loaded = registry.load_custom_handlers(
            ["zod_schema_compiler.zod.handlers.universal:UniversalTypeHandler"]
        )
        assert loaded == 1
        assert isinstance(registry.get_handlers()[0], UniversalTypeHandler)

    def test_dotted_path(self) -> None:
        registry = TypeHandlerRegistry()
        registry.load_custom_handlers(["zod_schema_compiler.zod.handlers.enum.EnumTypeHandler"])
        assert isinstance(registry.get_handlers()[0], EnumTypeHandler)

    def test_unimportable_path(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot import custom handler"):
            TypeHandlerRegistry().load_custom_handlers(["no_such_package.handlers:Missing"])

    def test_not_a_handler(self) -> None:
        with pytest.raises(ConfigurationError, match="not a TypeHandler subclass"):
            TypeHandlerRegistry().load_custom_handlers(
                ["zod_schema_compiler.config:CompilerConfig"]
            )


class TestBuiltInHandlers:
    """Handler selection for resolved nodes."""

    def test_in_rule_on_string_like_type_becomes_enum(
        self, resolver: ValidationResolver, node_compiler: ZodNodeCompiler
    ) -> None:
        node = resolver.resolve("starts", "date|in:2024-01-01,2024-06-01")
        assert node.inferred_type == "string"
        assert isinstance(
            node_compiler.registry.get_handler_for_property(node), InRuleTypeHandler
        )
        assert node_compiler.compile(node, is_optional=True) == (
            'z.enum(["2024-01-01", "2024-06-01"]).optional()'
        )

    def test_in_rule_on_number_stays_number(
        self, resolver: ValidationResolver, node_compiler: ZodNodeCompiler
    ) -> None:
        node = resolver.resolve("level", "integer|in:1,2")
        assert isinstance(
            node_compiler.registry.get_handler_for_property(node), UniversalTypeHandler
        )
        assert "[1, 2].includes(val)" in node_compiler.compile(node)

    def test_enum_values_keep_commas(self, node_compiler: ZodNodeCompiler) -> None:
        node = ResolvedValidationSet(
            field_name="size",
            inferred_type="enum:a,b,c",
            validations=[ResolvedValidation(rule="in", parameters=("a,b", "c"))],
        )
        assert node_compiler.compile(node) == 'z.enum(["a,b", "c"])'

    def test_enum_reference(self, resolver: ValidationResolver, node_compiler: ZodNodeCompiler) -> None:
        node = resolver.resolve("status", "required|in:draft,published|enum:StatusEnum")
        assert node_compiler.compile(node) == (
            'z.enum(StatusEnum, { message: "The status field is required." })'
        )

    def test_data_object_reference(self, node_compiler: ZodNodeCompiler) -> None:
        node = ResolvedValidationSet(
            field_name="address",
            inferred_type="DataObject:App.Data.AddressData",
            validations=[ResolvedValidation(rule="nullable", is_nullable=True)],
        )
        assert node_compiler.compile(node, is_optional=True) == (
            "AddressDataSchema.nullable().optional()"
        )

    def test_data_collection_keeps_size_rules(self, node_compiler: ZodNodeCompiler) -> None:
        node = ResolvedValidationSet(
            field_name="lines",
            inferred_type="DataCollection:App.Data.LineData",
            validations=[
                ResolvedValidation(rule="array"),
                ResolvedValidation(rule="max", parameters=("10",), message="Ten lines at most."),
            ],
        )
        assert node_compiler.compile(node) == "z.array(LineDataSchema).max(10, 'Ten lines at most.')"

    def test_replace_fragment_skips_children(self, node_compiler: ZodNodeCompiler) -> None:
        item = ResolvedValidationSet(field_name="tags.*", inferred_type="string")
        node = ResolvedValidationSet(field_name="tags", inferred_type="array", nested_validations=item)
        code = node_compiler.compile(
            node, is_optional=True, fragment=SchemaFragment.replace("z.array(z.string()).length(2)")
        )
        assert code == "z.array(z.string()).length(2).optional()"

    def test_inline_object_properties_optional_unless_required(
        self, resolver: ValidationResolver, node_compiler: ZodNodeCompiler
    ) -> None:
        node = ResolvedValidationSet(
            field_name="meta",
            inferred_type="object",
            object_properties={
                "flag": resolver.resolve("meta.flag", "boolean"),
                "count": resolver.resolve("meta.count", "integer"),
            },
        )
        code = node_compiler.compile(node)
        assert code.startswith("z.object({ flag: z.preprocess(")
        assert "z.boolean().optional())" in code
        assert "count: z.number({error:" in code
        assert code.endswith(".int('The meta.count field must be an integer.').optional() })")
