"""End-to-end compilation tests: properties, root objects, cross-field refinements and output."""

from collections.abc import Callable
from pathlib import Path

import pytest

from zod_schema_compiler import compile_sources
from zod_schema_compiler.compiler import SchemaCompiler
from zod_schema_compiler.config import CompilerConfig, OutputConfig
from zod_schema_compiler.engine.messages import YamlMessageCatalog
from zod_schema_compiler.engine.models import (
    FieldMetadata,
    InheritValidationFrom,
    SchemaFragment,
    SchemaSource,
)
from zod_schema_compiler.engine.rules import In, SchemaRule
from zod_schema_compiler.exceptions import InheritanceResolutionError
from zod_schema_compiler.zod.refinements import (
    RELATIVE_DATES,
    data_accessor,
    empty_check,
    looks_like_date,
    normalize_dependent_field,
    path_literal,
)
from zod_schema_compiler.zod.writer import type_alias_name

CompileFields = Callable[..., dict[str, str]]
MakeCompiler = Callable[..., SchemaCompiler]

REQUIRED_REFINE = ".refine((val) => val != undefined && val != null && val != '', "


def address_and_user_sources() -> list[SchemaSource]:
    return [
        SchemaSource(
            class_name="App.Data.UserData",
            type="data",
            rules={"email": "required|email", "address": "required"},
            metadata={
                "address": FieldMetadata(
                    is_nested_object=True, nested_class="App.Data.AddressData"
                ),
            },
        ),
        SchemaSource(
            class_name="App.Data.AddressData",
            type="data",
            rules={"city": "required|string"},
        ),
    ]


class TestPropertyCompilation:
    """Single properties compile to the expected Zod chains."""

    def test_items_scenario(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {
                "items": "array",
                "items.*.name": "required|string|max:10",
                "items.*.qty": "integer|min:1",
            }
        )
        name_message = "The items.*.name field is required."
        qty_message = "The items.*.qty field must be an integer."
        assert fields["items"] == (
            "z.array(z.object({ "
            f"name: z.string({{ error: '{name_message}' }}).trim()"
            f"{REQUIRED_REFINE}{{ error: '{name_message}' }})"
            f".min(1, '{name_message}')"
            ".max(10, 'The items.*.name field must not be greater than 10 characters.'), "
            "qty: z.number({error: (val) => (val != undefined && val != null ? "
            f"'{qty_message}' : undefined)}})"
            f".int('{qty_message}')"
            ".min(1, 'The items.*.qty field must be at least 1.')"
            ".optional()"
            " })).optional()"
        )

    def test_array_of_required_item_properties(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {
                "items": "required|array",
                "items.*.name": "required|string|max:10",
                "items.*.qty": "required|integer|min:1",
            }
        )
        name_message = "The items.*.name field is required."
        qty_message = "The items.*.qty field must be an integer."
        assert fields["items"] == (
            "z.array(z.object({ "
            f"name: z.string({{ error: '{name_message}' }}).trim()"
            f"{REQUIRED_REFINE}{{ error: '{name_message}' }})"
            f".min(1, '{name_message}')"
            ".max(10, 'The items.*.name field must not be greater than 10 characters.'), "
            "qty: z.number({error: (val) => (val != undefined && val != null ? "
            f"'{qty_message}' : undefined)}})"
            f".int('{qty_message}')"
            ".min(1, 'The items.*.qty field must be at least 1.')"
            " }))"
        )

    def test_required_enum(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"status": "required|in:draft,published"})
        assert fields["status"] == (
            'z.enum(["draft", "published"], { message: "The status field is required." })'
        )

    def test_optional_enum_has_no_message(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"status": "in:pending,active,done"})
        assert fields["status"] == 'z.enum(["pending", "active", "done"]).optional()'

    def test_enum_from_rule_object(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"size": ["required", In(["s", "m", "l"])]})
        assert fields["size"].startswith('z.enum(["s", "m", "l"]')

    def test_nullable_integer(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"age": "nullable|integer|min:0"})
        assert fields["age"] == (
            "z.number({error: (val) => (val != undefined && val != null ? "
            "'The age field must be an integer.' : undefined)})"
            ".int('The age field must be an integer.')"
            ".min(0, 'The age field must be at least 0.')"
            ".nullable().optional()"
        )

    def test_required_nullable_string(self, compile_fields: CompileFields) -> None:
        code = compile_fields({"nickname": "required|nullable|string"})["nickname"]
        assert "val != undefined" in code
        assert code.endswith(".nullable()")
        assert ".optional()" not in code

    def test_minimum_survives_later_required(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {"password": "string|min:8|required", "contact": "email|min:6|required"}
        )
        assert ".min(8, 'The password field must be at least 8 characters.')" in fields["password"]
        assert ".min(1" not in fields["password"]
        assert ".min(6, 'The contact field must be at least 6 characters.')" in fields["contact"]
        assert ".min(1" not in fields["contact"]

    def test_non_numeric_minimum_is_dropped(self, compile_fields: CompileFields) -> None:
        code = compile_fields({"name": "required|string|min:abc"})["name"]
        assert ".min(abc" not in code
        assert ".min(1, 'The name field is required.')" in code

    def test_plain_optional_string(self, compile_fields: CompileFields) -> None:
        assert compile_fields({"nickname": "string"})["nickname"] == "z.string().trim().optional()"

    def test_rule_order_is_chain_order(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"code": "max:8|min:2|alpha_num"})
        code = fields["code"]
        assert code.index(".max(8") < code.index(".min(2") < code.index(".regex(/^[A-Za-z0-9]+$/")

    def test_type_precedence(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {
                "flag": "boolean|in:0,1",
                "count": "integer|string",
                "contact": "string|email",
            }
        )
        assert fields["flag"].startswith("z.preprocess(")
        assert fields["count"].startswith("z.number(")
        assert fields["contact"].startswith("z.email(")

    def test_custom_message_wins(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {"email": "required|email"}, messages={"email.required": "We need your email."}
        )
        assert fields["email"] == (
            "z.email({ error: 'The email field must be a valid email address.' })"
            ".trim().min(1, 'We need your email.')"
        )

    def test_custom_attribute_names(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"dob": "required|date"}, attributes={"dob": "date of birth"})
        assert "'The date of birth field is required.'" in fields["dob"]

    def test_nested_message_keys(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {"tags": "array", "tags.*": "string|max:20"},
            messages={"tags.*.max": "Each tag is 20 characters at most."},
        )
        assert fields["tags"] == (
            "z.array(z.string().max(20, 'Each tag is 20 characters at most.').trim()).optional()"
        )


class TestFragments:
    """Literal fragments extend or replace compiled chains."""

    def test_append_fragment(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {"code": "string"}, fragments={"code": SchemaFragment.append(".length(6)")}
        )
        assert fields["code"] == "z.string().trim().length(6).optional()"

    def test_replace_fragment(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {"code": "required|string|max:5"},
            fragments={"code": SchemaFragment.replace("z.literal('X')")},
        )
        assert fields["code"] == "z.literal('X')"

    def test_append_on_untyped_array(self, compile_fields: CompileFields) -> None:
        fields = compile_fields({"tags": "array"}, fragments={"tags": SchemaFragment.append(".max(3)")})
        assert fields["tags"] == "z.array(z.any()).max(3).optional()"

    def test_rule_object_fragment(self, compile_fields: CompileFields) -> None:
        def starts_with_x(attribute, value, fail):
            if not value.startswith("X"):
                fail("Codes start with X.")

        rule = SchemaRule.make(starts_with_x).append(".startsWith('X')")
        fields = compile_fields({"code": ["required", "string", rule]})
        assert fields["code"].startswith("z.string({ error: 'The code field is required.' })")
        assert fields["code"].endswith(".min(1, 'The code field is required.').startsWith('X')")

    def test_typed_references(self, compile_fields: CompileFields) -> None:
        fields = compile_fields(
            {"address": "", "lines": "array|min:1"},
            metadata={
                "address": FieldMetadata(is_nested_object=True, nested_class="App.Data.AddressData"),
                "lines": FieldMetadata(is_collection=True, element_class="App.Data.LineData"),
            },
        )
        assert fields["address"] == "AddressDataSchema.optional()"
        assert fields["lines"] == (
            "z.array(LineDataSchema).min(1, 'The lines field must have at least 1 items.').optional()"
        )


class TestCrossFieldRefinements:
    """Rules between fields compile into a superRefine on the nearest enclosing object."""

    def generate(self, make_compiler: MakeCompiler, rules: dict) -> str:
        compiler = make_compiler([SchemaSource(class_name="App.Http.Requests.FormRequest", rules=rules)])
        return compiler.generator.generate(compiler.extract()[0])

    def test_root_object_without_refinements(self, make_compiler: MakeCompiler) -> None:
        assert self.generate(make_compiler, {"a": "string"}) == (
            "z.object({\n    a: z.string().trim().optional(),\n})"
        )
        assert self.generate(make_compiler, {}) == "z.object({})"

    def test_required_if(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler, {"type": "required|in:a,b", "reason": "required_if:type,b"}
        )
        assert "    reason: z.string().trim().optional(),\n})" in schema
        assert ".superRefine((data, ctx) => {\n" in schema
        assert (
            "    if (String(data.type) === 'b' && (data.reason === undefined || "
            "data.reason === null || String(data.reason).trim() === '')) {"
        ) in schema
        assert "            message: 'The reason field is required when type is b.'," in schema
        assert "            path: ['reason']," in schema
        assert schema.endswith("\n})")

    def test_required_if_several_values(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(make_compiler, {"plan": "string", "seats": "integer|required_if:plan,team,pro"})
        assert "['team', 'pro'].includes(String(data.plan))" in schema
        assert "data.seats === undefined || data.seats === null)" in schema

    def test_confirmed(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(make_compiler, {"password": "required|string|confirmed"})
        assert "const confirmationValue = data.password_confirmation;" in schema
        assert "message: 'The password field confirmation does not match.'," in schema

    def test_same_and_different(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler,
            {"email": "email", "email_repeat": "same:email", "alias": "different:email"},
        )
        assert "const otherValue = data.email;" in schema
        assert "if (String(currentValue ?? '') !== String(otherValue ?? '')) {" in schema
        assert "if (String(currentValue ?? '') === String(otherValue ?? '')) {" in schema

    def test_date_comparisons(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler,
            {
                "start": "date|after:today",
                "end": "date|after:start",
                "deadline": "date|before:2024-01-01",
            },
        )
        assert "    (() => {" in schema
        assert RELATIVE_DATES["today"] in schema
        assert "const raw = data.start;" in schema
        assert "if ((valueTimestamp <= referenceTimestamp)) {" in schema
        assert "Date.parse('2024-01-01')" in schema
        assert "if ((valueTimestamp >= referenceTimestamp)) {" in schema

    def test_accepted_if(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(make_compiler, {"role": "string", "terms": "accepted_if:role,admin"})
        assert "if (String(data.role) === 'admin' && !(" in schema
        assert 'normalized === "yes"' in schema

    def test_declined_if(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(make_compiler, {"role": "string", "ads": "declined_if:role,guest"})
        assert 'normalized === "no"' in schema

    def test_array_item_refinements(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler,
            {
                "items": "array",
                "items.*.type": "required|in:a,b",
                "items.*.reason": "required_if:type,b|string",
                "items.*.start": "date",
                "items.*.end": "date|after:start",
            },
        )
        assert schema.count(".superRefine((data, ctx) => {") == 1
        assert "data.items" not in schema
        assert (
            "if (String(data.type) === 'b' && (data.reason === undefined || "
            "data.reason === null || String(data.reason).trim() === '')) {"
        ) in schema
        assert "path: ['reason']," in schema
        assert "const currentRaw = data.end;" in schema
        assert "const raw = data.start;" in schema
        assert "path: ['end']," in schema
        assert schema.endswith(")).optional(),\n})")

    def test_nested_item_refinements_stay_on_inner_items(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler,
            {
                "items.*.variations.*.kind": "string",
                "items.*.variations.*.note": "required_if:kind,x|string",
            },
        )
        assert schema.count(".superRefine((data, ctx) => {") == 1
        assert "if (String(data.kind) === 'x' && (data.note === undefined" in schema
        assert "path: ['note']," in schema

    def test_nested_object_refinements_on_root(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler,
            {
                "address.kind": "string",
                "address.note": "required_if:address.kind,x|string",
            },
        )
        assert "    address: z.object({ kind: z.string().trim().optional(), note: " in schema
        assert (
            "if (String(data.address?.kind) === 'x' && (data.address?.note === undefined"
        ) in schema
        assert "path: ['address', 'note']," in schema
        assert schema.endswith("\n})")

    def test_reference_outside_item_is_skipped(self, make_compiler: MakeCompiler) -> None:
        schema = self.generate(
            make_compiler,
            {"code": "string", "items.*.code": "string|same:meta.code"},
        )
        assert "superRefine" not in schema


class TestGeneratorHelpers:
    def test_data_accessor(self) -> None:
        assert data_accessor("name") == "data.name"
        assert data_accessor("address.city") == "data.address?.city"
        assert data_accessor("first-name") == "data['first-name']"
        assert data_accessor("items.0") == "data.items?.['0']"

    def test_path_literal(self) -> None:
        assert path_literal("address.city") == "['address', 'city']"

    def test_empty_check(self) -> None:
        assert empty_check("data.tags", "array") == (
            "!Array.isArray(data.tags) || data.tags.length === 0"
        )
        assert empty_check("data.n", "number") == "data.n === undefined || data.n === null"

    def test_normalize_dependent_field(self) -> None:
        assert normalize_dependent_field("items.0.type.kind", "items.0.type") == "items.0.kind"
        assert normalize_dependent_field("role", "reason") == "role"

    def test_looks_like_date(self) -> None:
        assert looks_like_date("2024-01-01")
        assert not looks_like_date("start_date")
        assert not looks_like_date("date2")

    def test_type_alias_name(self) -> None:
        assert type_alias_name("UserDataSchema") == "UserDataSchemaType"
        assert type_alias_name("Account") == "AccountType"
        assert type_alias_name("SchemaFieldSchema") == "SchemaFieldSchemaType"
        assert type_alias_name("SchemaInput") == "SchemaInputType"


class TestSchemaCompiler:
    """Whole runs: ordering, output formats and files."""

    def test_module_output(self, catalog: YamlMessageCatalog) -> None:
        output = compile_sources(
            [SchemaSource(class_name="App.Data.TagData", rules={"name": "string"})],
            message_source=catalog,
        )
        assert output.startswith("import { z } from 'zod';\n\nexport const TagDataSchema = z.object({\n")
        assert "    name: z.string().trim().optional(),\n});\n" in output
        assert "export type TagDataSchemaType = z.infer<typeof TagDataSchema>;\n" in output
        assert "import { App }" not in output

    def test_compilation_is_idempotent(self, catalog: YamlMessageCatalog) -> None:
        sources = address_and_user_sources()
        first = compile_sources(sources, message_source=catalog)
        second = compile_sources(sources, message_source=catalog)
        assert first == second

    def test_dependencies_come_first(self, make_compiler: MakeCompiler) -> None:
        compiler = make_compiler(address_and_user_sources())
        output = compiler.compile()

        assert output.index("export const AddressDataSchema") < output.index(
            "export const UserDataSchema"
        )
        assert "    address: AddressDataSchema,\n" in output
        assert compiler.extract()[0].dependencies == ["AddressDataSchema"]

    def test_app_type_annotations(self, make_compiler: MakeCompiler) -> None:
        config = CompilerConfig(use_app_types=True, app_types_import_path="@/types")
        output = make_compiler(address_and_user_sources(), config).compile()

        assert output.startswith("import { z } from 'zod';\n\nimport { App } from '@/types';\n\n")
        assert "export const UserDataSchema: z.ZodType<App.UserData> = z.object({" in output

    def test_no_annotation_without_app_types(self, make_compiler: MakeCompiler) -> None:
        output = make_compiler(address_and_user_sources()).compile()
        assert "z.ZodType<" not in output

    def test_namespace_output(self, make_compiler: MakeCompiler) -> None:
        config = CompilerConfig(
            use_app_types=True, output=OutputConfig(format="namespace", namespace="Forms")
        )
        output = make_compiler(address_and_user_sources(), config).compile()

        assert output.startswith("import { z } from 'zod';\n\nexport namespace Forms {\n")
        assert "  export const AddressDataSchema = z.object({\n" in output
        assert "      city: z.string(" in output
        assert "  export type UserDataSchemaType = z.infer<typeof UserDataSchema>;" in output
        assert "z.ZodType<" not in output
        assert output.rstrip().endswith("}")

    def test_separate_files(self, make_compiler: MakeCompiler) -> None:
        files = make_compiler(address_and_user_sources()).compile_files()

        assert set(files) == {"AddressDataSchema.ts", "UserDataSchema.ts"}
        assert files["AddressDataSchema.ts"].startswith("import { z } from 'zod';\n\nexport const")
        user = files["UserDataSchema.ts"]
        assert "import { AddressDataSchema } from './AddressDataSchema';" in user
        assert user.index("import { AddressDataSchema }") < user.index("export const UserDataSchema")

    def test_write_single_file(self, make_compiler: MakeCompiler, tmp_path: Path) -> None:
        target = tmp_path / "out" / "schemas.ts"
        config = CompilerConfig(output=OutputConfig(path=str(target)))
        compiler = make_compiler(address_and_user_sources(), config)

        assert compiler.write() == [target]
        assert target.read_text(encoding="utf-8") == compiler.compile()

    def test_write_separate_files(self, make_compiler: MakeCompiler, tmp_path: Path) -> None:
        config = CompilerConfig(output=OutputConfig(separate_files=True))
        written = make_compiler(address_and_user_sources(), config).write(tmp_path / "schemas")

        assert sorted(p.name for p in written) == ["AddressDataSchema.ts", "UserDataSchema.ts"]
        assert all(p.exists() for p in written)

    def test_write_without_path(self, make_compiler: MakeCompiler) -> None:
        with pytest.raises(ValueError, match="No output path"):
            make_compiler(address_and_user_sources()).write()

    def test_custom_handlers_from_config(self, make_compiler: MakeCompiler) -> None:
        config = CompilerConfig(
            custom_handlers=["zod_schema_compiler.zod.handlers.universal:UniversalTypeHandler"]
        )
        compiler = make_compiler(address_and_user_sources(), config)
        assert len(compiler.registry.get_handlers()) == 5

    def test_duplicate_sources_warn(
        self, make_compiler: MakeCompiler, caplog: pytest.LogCaptureFixture
    ) -> None:
        compiler = make_compiler(
            [
                SchemaSource(class_name="App.Data.TagData", rules={"a": "string"}),
                SchemaSource(class_name="App.Data.TagData", rules={"b": "string"}),
            ]
        )
        assert "Duplicate source App.Data.TagData" in caplog.text
        assert [p.name for p in compiler.extract()[0].properties] == ["b"]

    def test_inheritance_error_surfaces(self, make_compiler: MakeCompiler) -> None:
        compiler = make_compiler(
            [
                SchemaSource(
                    class_name="App.Data.ProfileData",
                    inheritance={"email": InheritValidationFrom(source_class="App.Data.UserData")},
                )
            ]
        )
        with pytest.raises(InheritanceResolutionError):
            compiler.compile()
