"""Tests for the Zod expression builders."""

import pytest

from zod_schema_compiler.engine.models import SchemaFragment
from zod_schema_compiler.zod.builders import (
    ZodArrayBuilder,
    ZodBooleanBuilder,
    ZodBuilderFactory,
    ZodEmailBuilder,
    ZodEnumBuilder,
    ZodFileBuilder,
    ZodInlineObjectBuilder,
    ZodNumberBuilder,
    ZodObjectReferenceBuilder,
    ZodPasswordBuilder,
    ZodStringBuilder,
    ZodUrlBuilder,
    convert_php_regex,
    escape_js,
    message_param,
    property_key,
)
from zod_schema_compiler.zod.builders.boolean import BOOLEAN_PREPROCESS
from zod_schema_compiler.zod.builders.string import date_format_pattern


class TestBaseBuilder:
    """Rendering order shared by every builder."""

    def test_escape_js(self) -> None:
        assert escape_js("Can't be \"empty\"\n") == "Can\\'t be \\\"empty\\\"\\n"
        assert escape_js(None) == ""

    def test_message_param(self) -> None:
        assert message_param(None) == ""
        assert message_param("Too long") == ", 'Too long'"

    def test_suffix_order(self) -> None:
        builder = ZodNumberBuilder().optional().nullable()
        assert builder.build() == "z.number().nullable().optional()"

    def test_append_fragment_follows_chain(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("min", ["1"], None)
        builder.with_fragment(SchemaFragment.append(".multipleOf(5)")).optional()
        assert builder.build() == "z.number().min(1).multipleOf(5).optional()"

    def test_replace_fragment_discards_chain(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("max", ["5"], None)
        builder.with_fragment(SchemaFragment.replace("z.literal('x')")).nullable()
        assert builder.build() == "z.literal('x').nullable()"

    def test_unknown_rule_not_applied(self) -> None:
        builder = ZodNumberBuilder()
        assert not builder.apply_rule("alpha", [], None)
        assert not builder.supports("alpha")
        assert builder.build() == "z.number()"

    def test_dotted_rule_dispatch(self) -> None:
        assert ZodPasswordBuilder().supports("password.letters")
        assert not ZodStringBuilder().supports("password.letters")


class TestStringBuilder:
    def test_plain_string_trims_last(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("max", ["255"], None)
        assert builder.build() == "z.string().max(255).trim()"

    def test_required_string(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("required", [], "Name needed.")
        builder.apply_rule("max", ["5"], None)
        assert builder.build() == (
            "z.string({ error: 'Name needed.' }).trim()"
            ".refine((val) => val != undefined && val != null && val != '', "
            "{ error: 'Name needed.' })"
            ".min(1, 'Name needed.').max(5)"
        )

    def test_required_message_is_escaped(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("required", [], "Can't be blank.")
        assert "z.string({ error: 'Can\\'t be blank.' })" in builder.build()

    def test_tighter_bounds_win(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("min", ["2"], None)
        builder.apply_rule("between", ["3", "8"], "Wrong length.")
        assert builder.build() == "z.string().min(3, 'Wrong length.').max(8, 'Wrong length.').trim()"

        builder = ZodStringBuilder()
        builder.apply_rule("min", ["5"], "Five at least.")
        builder.apply_rule("min", ["2"], None)
        builder.apply_rule("max", ["4"], None)
        builder.apply_rule("max", ["9"], None)
        assert builder.build() == "z.string().min(5, 'Five at least.').max(4).trim()"

    def test_required_keeps_larger_minimum(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("min", ["8"], "Eight at least.")
        builder.apply_rule("required", [], "Password needed.")
        code = builder.build()
        assert ".min(8, 'Eight at least.')" in code
        assert ".min(1" not in code

        builder = ZodStringBuilder()
        builder.apply_rule("required", [], "Password needed.")
        builder.apply_rule("min", ["8"], "Eight at least.")
        code = builder.build()
        assert code.endswith(".min(8, 'Eight at least.')")
        assert ".min(1" not in code

    def test_required_raises_zero_minimum(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("min", ["0"], None)
        builder.apply_rule("required", [], "Needed.")
        assert builder.build().endswith(".min(1, 'Needed.')")

    def test_non_numeric_size_parameters_skipped(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("min", ["abc"], None)
        builder.apply_rule("max", ["other_field"], None)
        builder.apply_rule("size", ["n"], None)
        builder.apply_rule("between", ["x", "y"], None)
        builder.apply_rule("between", ["3"], None)
        assert builder.build() == "z.string().trim()"

    def test_exclusive_bounds(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("lt", ["10"], None)
        builder.apply_rule("gt", ["other_field"], None)
        assert builder.build() == "z.string().max(9).trim()"

    def test_regex(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("regex", ["/^[a-z\\.]+$/i"], "Lowercase only.")
        assert builder.build() == "z.string().regex(/^[a-z.]+$/i, 'Lowercase only.').trim()"

    def test_format_rules_override_base(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("ip", [], None)
        assert builder.build() == "z.union([z.ipv4(), z.ipv6()])"

        builder = ZodStringBuilder()
        builder.apply_rule("ulid", [], "Bad id.")
        assert builder.build() == "z.ulid({ message: 'Bad id.' })"

    def test_required_with_base_override_uses_refine(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("ipv4", [], None)
        builder.apply_rule("required", [], "Address needed.")
        code = builder.build()
        assert code.startswith("z.ipv4().refine((val) => {")
        assert "{ message: 'Address needed.' }" in code

    def test_starts_with(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("starts_with", ["ab"], None)
        assert builder.build() == "z.string().startsWith('ab').trim()"

        builder = ZodStringBuilder()
        builder.apply_rule("starts_with", ["ab", "cd"], None)
        assert "['ab', 'cd'].some((prefix) => val.startsWith(prefix))" in builder.build()

    def test_in_refine(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("not_in", ["root", "admin"], "Reserved name.")
        assert builder.build() == (
            "z.string().refine((val) => !['root', 'admin'].includes(val), "
            "{ message: 'Reserved name.' }).trim()"
        )

    def test_uuid(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("uuid", [], None)
        assert builder.build() == "z.string().uuid().trim()"

    def test_date_format(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("date_format", ["Y-m-d"], None)
        assert builder.build() == (
            r"z.string().regex(/^\d{4}-\d{2}-\d{2}$/) /*__date_format__*/.trim()"
        )

    def test_unsupported_date_format_accepts_anything(self) -> None:
        builder = ZodStringBuilder()
        builder.apply_rule("date_format", ["c"], None)
        assert ".regex(/^.+$/)" in builder.build()


class TestRegexConversion:
    @pytest.mark.parametrize(
        ("php", "js"),
        [
            (r"/^\d+$/", r"/^\d+$/"),
            (r"#^\d+/\d+$#", r"/^\d+\/\d+$/"),
            ("/^abc$/x", "/^abc$/"),
            ("/^abc$/imx", "/^abc$/im"),
            ("//^abc$/i/", "/^abc$/i"),
            ("/^[a-z\\.]+$/i", "/^[a-z.]+$/i"),
            ("^plain$", "/^plain$/"),
        ],
    )
    def test_convert_php_regex(self, php: str, js: str) -> None:
        assert convert_php_regex(php) == js

    def test_date_format_pattern(self) -> None:
        assert date_format_pattern("Y-m-d") == r"/^\d{4}-\d{2}-\d{2}$/"
        assert date_format_pattern("H:i") == r"/^\d{2}:\d{2}$/"
        assert date_format_pattern("d/m/Y") == r"/^\d{2}\/\d{2}\/\d{4}$/"
        assert date_format_pattern("c") is None


class TestUrlAndEmail:
    def test_url_protocols(self) -> None:
        builder = ZodUrlBuilder()
        builder.apply_rule("url", ["https"], None)
        assert builder.build() == "z.url({ protocol: /^https$/ })"

        builder = ZodUrlBuilder()
        builder.apply_rule("url", ["http", "https"], "Bad link.")
        assert builder.build() == "z.url({ error: 'Bad link.', protocol: /^(?:http|https)$/ })"

    def test_plain_url(self) -> None:
        assert ZodUrlBuilder().optional().build() == "z.url().optional()"

    def test_email(self) -> None:
        assert ZodEmailBuilder().build() == "z.email().trim()"

        builder = ZodEmailBuilder()
        builder.apply_rule("required", [], "We need your email.")
        builder.apply_rule("email", [], "Bad email.")
        assert builder.build() == (
            "z.email({ error: 'Bad email.' }).trim().min(1, 'We need your email.')"
        )

    def test_email_minimum_survives_required(self) -> None:
        builder = ZodEmailBuilder()
        builder.apply_rule("min", ["6"], "Six at least.")
        builder.apply_rule("required", [], "We need your email.")
        assert builder.build() == (
            "z.email({ error: 'We need your email.' }).trim().min(6, 'Six at least.')"
        )


class TestPasswordBuilder:
    def test_password_checks(self) -> None:
        builder = ZodPasswordBuilder()
        builder.apply_rule("password", [], None)
        builder.apply_rule("min", ["8"], None)
        builder.apply_rule("password.numbers", [1], None)
        builder.apply_rule("password.uncompromised", [0], None)
        assert builder.build() == (
            r"z.string().min(8).regex(/\d/, 'The password must contain at least one number.').trim()"
        )

    def test_mixed_case_refine(self) -> None:
        builder = ZodPasswordBuilder()
        builder.apply_rule("password.mixed", [1], "Mix it up.")
        assert "/[a-z]/.test(val) && /[A-Z]/.test(val)" in builder.build()


class TestNumberBuilder:
    def test_integer_message_moves_to_base(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("integer", [], "Whole numbers only.")
        builder.apply_rule("min", ["0"], None)
        assert builder.build() == (
            "z.number({error: (val) => (val != undefined && val != null ? "
            "'Whole numbers only.' : undefined)}).int('Whole numbers only.').min(0)"
        )

    def test_required_without_integer(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("required", [], "Amount needed.")
        assert builder.build() == (
            "z.number().refine((val) => val != undefined && val != null, "
            "{ error: 'Amount needed.'})"
        )

    def test_between_and_size(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("between", ["1", "10"], None)
        assert builder.build() == "z.number().min(1).max(10)"

        builder = ZodNumberBuilder()
        builder.apply_rule("size", ["5"], None)
        assert builder.build() == "z.number().min(5).max(5)"

    def test_field_reference_bound_skipped(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("gt", ["min_price"], None)
        assert builder.build() == "z.number()"

    def test_membership(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("in", ["1", "2"], None)
        assert builder.build() == (
            "z.number().refine((val) => [1, 2].includes(val), "
            "{ message: 'The selected value is invalid.' })"
        )

        builder = ZodNumberBuilder()
        builder.apply_rule("not_in", ["1", "x"], None)
        assert "![1, 'x'].includes(val)" in builder.build()

    def test_digits(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("digits", ["4"], None)
        assert builder.build() == (
            "z.number().refine((val) => {const str = String(Math.abs(Math.floor(val))); "
            "return str.length === 4; }, "
            "{ message: 'The value has an invalid number of digits.' })"
        )

    def test_decimal_range(self) -> None:
        builder = ZodNumberBuilder()
        builder.apply_rule("decimal", ["1", "3"], None)
        assert "return decimals >= 1 && decimals <= 3;" in builder.build()


class TestBooleanBuilder:
    def test_preprocess_wraps_whole_expression(self) -> None:
        builder = ZodBooleanBuilder().optional()
        assert builder.build() == f"z.preprocess({BOOLEAN_PREPROCESS}, z.boolean().optional())"

    def test_accepted(self) -> None:
        builder = ZodBooleanBuilder()
        builder.apply_rule("accepted", [], "Please accept.")
        assert builder.build().endswith(
            "z.boolean().refine((val) => val === true, { message: 'Please accept.' }))"
        )

    def test_replace_fragment_not_wrapped(self) -> None:
        builder = ZodBooleanBuilder().with_fragment(SchemaFragment.replace("z.literal(true)"))
        assert builder.build() == "z.literal(true)"


class TestEnumBuilder:
    def test_literal_values(self) -> None:
        builder = ZodEnumBuilder().set_values(["draft", "published"])
        assert builder.build() == 'z.enum(["draft", "published"])'

    def test_reference(self) -> None:
        builder = ZodEnumBuilder()
        builder.apply_rule("enum", ["Status"], None)
        builder.apply_rule("in", ["a"], None)
        assert builder.build() == "z.enum(Status)"

    def test_message_escaped_with_slashes(self) -> None:
        builder = ZodEnumBuilder().set_values(["a"]).set_message('Pick "one"')
        assert builder.build() == 'z.enum(["a"], { message: "Pick \\"one\\"" })'

    def test_chain_rules_ignored(self) -> None:
        builder = ZodEnumBuilder().set_values(["a", "b"])
        builder.add_rule(".min(1)")
        assert builder.optional().build() == 'z.enum(["a", "b"]).optional()'


class TestArrayAndObjectBuilders:
    def test_array(self) -> None:
        builder = ZodArrayBuilder("z.string()")
        builder.apply_rule("min", ["1"], None)
        builder.apply_rule("max", ["3"], "Three at most.")
        assert builder.build() == "z.array(z.string()).min(1).max(3, 'Three at most.')"
        assert ZodArrayBuilder().build() == "z.array(z.any())"

    def test_distinct(self) -> None:
        builder = ZodArrayBuilder("z.string()")
        builder.apply_rule("distinct", ["ignore_case"], None)
        assert 'item.toLowerCase()' in builder.build()

    def test_inline_object(self) -> None:
        builder = ZodInlineObjectBuilder(
            {"name": "z.string()", "first-name": "z.string()", "meta.key": "z.any()"}
        )
        assert builder.build() == "z.object({ name: z.string(), 'first-name': z.string() })"
        assert ZodInlineObjectBuilder().build() == "z.object({})"

    def test_reference(self) -> None:
        builder = ZodObjectReferenceBuilder("AddressDataSchema").nullable().optional()
        builder.add_rule(".min(1)")
        assert builder.build() == "AddressDataSchema.nullable().optional()"

    def test_property_key(self) -> None:
        assert property_key("first_name") == "first_name"
        assert property_key("$ref") == "$ref"
        assert property_key("first-name") == "'first-name'"
        assert property_key("2fa") == "'2fa'"


class TestFileBuilder:
    def test_sizes_in_bytes(self) -> None:
        builder = ZodFileBuilder()
        builder.apply_rule("max", ["2048"], None)
        assert builder.build() == "z.file().max(2097152)"

    def test_mimes(self) -> None:
        builder = ZodFileBuilder()
        builder.apply_rule("mimes", ["jpg", "png", "jpeg", "pdf", "xyz"], None)
        assert builder.build() == "z.file().mime(['image/jpeg', 'image/png', 'application/pdf'])"

    def test_image_after_mimes_keeps_mimes(self) -> None:
        builder = ZodFileBuilder()
        builder.apply_rule("mimes", ["pdf"], None)
        builder.apply_rule("image", [], None)
        assert builder.build() == "z.file().mime(['application/pdf'])"

    def test_image(self) -> None:
        builder = ZodFileBuilder()
        builder.apply_rule("image", ["allow_svg"], None)
        assert builder.build() == (
            "z.file().mime(['image/jpeg', 'image/png', 'image/gif', 'image/bmp', "
            "'image/webp', 'image/svg+xml'])"
        )

    def test_dimensions(self) -> None:
        builder = ZodFileBuilder()
        builder.apply_rule("dimensions", ["min_width=100", "ratio=3/2", "unknown=1"], None)
        code = builder.build()
        assert "resolve(img.width >= 100 && Math.abs((img.width / img.height) - 1.5) < 0.01);" in code
        assert "reader.readAsDataURL(file);" in code


class TestBuilderFactory:
    def test_builders_by_type(self) -> None:
        factory = ZodBuilderFactory()
        assert isinstance(factory.create("number"), ZodNumberBuilder)
        assert isinstance(factory.create("uuid"), ZodStringBuilder)
        assert isinstance(factory.create("password"), ZodPasswordBuilder)
        assert factory.create("enum:a,b").build() == 'z.enum(["a", "b"])'

    def test_register(self) -> None:
        factory = ZodBuilderFactory()
        factory.register("money", ZodNumberBuilder)
        assert isinstance(factory.create("money"), ZodNumberBuilder)

    def test_helpers(self) -> None:
        factory = ZodBuilderFactory()
        assert factory.create_enum(reference="Status").build() == "z.enum(Status)"
        assert factory.create_array("z.number()").build() == "z.array(z.number())"
        assert factory.create_reference("UserDataSchema").build() == "UserDataSchema"
