"""
tests/test_templates.py
Tests for zodgen.templates.SchemaEmitter: module layout, imports, helper
schemas, complete (lazy) schemas, enums and the barrel module.
"""

from __future__ import annotations

import pathlib
import textwrap
from typing import Any

import pytest

from zodgen.models import DataModel, EnumDescriptor, GenerationOptions, GeneratorConfig
from zodgen.native_types import NativeTypeMap, parse_native_types
from zodgen.templates import SchemaEmitter

from tests.conftest import SCHEMA_EXAMPLE_PATH, make_field, make_model


def _emitter(native: bool = True, options: Any = None, **config: Any) -> SchemaEmitter:
    native_types = (
        parse_native_types(SCHEMA_EXAMPLE_PATH.read_text(encoding="utf-8"))
        if native
        else NativeTypeMap()
    )
    return SchemaEmitter(GeneratorConfig(**config), options, native_types)


EXPECTED_USER_MODULE: str = textwrap.dedent(
    """\
    import * as z from 'zod'
    import { Role } from '@prisma/client'
    import { CompletePost, RelatedPostModel } from './index'

    export const UserModel = z.object({
      id: z.uuid(),
      /**
       * The user's login address
       */
      email: z.email().max(255),
      name: z.string().max(64).nullish(),
      role: z.enum(Role).default("USER"),
    })

    export interface CompleteUser extends z.infer<typeof UserModel> {
      posts: CompletePost[]
    }

    /**
     * RelatedUserModel contains all relations on your model in addition to the scalars
     *
     * NOTE: Lazy required in case of potential circular dependencies within schema
     */
    export const RelatedUserModel: z.ZodSchema<CompleteUser> = z.lazy(() => UserModel.extend({
      posts: RelatedPostModel.array(),
    }))
    """
)


# ===========================================================================
# Model modules
# ===========================================================================


class TestModelModule:
    def test_user_module_exact(self, blog_data_model: DataModel) -> None:
        user = blog_data_model.get_model("User")
        assert user is not None
        assert _emitter().render_model_file(user) == EXPECTED_USER_MODULE

    def test_post_module_helpers_and_refinements(self, blog_data_model: DataModel) -> None:
        post = blog_data_model.get_model("Post")
        assert post is not None
        text = _emitter().render_model_file(post)

        assert "import { Decimal } from 'decimal.js'" in text
        assert "import { CompleteUser, RelatedUserModel } from './index'" in text
        assert "// Helper schema for JSON fields" in text
        assert "// Helper schema for Decimal fields" in text
        assert text.index("Helper schema for JSON") < text.index("Helper schema for Decimal")
        assert "  title: z.string().max(120)," in text
        assert r"  price: z.number().refine(x => /^\d{1,8}(\.\d{1,2})?$/.test(x.toString()))," in text
        assert "  metadata: jsonSchema," in text
        assert "  published: z.boolean().default(false)," in text
        assert "  authorId: z.uuid()," in text
        assert "  author: RelatedUserModel," in text

    def test_without_native_types(self, blog_data_model: DataModel) -> None:
        user = blog_data_model.get_model("User")
        assert user is not None
        text = _emitter(native=False).render_model_file(user)
        assert "  id: z.string()," in text
        assert "  email: z.email()," in text

    def test_model_documentation_becomes_jsdoc(self) -> None:
        model = make_model("Tag", [make_field("label", "String")], documentation="A label")
        text = _emitter(native=False).render_model_file(model)
        assert "/**\n * A label\n */\nexport const TagModel = z.object({" in text

    def test_comment_terminator_in_documentation_is_escaped(self) -> None:
        model = make_model(
            "Tag",
            [make_field("x", "String", documentation="see */ here")],
            documentation="ends */ early",
        )
        text = _emitter(native=False).render_model_file(model)
        assert text.count("*/") == 2
        assert "   * see *\\/ here\n   */" in text
        assert " * ends *\\/ early\n */" in text


class TestCompleteSchema:
    def test_self_relation_not_imported(self, self_relation_model: Any) -> None:
        text = _emitter(native=False).render_model_file(self_relation_model)
        assert "./index" not in text
        assert "  parent?: CompleteCategory | null" in text
        assert "  children: CompleteCategory[]" in text
        assert "  parent: RelatedCategoryModel.nullish()," in text
        assert "  children: RelatedCategoryModel.array()," in text
        assert "z.lazy(() => CategoryModel.extend({" in text

    def test_relation_model_disabled(self, blog_data_model: DataModel) -> None:
        user = blog_data_model.get_model("User")
        assert user is not None
        text = _emitter(relationModel=False).render_model_file(user)
        assert "CompleteUser" not in text
        assert "./index" not in text
        assert "posts" not in text

    def test_relation_model_default_naming(self, blog_data_model: DataModel) -> None:
        user = blog_data_model.get_model("User")
        assert user is not None
        text = _emitter(relationModel="default").render_model_file(user)
        assert "export const _UserModel = z.object({" in text
        assert "extends z.infer<typeof _UserModel>" in text
        assert "export const UserModel: z.ZodSchema<CompleteUser> = z.lazy(() => _UserModel.extend({" in text
        assert "import { CompletePost, PostModel } from './index'" in text
        assert "  posts: PostModel.array()," in text

    def test_camel_case_and_suffix(self, blog_data_model: DataModel) -> None:
        user = blog_data_model.get_model("User")
        assert user is not None
        text = _emitter(modelCase="camelCase", modelSuffix="Schema").render_model_file(user)
        assert "export const userSchema = z.object({" in text
        assert "export const relatedUserSchema: z.ZodSchema<CompleteUser>" in text
        assert "import { CompletePost, relatedPostSchema } from './index'" in text

    def test_model_without_relations_has_no_complete_schema(self) -> None:
        model = make_model("Log", [make_field("id", "Int"), make_field("msg", "String")])
        text = _emitter(native=False).render_model_file(model)
        assert "z.lazy" not in text
        assert "interface" not in text


# ===========================================================================
# Imports & helpers
# ===========================================================================


class TestImportsAndHelpers:
    def test_zod_import(self) -> None:
        model = make_model("Log", [make_field("id", "Int")])
        text = _emitter(native=False, zodImport="zod/v4").render_model_file(model)
        assert text.startswith("import * as z from 'zod/v4'\n")

    def test_standalone_enum_import(self) -> None:
        model = make_model(
            "Account",
            [make_field("role", "Role", "enum"), make_field("backup", "Role", "enum", required=False)],
        )
        text = _emitter(native=False, useStandaloneEnums=True).render_model_file(model)
        assert "import { roleSchema } from './enums'" in text
        assert "  role: roleSchema," in text
        assert "  backup: roleSchema.nullish()," in text
        assert "@prisma/client" not in text

    def test_client_path_relative(self, tmp_path: pathlib.Path) -> None:
        options = GenerationOptions(
            output_path=str(tmp_path / "generated" / "zod"),
            client_path=str(tmp_path / "generated" / "client"),
        )
        model = make_model("Account", [make_field("role", "Role", "enum")])
        text = _emitter(native=False, options=options).render_model_file(model)
        assert "import { Role } from '../client'" in text

    def test_imports_namespace(self, tmp_path: pathlib.Path) -> None:
        options = GenerationOptions(
            output_path=str(tmp_path / "prisma" / "zod"),
            schema_path=str(tmp_path / "prisma" / "schema.prisma"),
        )
        model = make_model("Log", [make_field("id", "Int")])
        text = _emitter(native=False, options=options, imports="../src/schemas").render_model_file(model)
        assert "import * as imports from '../../src/schemas'" in text

    def test_json_helper_nullability(self) -> None:
        model = make_model("Doc", [make_field("body", "Json")])
        strict = _emitter(native=False).render_model_file(model)
        loose = _emitter(native=False, prismaJsonNullability=False).render_model_file(model)
        assert "z.null()" not in strict
        assert "const literalSchema = z.union([z.string(), z.number(), z.boolean(), z.null()])" in loose
        assert "type Literal = boolean | number | string | null" in loose

    def test_decimal_helper_skipped_for_custom_field(self) -> None:
        model = make_model(
            "Price", [make_field("amount", "Decimal", documentation="@zod.custom(z.string())")]
        )
        text = _emitter(native=False).render_model_file(model)
        assert "decimal.js" not in text
        assert "  amount: z.string()," in text

    def test_decimal_helper_disabled(self) -> None:
        model = make_model("Price", [make_field("amount", "Decimal")])
        text = _emitter(native=False, useDecimalJs=False).render_model_file(model)
        assert "decimal.js" not in text
        assert "decimalSchema" not in text


# ===========================================================================
# Enums, barrel & generate_all
# ===========================================================================


class TestModules:
    def test_enums_file(self) -> None:
        emitter = _emitter(native=False, useStandaloneEnums=True)
        text = emitter.render_enums_file([EnumDescriptor(name="Role", values=["USER", "ADMIN"])])
        assert text == (
            "import * as z from 'zod'\n\n"
            "export const roleSchema = z.enum(['USER', 'ADMIN'])\n\n"
            "export type RoleSchema = z.infer<typeof roleSchema>\n"
        )

    def test_generate_all_order_and_barrel(self, blog_data_model: DataModel) -> None:
        files = _emitter(useStandaloneEnums=True).generate_all(blog_data_model)
        assert list(files) == ["index.ts", "enums.ts", "user.ts", "post.ts"]
        assert files["index.ts"] == (
            "export * from './user'\nexport * from './post'\nexport * from './enums'\n"
        )

    def test_generate_all_inline_enums(self, blog_data_model: DataModel) -> None:
        files = _emitter().generate_all(blog_data_model)
        assert list(files) == ["index.ts", "user.ts", "post.ts"]
        assert "./enums" not in files["index.ts"]

    def test_standalone_without_enums_skips_enums_file(self) -> None:
        data_model = DataModel(models=[make_model("Log", [make_field("id", "Int")])])
        files = _emitter(native=False, useStandaloneEnums=True).generate_all(data_model)
        assert list(files) == ["index.ts", "log.ts"]

    def test_empty_data_model(self) -> None:
        assert _emitter(native=False).generate_all(DataModel()) == {"index.ts": ""}

    def test_generate_files_records(self, blog_data_model: DataModel) -> None:
        records = _emitter().generate_files(blog_data_model)
        assert [r.path for r in records] == ["index.ts", "user.ts", "post.ts"]
        assert all(r.line_count > 0 for r in records)

    def test_models_render_independently(self, blog_data_model: DataModel) -> None:
        emitter = _emitter()
        forward = [emitter.render_model_file(m) for m in blog_data_model.models]
        backward = [emitter.render_model_file(m) for m in reversed(blog_data_model.models)]
        assert forward == list(reversed(backward))

    @pytest.mark.parametrize("relation_model", [True, "default"])
    def test_every_model_module_exports_scalar_schema(
        self, blog_data_model: DataModel, relation_model: Any
    ) -> None:
        files = _emitter(relationModel=relation_model).generate_all(blog_data_model)
        prefix = "_" if relation_model == "default" else ""
        assert f"export const {prefix}UserModel = z.object({{" in files["user.ts"]
        assert f"export const {prefix}PostModel = z.object({{" in files["post.ts"]
