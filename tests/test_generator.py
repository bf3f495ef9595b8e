"""Tests for declaration writing and package generation."""

import unittest
from unittest.mock import MagicMock

from tests import BaseStructTSTestCase, GO_GRAMMAR_AVAILABLE, GO_GRAMMAR_ERROR_MSG
from structts.config import Config, PackageConfig
from structts.exceptions import GenerationError, MalformedTag, UnsupportedConstruct
from structts.generator import DeclarationWriter, Generator, PackageGenerator, substitute_iota
from structts.models import (
    Array, BinaryExpr, Field, Identifier, LiteralValue, Parenthesized, Pointer, StructLiteral, UnaryExpr
)
from structts.translator import TypeTranslator
from structts.treesitter.models import Declaration, FailedAnalysis, FileAnalysis, TypeSpec, ValueSpec


def ident(name):
    return Identifier(name=name)


def literal(raw):
    return LiteralValue(raw=raw)


class TestSubstituteIota(unittest.TestCase):
    def test_identifier(self):
        self.assertEqual(substitute_iota(ident("iota"), 3), literal("3"))

    def test_nested_expression(self):
        node = BinaryExpr(left=literal("1"), op="<<", right=Parenthesized(inner=ident("iota")))
        expected = BinaryExpr(left=literal("1"), op="<<", right=Parenthesized(inner=literal("2")))
        self.assertEqual(substitute_iota(node, 2), expected)

    def test_other_identifiers_untouched(self):
        node = ident("Base")
        self.assertIs(substitute_iota(node, 1), node)


class TestDeclarationWriter(unittest.TestCase):
    def make_writer(self, **config):
        package = PackageConfig(path="api", **config)
        return DeclarationWriter(package, TypeTranslator(package))

    def setUp(self):
        self.writer = self.make_writer()

    def test_struct_becomes_interface(self):
        spec = TypeSpec(
            name="User",
            doc="User is an account.",
            type=StructLiteral(fields=[
                Field(names=["ID"], type=ident("int64"), tag='json:"id"'),
                Field(names=["Email"], type=Pointer(elem=ident("string")), tag='json:"email,omitempty"'),
                Field(names=["password"], type=ident("string")),
            ]),
        )
        self.assertEqual(
            self.writer.type_spec(spec),
            "/**\n"
            " * User is an account.\n"
            " */\n"
            "export interface User {\n"
            "  id: number /* int64 */;\n"
            "  email?: string | undefined;\n"
            "}",
        )

    def test_extends_clause(self):
        spec = TypeSpec(
            name="Admin",
            type=StructLiteral(fields=[
                Field(type=ident("Base"), tag='tstype:",extends"'),
                Field(type=Pointer(elem=ident("Audit")), tag='tstype:",extends"'),
                Field(names=["Name"], type=ident("string")),
            ]),
        )
        self.assertEqual(
            self.writer.type_spec(spec),
            "export interface Admin extends Base, Partial<Audit> {\n  Name: string;\n}",
        )

    def test_generic_alias(self):
        spec = TypeSpec(
            name="Ids",
            type_params=[Field(names=["T"], type=ident("any"))],
            type=Array(elem=ident("T")),
        )
        self.assertEqual(self.writer.type_spec(spec), "export type Ids<T extends any> = T[];")

    def test_trailing_comment(self):
        spec = TypeSpec(name="ID", type=ident("string"), comment="primary key")
        self.assertEqual(self.writer.type_spec(spec), "export type ID = string; // primary key")

    def test_comments_dropped_when_not_preserved(self):
        writer = self.make_writer(preserve_comments="none")
        spec = TypeSpec(name="ID", type=ident("string"), doc="Identifier.", comment="primary key")
        self.assertEqual(writer.type_spec(spec), "export type ID = string;")

    def test_unexported_type_is_skipped(self):
        declaration = Declaration(keyword="type", specs=[TypeSpec(name="internal", type=ident("string"))])
        self.assertEqual(self.writer.write(declaration), [])

    def test_grouped_declaration_doc(self):
        declaration = Declaration(
            keyword="type",
            grouped=True,
            doc="Identifiers.",
            specs=[
                TypeSpec(name="UserID", type=ident("string")),
                TypeSpec(name="orgID", type=ident("string")),
            ],
        )
        self.assertEqual(
            self.writer.write(declaration),
            ["/**\n * Identifiers.\n */", "export type UserID = string;"],
        )

    def test_const_group_with_iota(self):
        declaration = Declaration(
            keyword="const",
            grouped=True,
            specs=[
                ValueSpec(names=["Low"], type=ident("Level"), values=[ident("iota")]),
                ValueSpec(names=["Mid"]),
                ValueSpec(names=["hidden"]),
                ValueSpec(names=["High"], comment="top"),
            ],
        )
        self.assertEqual(
            self.writer.write(declaration),
            [
                "export const Low: Level = 0;",
                "export const Mid: Level = 1;",
                "export const High: Level = 3; // top",
            ],
        )

    def test_const_repeats_expression(self):
        specs = [
            ValueSpec(names=["_"], values=[ident("iota")]),
            ValueSpec(names=["KB"], values=[BinaryExpr(left=literal("1"), op="<<", right=ident("iota"))]),
            ValueSpec(names=["MB"]),
        ]
        self.assertEqual(
            self.writer.const_specs(specs),
            ["export const KB = 1 << 1;", "export const MB = 1 << 2;"],
        )

    def test_const_values(self):
        specs = [
            ValueSpec(names=["Version"], values=[literal('"1.0"')], doc="Version of the API."),
            ValueSpec(names=["Pattern"], values=[literal("`a$b`")]),
            ValueSpec(names=["A", "B", "C"], values=[literal("1"), literal("2")]),
        ]
        self.assertEqual(
            self.writer.const_specs(specs),
            [
                '/**\n * Version of the API.\n */\nexport const Version = "1.0";',
                "export const Pattern = `a\\$b`;",
                "export const A = 1;\nexport const B = 2;",
            ],
        )

    def test_var_declarations_are_not_written(self):
        declaration = Declaration(keyword="var", specs=[ValueSpec(names=["Default"])])
        self.assertEqual(self.writer.write(declaration), [])


class TestPackageGenerator(BaseStructTSTestCase):
    def make_generator(self, analyses, **config):
        parser = MagicMock()
        parser.analyze_package.return_value = analyses
        package = PackageConfig(path=self.temp_dir / "api", **config)
        return PackageGenerator(package, parser), parser

    def analysis(self, file_name, declarations, doc=None):
        return FileAnalysis(
            file_path=str(self.temp_dir / "api" / file_name),
            analyzer="treesitter_go",
            package="api",
            doc=doc,
            declarations=declarations,
        )

    def test_generate(self):
        analyses = [
            self.analysis(
                "ids.go",
                [Declaration(keyword="type", specs=[TypeSpec(name="ID", type=ident("string"))])],
                doc="Package api holds types.",
            ),
            self.analysis("internal.go", [Declaration(keyword="type", specs=[TypeSpec(name="cache", type=ident("string"))])]),
            self.analysis(
                "level.go",
                [Declaration(keyword="const", specs=[ValueSpec(names=["Max"], values=[literal("10")])])],
            ),
        ]
        generator, parser = self.make_generator(
            analyses, frontmatter="import { Base } from './base';\n", exclude_files=["zz_*.go"]
        )

        self.assertEqual(
            generator.generate(),
            "// Code generated by structts. DO NOT EDIT.\n"
            "import { Base } from './base';\n"
            "\n"
            "//////////\n"
            "// source: ids.go\n"
            "/**\n"
            " * Package api holds types.\n"
            " */\n"
            "export type ID = string;\n"
            "\n"
            "//////////\n"
            "// source: level.go\n"
            "export const Max = 10;\n",
        )
        parser.analyze_package.assert_called_once_with(
            self.temp_dir / "api", include_files=[], exclude_files=["zz_*.go"]
        )

    def test_package_doc_requires_default_preserve(self):
        analyses = [
            self.analysis(
                "ids.go",
                [Declaration(keyword="type", specs=[TypeSpec(name="ID", type=ident("string"))])],
                doc="Package api holds types.",
            ),
        ]
        generator, _ = self.make_generator(analyses, preserve_comments="types")
        self.assertNotIn("Package api", generator.generate())

    def test_empty_package(self):
        generator, _ = self.make_generator([])
        self.assertEqual(generator.generate(), "// Code generated by structts. DO NOT EDIT.\n")

    def test_failed_analysis_raises(self):
        failed = FailedAnalysis(file_path="broken.go", analyzer="treesitter_go", reason="syntax errors")
        generator, _ = self.make_generator([failed])
        with self.assertRaises(GenerationError) as context:
            generator.generate()
        self.assertIn("broken.go", str(context.exception))

    def test_translation_error_becomes_generation_error(self):
        spec = TypeSpec(
            name="User",
            type=StructLiteral(fields=[Field(names=["ID"], type=ident("string"), tag='json:"id')]),
        )
        generator, _ = self.make_generator([self.analysis("user.go", [Declaration(keyword="type", specs=[spec])])])

        with self.assertRaises(GenerationError) as context:
            generator.generate()
        self.assertIn("user.go", str(context.exception))
        self.assertIsInstance(context.exception.__cause__, MalformedTag)

    def test_unsupported_construct_becomes_generation_error(self):
        spec = TypeSpec(name="Mask", type=UnaryExpr(op="&", operand=ident("int")))
        generator, _ = self.make_generator([self.analysis("mask.go", [Declaration(keyword="type", specs=[spec])])])

        with self.assertRaises(GenerationError) as context:
            generator.generate()
        self.assertIsInstance(context.exception.__cause__, UnsupportedConstruct)

    def test_missing_package_directory(self):
        package = PackageConfig(path=self.temp_dir / "missing")
        with self.assertRaises(GenerationError):
            PackageGenerator(package).generate()

    def test_write_creates_parent_directories(self):
        analyses = [self.analysis("ids.go", [Declaration(keyword="type", specs=[TypeSpec(name="ID", type=ident("string"))])])]
        output_path = self.temp_dir / "web" / "src" / "api.ts"
        generator, _ = self.make_generator(analyses, output_path=output_path)

        self.assertEqual(generator.write(), output_path)
        self.assertIn("export type ID = string;", output_path.read_text())


@unittest.skipIf(not GO_GRAMMAR_AVAILABLE, f"Skipping generation tests: {GO_GRAMMAR_ERROR_MSG}")
class TestGenerator(BaseStructTSTestCase):
    def test_generate_package(self):
        self.write_go_file("user.go", '''// Package api holds types.
package api

// ID identifies a user.
type ID string

type User struct {
	ID       ID      `json:"id"`
	Email    *string `json:"email,omitempty"`
	internal int
}
''')
        self.write_go_file("user_test.go", "package api\n\ntype Fixture struct{}\n")

        config = Config(packages=[PackageConfig(path=self.temp_dir / "pkg")])
        written = Generator(config).generate()

        self.assertEqual(written, [self.temp_dir / "pkg" / "index.ts"])
        self.assertEqual(
            written[0].read_text(),
            "// Code generated by structts. DO NOT EDIT.\n"
            "\n"
            "//////////\n"
            "// source: user.go\n"
            "/**\n"
            " * Package api holds types.\n"
            " */\n"
            "/**\n"
            " * ID identifies a user.\n"
            " */\n"
            "export type ID = string;\n"
            "\n"
            "export interface User {\n"
            "  id: ID;\n"
            "  email?: string | undefined;\n"
            "}\n",
        )

    def test_no_packages(self):
        self.assertEqual(Generator(Config()).generate(), [])

    def test_stops_at_first_failure(self):
        self.write_go_file("broken.go", "package api\n\ntype Broken struct {\n")
        config = Config(packages=[PackageConfig(path=self.temp_dir / "pkg")])
        with self.assertRaises(GenerationError):
            Generator(config).generate()


if __name__ == '__main__':
    unittest.main()
