"""Go-specific Tree-sitter analyzer."""

import logging
import re
from pathlib import Path
from typing import List, Optional

from tree_sitter import Node, Tree

from .base import BaseAnalyzer
from ..models import Declaration, FileAnalysis, TypeSpec, ValueSpec
from ...exceptions import MalformedTag, UnsupportedConstruct
from ...tags import unquote_go_string
from ...models import (
    Array, BinaryExpr, Field, GenericApplication, Identifier, InterfaceLiteral,
    LiteralValue, MapType, Parenthesized, Pointer, QualifiedName, StructLiteral,
    TypeExpression, UnaryExpr, Unsupported
)

logger = logging.getLogger(__name__)

# Comment lines such as //go:generate or //nolint:foo are tool directives, not docs.
_DIRECTIVE = re.compile(r"^[a-z0-9]+:[a-z0-9]")

_TERMINATORS = ("\n", ";", "\0")

_LITERAL_NODES = (
    "int_literal", "float_literal", "imaginary_literal", "rune_literal",
    "interpreted_string_literal", "raw_string_literal",
)

_IDENTIFIER_NODES = ("identifier", "true", "false", "nil", "iota")

_TYPE_IDENTIFIER_NODES = ("type_identifier", "identifier", "field_identifier", "package_identifier")

_UNION_NODES = ("type_elem", "type_constraint", "constraint_elem", "union_type")

class GoAnalyzer(BaseAnalyzer):
    LANGUAGE_NAME = "go"
    FILE_EXTENSIONS = (".go",)

    def _analyze_tree(self, tree: Tree, source_code: bytes, file_path: Path) -> FileAnalysis:
        package = None
        package_doc = None
        declarations: List[Declaration] = []

        for child in tree.root_node.named_children:
            if child.type == "package_clause":
                name_node = next((c for c in child.named_children if c.type == "package_identifier"), None)
                package = self._get_node_text(name_node, source_code) or None
                package_doc = self._get_doc_comment(child, source_code)
            elif child.type == "type_declaration":
                declarations.append(self._process_type_declaration(child, source_code))
            elif child.type == "const_declaration":
                declarations.append(self._process_value_declaration(child, source_code, "const"))
            elif child.type == "var_declaration":
                declarations.append(self._process_value_declaration(child, source_code, "var"))

        logger.debug(f"Found {len(declarations)} declaration(s) in {file_path}")
        return FileAnalysis(
            file_path=str(file_path),
            analyzer=self.analyzer_name,
            package=package,
            doc=package_doc,
            declarations=declarations,
        )

    # Comments

    def _comment_text(self, comment_nodes: List[Node], source_code: bytes) -> Optional[str]:
        """Join comment nodes into plain text the way go/ast CommentGroup.Text does."""
        lines = []
        for node in comment_nodes:
            text = self._get_node_text(node, source_code)
            if text.startswith("//"):
                body = text[2:]
                if _DIRECTIVE.match(body):
                    continue
                if body.startswith(" "):
                    body = body[1:]
                lines.append(body)
            elif text.startswith("/*"):
                lines.extend(text[2:-2].split("\n"))

        cleaned = []
        for line in lines:
            line = line.rstrip()
            if not line and (not cleaned or not cleaned[-1]):
                continue
            cleaned.append(line)
        while cleaned and not cleaned[-1]:
            cleaned.pop()

        return "\n".join(cleaned) or None

    def _is_trailing_comment(self, comment: Node) -> bool:
        """True if the comment sits on the same line as the token before it."""
        prev = comment.prev_sibling
        while prev is not None and prev.type in _TERMINATORS:
            prev = prev.prev_sibling
        return prev is not None and prev.end_point[0] == comment.start_point[0]

    def _get_doc_comment(self, node: Node, source_code: bytes) -> Optional[str]:
        """Comments ending on the line directly above the node, without a blank line."""
        comments = []
        expected_row = node.start_point[0]
        sibling = node.prev_sibling

        while sibling is not None:
            if sibling.type in _TERMINATORS:
                sibling = sibling.prev_sibling
                continue
            if sibling.type != "comment" or sibling.end_point[0] != expected_row - 1:
                break
            if self._is_trailing_comment(sibling):
                break
            comments.insert(0, sibling)
            expected_row = sibling.start_point[0]
            sibling = sibling.prev_sibling

        if not comments:
            return None
        return self._comment_text(comments, source_code)

    def _get_line_comment(self, node: Node, source_code: bytes) -> Optional[str]:
        """Comment starting on the last line of the node."""
        row = node.end_point[0]
        current = node
        while current is not None:
            sibling = current.next_sibling
            while sibling is not None:
                if sibling.start_point[0] != row:
                    return None
                if sibling.type == "comment":
                    return self._comment_text([sibling], source_code)
                if sibling.type not in _TERMINATORS:
                    return None
                sibling = sibling.next_sibling
            # Trailing comments can end up attached to an enclosing node.
            current = current.parent
            if current is None or current.end_point[0] != row or current.type == "source_file":
                break
        return None

    # Declarations

    def _spec_nodes(self, node: Node, spec_types: tuple) -> List[Node]:
        specs = []
        for child in node.named_children:
            if child.type in spec_types:
                specs.append(child)
            elif child.type.endswith("_spec_list"):
                specs.extend(c for c in child.named_children if c.type in spec_types)
        return specs

    def _is_grouped(self, node: Node) -> bool:
        if any(child.type == "(" for child in node.children):
            return True
        return any(child.type.endswith("_spec_list") for child in node.named_children)

    def _process_type_declaration(self, node: Node, source_code: bytes) -> Declaration:
        grouped = self._is_grouped(node)
        decl_doc = self._get_doc_comment(node, source_code)
        specs = []

        for spec_node in self._spec_nodes(node, ("type_spec", "type_alias")):
            name = self._get_node_text(spec_node.child_by_field_name("name"), source_code)
            params_node = spec_node.child_by_field_name("type_parameters")
            type_params = self._convert_type_params(params_node, source_code) if params_node else None

            if grouped:
                doc = self._get_doc_comment(spec_node, source_code)
                comment = self._get_line_comment(spec_node, source_code)
            else:
                doc = decl_doc
                comment = self._get_line_comment(node, source_code)

            specs.append(TypeSpec(
                name=name,
                type_params=type_params,
                type=self._convert_type(spec_node.child_by_field_name("type"), source_code),
                alias=spec_node.type == "type_alias",
                doc=doc,
                comment=comment,
            ))

        return Declaration(keyword="type", specs=specs, grouped=grouped, doc=decl_doc)

    def _process_value_declaration(self, node: Node, source_code: bytes, keyword: str) -> Declaration:
        grouped = self._is_grouped(node)
        decl_doc = self._get_doc_comment(node, source_code)
        specs = []

        for spec_node in self._spec_nodes(node, (f"{keyword}_spec",)):
            names = [self._get_node_text(n, source_code) for n in spec_node.children_by_field_name("name")]
            type_node = spec_node.child_by_field_name("type")
            value_node = spec_node.child_by_field_name("value")

            values = []
            # Variable initializers are never emitted, so they are not converted.
            if keyword == "const" and value_node is not None:
                values = [
                    self._convert_expression(child, source_code)
                    for child in value_node.named_children
                    if child.type != "comment"
                ]

            if grouped:
                doc = self._get_doc_comment(spec_node, source_code)
                comment = self._get_line_comment(spec_node, source_code)
            else:
                doc = decl_doc
                comment = self._get_line_comment(node, source_code)

            specs.append(ValueSpec(
                names=names,
                type=self._convert_type(type_node, source_code) if type_node is not None else None,
                values=values,
                doc=doc,
                comment=comment,
            ))

        return Declaration(keyword=keyword, specs=specs, grouped=grouped, doc=decl_doc)

    # Types

    def _named(self, node: Node) -> List[Node]:
        return [child for child in node.named_children if child.type != "comment"]

    def _convert_type_params(self, node: Node, source_code: bytes) -> List[Field]:
        params = []
        for child in self._named(node):
            if child.type not in ("type_parameter_declaration", "parameter_declaration"):
                continue
            names = [self._get_node_text(n, source_code) for n in child.children_by_field_name("name")]
            constraint = child.child_by_field_name("type")
            params.append(Field(names=names, type=self._convert_type(constraint, source_code)))
        return params

    def _unquote_tag(self, tag_node: Node, source_code: bytes) -> str:
        text = self._get_node_text(tag_node, source_code)
        if tag_node.type == "raw_string_literal":
            return text[1:-1]
        try:
            return unquote_go_string(text)
        except ValueError as e:
            raise MalformedTag(text, f"cannot unquote tag literal: {e}")

    def _convert_field_list(self, node: Node, source_code: bytes) -> List[Field]:
        """Convert the field_declaration_list of a struct."""
        fields = []
        for child in self._named(node):
            if child.type != "field_declaration":
                continue

            names = [self._get_node_text(n, source_code) for n in child.children_by_field_name("name")]
            type_ = self._convert_type(child.child_by_field_name("type"), source_code)
            if not names and any(c.type == "*" for c in child.children):
                type_ = Pointer(elem=type_)

            tag_node = child.child_by_field_name("tag")
            fields.append(Field(
                names=names,
                type=type_,
                tag=self._unquote_tag(tag_node, source_code) if tag_node is not None else None,
                doc=self._get_doc_comment(child, source_code),
                comment=self._get_line_comment(child, source_code),
            ))
        return fields

    def _convert_interface(self, node: Node, source_code: bytes) -> List[Field]:
        members = []
        for child in self._named(node):
            if child.type in ("method_elem", "method_spec"):
                name_node = child.child_by_field_name("name")
                type_ = Unsupported(form="function", text=self._get_node_text(child, source_code))
                names = [self._get_node_text(name_node, source_code)] if name_node is not None else []
            else:
                type_ = self._convert_type(child, source_code)
                names = []
            members.append(Field(
                names=names,
                type=type_,
                doc=self._get_doc_comment(child, source_code),
                comment=self._get_line_comment(child, source_code),
            ))
        return members

    def _convert_type(self, node: Node, source_code: bytes) -> TypeExpression:
        """Convert a Go type node into a TypeExpression."""
        node_type = node.type

        if node_type in _TYPE_IDENTIFIER_NODES:
            return Identifier(name=self._get_node_text(node, source_code))

        if node_type == "qualified_type":
            return QualifiedName(
                namespace=self._get_node_text(node.child_by_field_name("package"), source_code),
                name=self._get_node_text(node.child_by_field_name("name"), source_code),
            )

        if node_type == "pointer_type":
            return Pointer(elem=self._convert_type(self._named(node)[0], source_code))

        if node_type in ("slice_type", "array_type", "implicit_length_array_type"):
            length_node = node.child_by_field_name("length")
            return Array(
                elem=self._convert_type(node.child_by_field_name("element"), source_code),
                length=self._get_node_text(length_node, source_code) if length_node is not None else None,
            )

        if node_type == "map_type":
            return MapType(
                key=self._convert_type(node.child_by_field_name("key"), source_code),
                value=self._convert_type(node.child_by_field_name("value"), source_code),
            )

        if node_type == "struct_type":
            body = next((c for c in node.named_children if c.type == "field_declaration_list"), None)
            fields = self._convert_field_list(body, source_code) if body is not None else []
            return StructLiteral(fields=fields)

        if node_type == "interface_type":
            return InterfaceLiteral(members=self._convert_interface(node, source_code))

        if node_type == "generic_type":
            arguments = node.child_by_field_name("type_arguments")
            return GenericApplication(
                base=self._convert_type(node.child_by_field_name("type"), source_code),
                args=[self._convert_type(arg, source_code) for arg in self._named(arguments)],
            )

        if node_type == "parenthesized_type":
            return Parenthesized(inner=self._convert_type(self._named(node)[0], source_code))

        if node_type in ("negated_type", "constraint_term") and any(c.type == "~" for c in node.children):
            return UnaryExpr(op="~", operand=self._convert_type(self._named(node)[0], source_code))

        if node_type in _UNION_NODES or node_type == "constraint_term":
            terms = self._named(node)
            result = self._convert_type(terms[0], source_code)
            for term in terms[1:]:
                result = BinaryExpr(left=result, op="|", right=self._convert_type(term, source_code))
            return result

        if node_type == "function_type":
            return Unsupported(form="function", text=self._get_node_text(node, source_code))

        if node_type == "channel_type":
            return Unsupported(form="channel", text=self._get_node_text(node, source_code))

        raise UnsupportedConstruct(self._get_node_text(node, source_code), node_type)

    # Constant expressions

    def _convert_expression(self, node: Node, source_code: bytes) -> TypeExpression:
        """Convert a constant initializer expression."""
        node_type = node.type
        text = self._get_node_text(node, source_code)

        if node_type in _LITERAL_NODES:
            return LiteralValue(raw=text)

        if node_type in _IDENTIFIER_NODES:
            return Identifier(name=text)

        if node_type == "binary_expression":
            return BinaryExpr(
                left=self._convert_expression(node.child_by_field_name("left"), source_code),
                op=self._get_node_text(node.child_by_field_name("operator"), source_code),
                right=self._convert_expression(node.child_by_field_name("right"), source_code),
            )

        if node_type == "unary_expression":
            return UnaryExpr(
                op=self._get_node_text(node.child_by_field_name("operator"), source_code),
                operand=self._convert_expression(node.child_by_field_name("operand"), source_code),
            )

        if node_type == "parenthesized_expression":
            return Parenthesized(inner=self._convert_expression(self._named(node)[0], source_code))

        if node_type == "call_expression":
            return Unsupported(form="call", text=text)

        if node_type == "selector_expression":
            operand = node.child_by_field_name("operand")
            if operand is not None and operand.type == "identifier":
                return QualifiedName(
                    namespace=self._get_node_text(operand, source_code),
                    name=self._get_node_text(node.child_by_field_name("field"), source_code),
                )

        raise UnsupportedConstruct(text, node_type)
