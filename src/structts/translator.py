"""Go type expression to TypeScript translation."""

import logging
import re
from typing import List, Optional

from .config import EmitConfig
from .exceptions import UnsupportedConstruct
from .models import (
    Array, BinaryExpr, Field, GenericApplication, Identifier, InterfaceLiteral,
    LiteralValue, MapType, Parenthesized, Pointer, QualifiedName, StructLiteral,
    TypeExpression, UnaryExpr, Unsupported
)
from .names import field_names
from .tags import resolve_tag

logger = logging.getLogger(__name__)

NUMERIC_TYPES = frozenset({
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "float32", "float64",
    "complex64", "complex128",
    "byte", "rune",
})

_BACKQUOTE_ESCAPE = re.compile(r"([$\\])")

def translate_identifier(name: str) -> str:
    """Map a Go predeclared type name to its TypeScript counterpart."""
    if name == "bool":
        return "boolean"
    if name in NUMERIC_TYPES:
        return f"number /* {name} */"
    return name

def comment_block(text: str, indent: str) -> str:
    """Render comment text as a JSDoc block."""
    lines = [indent + "/**\n"]
    for line in text.split("\n"):
        if not line.strip():
            continue
        lines.append(indent + " * " + line.replace("*/", "*\\/") + "\n")
    lines.append(indent + " */\n")
    return "".join(lines)

def line_comment(text: str) -> str:
    """Render a trailing comment; multi-line text is folded onto one line."""
    return " // " + " ".join(part.strip() for part in text.split("\n") if part.strip())

class TypeTranslator:
    """Translates Go type expressions and member lists into TypeScript.

    Every method returns the text it produces; nothing is buffered on the
    instance, so one translator can render any number of declarations.
    """

    def __init__(self, config: EmitConfig):
        self.config = config

    def indent(self, depth: int) -> str:
        return self.config.indent * depth

    def emit(self, node: TypeExpression, depth: int = 0, grouping: bool = False) -> str:
        """Translate one type expression.

        Args:
            node: The expression to translate.
            depth: Indentation depth of the enclosing member list.
            grouping: Wrap pointer unions in parentheses, as needed before a
                suffix such as `[]`.

        Raises:
            UnsupportedConstruct: If the node has no translation rule.
        """
        if isinstance(node, Pointer):
            text = self.emit(node.elem, depth) + " | undefined"
            if grouping:
                return f"({text})"
            return text

        elif isinstance(node, Array):
            if isinstance(node.elem, Identifier) and node.elem.name == "byte":
                return "string"
            return self.emit(node.elem, depth, True) + "[]"

        elif isinstance(node, StructLiteral):
            return "{\n" + self.struct_fields(node.fields, depth + 1) + self.indent(depth + 1) + "}"

        elif isinstance(node, Identifier):
            if node.name == "any":
                return translate_identifier(self.config.fallback_type)
            return translate_identifier(node.name)

        elif isinstance(node, QualifiedName):
            long_name = f"{node.namespace}.{node.name}"
            mapped = self.config.type_mappings.get(long_name)
            if mapped is not None:
                return mapped
            # Unknown external types are never guessed.
            return f"{self.config.fallback_type} /* {long_name} */"

        elif isinstance(node, MapType):
            return "{ [key: " + self.emit(node.key, depth) + "]: " + self.emit(node.value, depth) + "}"

        elif isinstance(node, LiteralValue):
            if node.raw.startswith("`"):
                return _BACKQUOTE_ESCAPE.sub(r"\\\1", node.raw)
            return node.raw

        elif isinstance(node, Parenthesized):
            return "(" + self.emit(node.inner, depth) + ")"

        elif isinstance(node, BinaryExpr):
            return self.emit(node.left, depth) + f" {node.op} " + self.emit(node.right, depth)

        elif isinstance(node, InterfaceLiteral):
            return self.interface_fields(node.members, depth)

        elif isinstance(node, Unsupported):
            return self.config.fallback_type

        elif isinstance(node, UnaryExpr):
            if node.op == "~":
                # Constraint approximation has no TypeScript spelling.
                return self.emit(node.operand, depth)
            if node.op == "^":
                return "~" + self.emit(node.operand, depth)
            if node.op in ("+", "-", "!"):
                return node.op + self.emit(node.operand, depth)
            raise UnsupportedConstruct(repr(node), f"unary {node.op}")

        elif isinstance(node, GenericApplication):
            args = ", ".join(self.emit(arg, depth) for arg in node.args)
            return self.emit(node.base, depth) + "<" + args + ">"

        raise UnsupportedConstruct(repr(node), type(node).__name__)

    def type_params(self, params: List[Field]) -> str:
        """Translate a type parameter list into `<T extends C, ...>`."""
        clauses = []
        for param in params:
            constraint = self.emit(param.type, 0, True)
            for name in param.names:
                clauses.append(f"{name} extends {constraint}")
        return "<" + ", ".join(clauses) + ">"

    def struct_fields(self, fields: List[Field], depth: int) -> str:
        """Translate struct members into TypeScript property declarations."""
        preserve = self.config.preserve_type_comments
        out = []

        for field in fields:
            directives = resolve_tag(field.tag)
            names = field_names(field, directives, self.config.flavor)
            if not names:
                logger.debug(f"Skipping struct member {field.names or field.type!r}")
                continue

            type_ = field.type
            optional = directives.optional
            if isinstance(type_, Pointer):
                if directives.required:
                    type_ = type_.elem
                else:
                    optional = True

            if directives.type_override:
                type_text = directives.type_override
            else:
                type_text = self.emit(type_, depth)

            for name in names:
                if preserve and field.doc:
                    out.append(comment_block(field.doc, self.indent(depth + 1)))
                out.append(self.indent(depth + 1))
                if directives.readonly:
                    out.append("readonly ")
                out.append(name)
                if optional:
                    out.append("?")
                out.append(": " + type_text + ";")
                if preserve and field.comment:
                    out.append(line_comment(field.comment))
                out.append("\n")

        return "".join(out)

    def interface_fields(self, members: List[Field], depth: int) -> str:
        """Translate interface members into an intersection of their types.

        Methods carry no structural information and are dropped; an interface
        with nothing else becomes the fallback type.
        """
        preserve = self.config.preserve_type_comments
        parts = []

        for member in members:
            if isinstance(member.type, Unsupported) and member.type.form == "function":
                continue
            part = ""
            if preserve and member.doc:
                part += comment_block(member.doc, self.indent(depth + 1))
            part += self.indent(depth + 1) + self.emit(member.type, depth)
            if preserve and member.comment:
                part += line_comment(member.comment) + "\n"
            parts.append(part)

        if not parts:
            return self.config.fallback_type
        return "\n" + " &\n".join(parts)

    def extends_clause(self, fields: List[Field]) -> Optional[str]:
        """Collect struct members tagged `tstype:",extends"` as base types."""
        bases = []
        for field in fields:
            directives = resolve_tag(field.tag)
            if not directives.extends:
                continue
            type_ = field.type
            if isinstance(type_, Pointer):
                base = self.emit(type_.elem)
                if not directives.required:
                    base = f"Partial<{base}>"
            else:
                base = self.emit(type_)
            bases.append(base)
        if not bases:
            return None
        return ", ".join(bases)
