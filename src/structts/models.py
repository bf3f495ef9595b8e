"""Data models for parsed Go type expressions."""

from typing import Annotated, List, Literal, Optional, Union

import pydantic
from pydantic import BaseModel, ConfigDict


class Node(BaseModel):
    """Base for all type expression nodes. Nodes are immutable."""
    model_config = ConfigDict(frozen=True)


class Pointer(Node):
    """`*T`"""
    kind: Literal["pointer"] = "pointer"
    elem: "TypeExpression"


class Array(Node):
    """`[]T` or `[N]T`"""
    kind: Literal["array"] = "array"
    elem: "TypeExpression"
    length: Optional[str] = None


class StructLiteral(Node):
    """`struct { ... }`"""
    kind: Literal["struct"] = "struct"
    fields: List["Field"] = []


class InterfaceLiteral(Node):
    """`interface { ... }`"""
    kind: Literal["interface"] = "interface"
    members: List["Field"] = []


class Identifier(Node):
    kind: Literal["identifier"] = "identifier"
    name: str


class QualifiedName(Node):
    """`pkg.Name`"""
    kind: Literal["qualified"] = "qualified"
    namespace: str
    name: str


class MapType(Node):
    kind: Literal["map"] = "map"
    key: "TypeExpression"
    value: "TypeExpression"


class LiteralValue(Node):
    """Basic literal kept as raw source text, e.g. `42` or a back-quoted string."""
    kind: Literal["literal"] = "literal"
    raw: str


class Parenthesized(Node):
    kind: Literal["paren"] = "paren"
    inner: "TypeExpression"


class BinaryExpr(Node):
    kind: Literal["binary"] = "binary"
    left: "TypeExpression"
    op: str
    right: "TypeExpression"


class UnaryExpr(Node):
    kind: Literal["unary"] = "unary"
    op: str
    operand: "TypeExpression"


class Unsupported(Node):
    """Call expressions, function signatures and channels."""
    kind: Literal["unsupported"] = "unsupported"
    form: Literal["call", "function", "channel"]
    text: str = ""


class GenericApplication(Node):
    """`Base[A, B]`"""
    kind: Literal["generic"] = "generic"
    base: "TypeExpression"
    args: List["TypeExpression"]


TypeExpression = Annotated[
    Union[
        Pointer,
        Array,
        StructLiteral,
        InterfaceLiteral,
        Identifier,
        QualifiedName,
        MapType,
        LiteralValue,
        Parenthesized,
        BinaryExpr,
        UnaryExpr,
        Unsupported,
        GenericApplication,
    ],
    pydantic.Field(discriminator="kind"),
]


class Field(Node):
    """A struct field, interface member or type parameter.

    `names` is empty for embedded (anonymous) fields. `tag` holds the tag text
    without its surrounding quotes.
    """
    names: List[str] = []
    type: TypeExpression
    tag: Optional[str] = None
    doc: Optional[str] = None
    comment: Optional[str] = None


for _model in (
    Pointer,
    Array,
    StructLiteral,
    InterfaceLiteral,
    MapType,
    Parenthesized,
    BinaryExpr,
    UnaryExpr,
    GenericApplication,
    Field,
):
    _model.model_rebuild()
