"""Go struct tag parsing and field directive resolution.

Parsing (`parse_tag`) and applying the directives (`resolve_tag`) are kept
apart so that each stage can be exercised on its own.
"""

import logging
import string
from typing import Dict, List, Optional

from pydantic import BaseModel

from .exceptions import MalformedTag

logger = logging.getLogger(__name__)

# Evaluated in this order; a later namespace overwrites the name and
# optionality resolved by an earlier one.
NAMING_NAMESPACES = ("json", "yaml")
OVERRIDE_NAMESPACE = "tstype"

class StructTag(BaseModel):
    """One `key:"name,opt1,opt2"` entry of a struct tag."""
    key: str
    name: str
    options: List[str] = []

    def has_option(self, option: str) -> bool:
        return option in self.options

class TagDirectives(BaseModel):
    """Field directives derived from a struct tag."""
    skip: bool = False
    name: Optional[str] = None
    optional: bool = False
    required: bool = False
    readonly: bool = False
    type_override: Optional[str] = None
    extends: bool = False


_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r",
    "t": "\t", "v": "\v", "\\": "\\", '"': '"',
}

# Escape letter -> number of hex digits that follow it.
_HEX_ESCAPES = {"x": 2, "u": 4, "U": 8}

def unquote_go_string(quoted: str) -> str:
    """Unquote a double-quoted Go string literal as strconv.Unquote does.

    `\\x` and octal escapes denote single bytes; the result is decoded as
    UTF-8.

    Raises:
        ValueError: If the text is not a valid interpreted string literal.
    """
    if len(quoted) < 2 or quoted[0] != '"' or quoted[-1] != '"':
        raise ValueError("missing surrounding double quotes")

    body = quoted[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        c = body[i]
        if c == "\n":
            raise ValueError("newline in string literal")
        if c == '"':
            raise ValueError("unescaped double quote")
        if c != "\\":
            out += c.encode("utf-8")
            i += 1
            continue

        if i + 1 >= len(body):
            raise ValueError("trailing backslash")
        escape = body[i + 1]
        i += 2

        if escape in _SIMPLE_ESCAPES:
            out += _SIMPLE_ESCAPES[escape].encode("utf-8")
        elif escape in _HEX_ESCAPES:
            size = _HEX_ESCAPES[escape]
            digits = body[i:i + size]
            if len(digits) != size or any(d not in string.hexdigits for d in digits):
                raise ValueError(f"invalid \\{escape} escape")
            value = int(digits, 16)
            i += size
            if escape == "x":
                out.append(value)
            elif value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
                raise ValueError(f"invalid code point in \\{escape}{digits}")
            else:
                out += chr(value).encode("utf-8")
        elif escape in string.octdigits:
            digits = body[i - 1:i + 2]
            if len(digits) != 3 or any(d not in string.octdigits for d in digits):
                raise ValueError("invalid octal escape")
            value = int(digits, 8)
            if value > 0xFF:
                raise ValueError(f"octal escape \\{digits} out of range")
            out.append(value)
            i += 2
        else:
            raise ValueError(f"unknown escape sequence \\{escape}")

    return out.decode("utf-8", errors="replace")

def parse_tag(raw: str) -> Dict[str, StructTag]:
    """Parse Go struct tag syntax into entries keyed by namespace.

    Args:
        raw: Tag text without its surrounding back-quotes, e.g.
            `json:"id,omitempty" yaml:"id"`.

    Returns:
        Mapping of namespace key to parsed entry, in source order.

    Raises:
        MalformedTag: If the text is not valid struct tag syntax.
    """
    tags: Dict[str, StructTag] = {}
    rest = raw

    while rest:
        rest = rest.lstrip(" ")
        if not rest:
            break

        i = 0
        while i < len(rest) and rest[i] > " " and rest[i] not in ':"' and rest[i] != "\x7f":
            i += 1
        if i == 0:
            raise MalformedTag(raw, "bad syntax for struct tag key")
        if i + 1 >= len(rest) or rest[i] != ":":
            raise MalformedTag(raw, "bad syntax for struct tag pair")
        if rest[i + 1] != '"':
            raise MalformedTag(raw, "bad syntax for struct tag value")

        key = rest[:i]
        rest = rest[i + 1:]

        # Scan the quoted value, honouring backslash escapes.
        i = 1
        while i < len(rest) and rest[i] != '"':
            if rest[i] == "\\":
                i += 1
            i += 1
        if i >= len(rest):
            raise MalformedTag(raw, "bad syntax for struct tag value")

        quoted = rest[:i + 1]
        rest = rest[i + 1:]

        try:
            value = unquote_go_string(quoted)
        except ValueError as e:
            raise MalformedTag(raw, f"invalid quoted value {quoted}: {e}")

        # A repeated key is ignored; lookups see its first occurrence.
        parts = value.split(",")
        tags.setdefault(key, StructTag(key=key, name=parts[0], options=parts[1:]))

    return tags

def resolve_tag(raw: Optional[str]) -> TagDirectives:
    """Derive field directives from a raw struct tag.

    The naming namespaces are read in `NAMING_NAMESPACES` order and the last
    one present wins. A name of "-" in any of them skips the field. In the
    `tstype` namespace "-" or the `extends` option skip the field, `required`
    suppresses pointer-implied optionality and `readonly` marks the field
    read-only. A non-empty `tstype` name replaces the translated type.
    """
    directives = TagDirectives()
    if not raw:
        return directives

    tags = parse_tag(raw)

    for namespace in NAMING_NAMESPACES:
        tag = tags.get(namespace)
        if tag is None:
            continue
        if tag.name == "-":
            return TagDirectives(skip=True)
        directives.name = tag.name or None
        directives.optional = tag.has_option("omitempty")

    tstype = tags.get(OVERRIDE_NAMESPACE)
    if tstype is not None:
        if tstype.name == "-":
            return TagDirectives(skip=True)
        if tstype.has_option("extends"):
            logger.debug(f"Field tag {raw!r} marks an extended type")
            return TagDirectives(
                skip=True,
                extends=True,
                required=tstype.has_option("required"),
            )
        directives.type_override = tstype.name or None
        directives.required = tstype.has_option("required")
        directives.readonly = tstype.has_option("readonly")

    return directives
