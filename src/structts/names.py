"""Field naming rules for emitted TypeScript members."""

import re
from typing import List, Optional

from .models import Field, Identifier, Pointer, QualifiedName, TypeExpression
from .tags import TagDirectives

_VALID_TS_NAME = re.compile(r"[^\W\d]\w*")

def is_valid_ts_name(name: str) -> bool:
    return bool(_VALID_TS_NAME.fullmatch(name))

def is_exported(name: str) -> bool:
    """Exported Go identifiers start with an upper-case ASCII letter."""
    return bool(name) and "A" <= name[0] <= "Z"

def quote_name(name: str) -> str:
    if is_valid_ts_name(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("'", "\\'")
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r")
    return "'" + escaped + "'"

def anonymous_field_name(type_: TypeExpression) -> Optional[str]:
    """Name an embedded field contributes, derived from its type."""
    if isinstance(type_, Identifier):
        return type_.name
    if isinstance(type_, QualifiedName):
        return type_.name
    if isinstance(type_, Pointer):
        return anonymous_field_name(type_.elem)
    return None

def field_names(field: Field, directives: TagDirectives, flavor: str = "default") -> List[str]:
    """Names to emit for a field; an empty list means the field is not emitted.

    Args:
        field: The struct member.
        directives: Resolved tag directives for the member.
        flavor: Output flavor; "yaml" lower-cases untagged names.

    Returns:
        Emitted names, quoted where they are not bare identifiers.
    """
    if directives.skip:
        return []

    if field.names:
        source_names = list(field.names)
    else:
        derived = anonymous_field_name(field.type)
        source_names = [derived] if derived else []

    names = []
    for source_name in source_names:
        if not is_exported(source_name):
            continue
        if directives.name:
            name = directives.name
        elif flavor == "yaml":
            name = source_name.lower()
        else:
            name = source_name
        names.append(quote_name(name))
    return names
