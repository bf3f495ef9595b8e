"""Data models for Tree-sitter analysis output."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from ..models import Field, TypeExpression

class TypeSpec(BaseModel):
    """Model for one `type Name[...] T` or `type Name = T` specification."""
    name: str
    type_params: Optional[List[Field]] = None
    type: TypeExpression
    alias: bool = False
    doc: Optional[str] = None
    comment: Optional[str] = None

class ValueSpec(BaseModel):
    """Model for one `const`/`var` specification line."""
    names: List[str]
    type: Optional[TypeExpression] = None
    values: List[TypeExpression] = []
    doc: Optional[str] = None
    comment: Optional[str] = None

class Declaration(BaseModel):
    """Model for a top-level `type`, `const` or `var` declaration."""
    keyword: Literal["type", "const", "var"]
    specs: List[Union[TypeSpec, ValueSpec]]
    grouped: bool = False
    doc: Optional[str] = None

class FileAnalysis(BaseModel):
    """Model for complete file analysis."""
    file_path: str
    analyzer: str
    package: Optional[str] = None
    doc: Optional[str] = None
    declarations: List[Declaration] = []

class FailedAnalysis(BaseModel):
    """Model for failed file analysis."""
    file_path: str
    analyzer: str
    reason: str
