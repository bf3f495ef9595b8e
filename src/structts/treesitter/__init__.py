"""Tree-sitter integration for reading Go source packages."""

from .parser import TreeSitterParser
from .exceptions import TreeSitterError, GrammarError, ParsingError

__all__ = ["TreeSitterParser", "TreeSitterError", "GrammarError", "ParsingError"]
