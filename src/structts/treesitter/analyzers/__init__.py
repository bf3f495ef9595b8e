"""Tree-sitter language analyzers using tree-sitter-language-pack."""

from .base import BaseAnalyzer
from .go_analyzer import GoAnalyzer

__all__ = ['BaseAnalyzer', 'GoAnalyzer']
