"""Base class for Tree-sitter language analyzers."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from tree_sitter import Parser as TreeSitterParser, Tree, Node

try:
    from tree_sitter_language_pack import get_parser as get_tslp_provider_parser
    _TSLP_PROVIDER_IMPORT_ERROR = None
except ImportError as e:
    get_tslp_provider_parser = None
    _TSLP_PROVIDER_IMPORT_ERROR = str(e)

from ..models import FileAnalysis, FailedAnalysis
from ..exceptions import GrammarError, ParsingError

logger = logging.getLogger(__name__)

class BaseAnalyzer(ABC):
    """
    Base class for all language-specific analyzers,
    using 'tree-sitter-language-pack' for parser acquisition.
    """

    LANGUAGE_NAME: str
    FILE_EXTENSIONS: tuple[str, ...]
    parser: TreeSitterParser

    def __init__(self):
        """
        Initialize the analyzer with the appropriate language parser
        using 'tree-sitter-language-pack'.
        """
        if get_tslp_provider_parser is None:
            raise GrammarError(
                "The 'tree-sitter-language-pack' library could not be imported. "
                "Please ensure it's installed correctly. "
                f"Original import error: {_TSLP_PROVIDER_IMPORT_ERROR}"
            )

        try:
            self.parser = get_tslp_provider_parser(self.LANGUAGE_NAME)
            if self.parser is None or self.parser.language is None:
                raise GrammarError(
                    f"Failed to get a valid parser for '{self.LANGUAGE_NAME}' from tree-sitter-language-pack."
                )
            logger.debug(f"Successfully initialized parser for {self.LANGUAGE_NAME} using tree-sitter-language-pack.")
        except GrammarError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to initialize parser for {self.LANGUAGE_NAME} using tree-sitter-language-pack: {e}",
                exc_info=True
            )
            if isinstance(e, LookupError):
                raise GrammarError(f"Language '{self.LANGUAGE_NAME}' not found or supported by tree-sitter-language-pack: {str(e)}")
            raise GrammarError(
                f"Failed to load '{self.LANGUAGE_NAME}' grammar using tree-sitter-language-pack: {str(e)}."
            )

    @property
    def analyzer_name(self) -> str:
        return f"treesitter_{self.LANGUAGE_NAME.lower()}"

    def analyze_file(self, file_path: Path) -> FileAnalysis | FailedAnalysis:
        """Read a source file from disk and analyze it."""
        if not isinstance(file_path, Path):
            file_path = Path(file_path)

        try:
            with open(file_path, 'rb') as f:
                source_code = f.read()
        except FileNotFoundError:
            error_msg = "File not found."
            logger.warning(f"{error_msg} during analysis: {file_path}")
            return FailedAnalysis(
                file_path=str(file_path),
                analyzer=self.analyzer_name,
                reason=error_msg
            )

        return self.analyze_source(source_code, file_path)

    def analyze_source(self, source_code: bytes, file_path: Path) -> FileAnalysis | FailedAnalysis:
        """Analyze in-memory source code and return its declarations.

        Syntax errors are reported as FailedAnalysis. Errors raised while
        converting a well-formed tree (such as UnsupportedConstruct) propagate.
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')

        try:
            tree = self.parser.parse(source_code)

            if not tree:
                raise ParsingError(str(file_path), "Parser returned no tree.")

            if tree.root_node.has_error:
                error_node = self._find_error_node(tree.root_node)
                error_reason = "Source code contains syntax errors (root node has_error)."
                if error_node is not None:
                    error_reason = (
                        f"Source code contains syntax errors. First error near line {error_node.start_point[0] + 1}, "
                        f"column {error_node.start_point[1] + 1} (type: {error_node.type})."
                    )
                raise ParsingError(str(file_path), error_reason)

        except ParsingError as pe:
            logger.warning(f"Parsing error for {file_path} ({self.LANGUAGE_NAME}): {pe.error_message}")
            return FailedAnalysis(
                file_path=str(file_path),
                analyzer=self.analyzer_name,
                reason=pe.error_message
            )

        return self._analyze_tree(tree, source_code, Path(file_path))

    def _find_error_node(self, node: Node) -> Optional[Node]:
        """Return the first ERROR or missing node in document order."""
        if node.type == 'ERROR' or node.is_missing:
            return node
        for child in node.children:
            if child.has_error or child.is_missing:
                found = self._find_error_node(child)
                if found is not None:
                    return found
        return None

    @abstractmethod
    def _analyze_tree(self, tree: Tree, source_code: bytes, file_path: Path) -> FileAnalysis:
        """Analyze the syntax tree and return structured data."""
        pass

    def _get_node_text(self, node: Optional[Node], source_code: bytes) -> str:
        """Get the text content of a node from the source code (decoded as UTF-8)."""
        if node is None:
            return ""
        return source_code[node.start_byte:node.end_byte].decode('utf-8', errors='replace')
