"""Main Tree-sitter parser implementation."""

import fnmatch
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type

from .analyzers import BaseAnalyzer
from .analyzers.go_analyzer import GoAnalyzer
from .models import FileAnalysis, FailedAnalysis
from .exceptions import TreeSitterError

logger = logging.getLogger(__name__)

class TreeSitterParser:
    """Main parser class that coordinates language-specific analyzers."""

    def __init__(self):
        """Initialize the parser with available language analyzers."""
        self.analyzers: Dict[str, Type[BaseAnalyzer]] = {
            "go": GoAnalyzer,
        }
        self._instances: Dict[Type[BaseAnalyzer], BaseAnalyzer] = {}

        # Map file extensions to analyzer classes
        self.extension_map: Dict[str, Type[BaseAnalyzer]] = {}
        for analyzer_class in self.analyzers.values():
            for ext in analyzer_class.FILE_EXTENSIONS:
                self.extension_map[ext] = analyzer_class

    def _get_analyzer(self, analyzer_class: Type[BaseAnalyzer]) -> BaseAnalyzer:
        # Grammar loading is the expensive part, so analyzers are reused.
        if analyzer_class not in self._instances:
            self._instances[analyzer_class] = analyzer_class()
        return self._instances[analyzer_class]

    def analyze_file(self, file_path: Path) -> FileAnalysis | FailedAnalysis:
        """Analyze a source file using the appropriate language analyzer.

        Args:
            file_path: Path to the source file to analyze.

        Returns:
            FileAnalysis or FailedAnalysis object containing the analysis results.

        Raises:
            TreeSitterError: If the file type is not supported or if there are
                issues with the Tree-sitter grammar.
        """
        if not file_path.exists():
            raise TreeSitterError(f"File not found: {file_path}")

        analyzer_class = self.extension_map.get(file_path.suffix.lower())
        if not analyzer_class:
            raise TreeSitterError(f"Unsupported file type: {file_path.suffix}")

        return self._get_analyzer(analyzer_class).analyze_file(file_path)

    def _is_selected(self, file_name: str, include_files: Sequence[str], exclude_files: Sequence[str]) -> bool:
        if include_files and not any(fnmatch.fnmatch(file_name, pattern) for pattern in include_files):
            return False
        return not any(fnmatch.fnmatch(file_name, pattern) for pattern in exclude_files)

    def package_files(
        self,
        directory: Path,
        include_files: Optional[Sequence[str]] = None,
        exclude_files: Optional[Sequence[str]] = None,
    ) -> List[Path]:
        """List the source files of a package directory, sorted by name.

        Test files (`*_test.go`) never belong to the generated package.
        """
        if not directory.is_dir():
            raise TreeSitterError(f"Directory not found: {directory}")

        files = []
        for file_path in sorted(directory.iterdir()):
            if not file_path.is_file() or file_path.suffix.lower() not in self.extension_map:
                continue
            if file_path.name.endswith("_test.go"):
                continue
            if not self._is_selected(file_path.name, include_files or [], exclude_files or []):
                logger.debug(f"Skipping {file_path} (include/exclude patterns)")
                continue
            files.append(file_path)
        return files

    def analyze_package(
        self,
        directory: Path,
        include_files: Optional[Sequence[str]] = None,
        exclude_files: Optional[Sequence[str]] = None,
    ) -> List[FileAnalysis | FailedAnalysis]:
        """Analyze every selected source file of a package directory.

        Args:
            directory: Package directory (not searched recursively).
            include_files: fnmatch patterns; when given, only matching file
                names are analyzed.
            exclude_files: fnmatch patterns of file names to leave out.
        """
        results = []
        for file_path in self.package_files(directory, include_files, exclude_files):
            result = self.analyze_file(file_path)
            if isinstance(result, FailedAnalysis):
                logger.warning(f"Failed to analyze {file_path}: {result.reason}")
            else:
                logger.info(f"Analyzed {file_path}")
            results.append(result)
        return results
