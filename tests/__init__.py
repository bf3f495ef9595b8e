"""Test package for structts."""

import shutil
import tempfile
import unittest
from pathlib import Path

# Check if the Go grammar from tree-sitter-language-pack is available
GO_GRAMMAR_AVAILABLE = True
GO_GRAMMAR_ERROR_MSG = ""
try:
    from tree_sitter_language_pack import get_parser as _get_tslp_parser
    _get_tslp_parser("go")
except Exception as e:
    GO_GRAMMAR_AVAILABLE = False
    GO_GRAMMAR_ERROR_MSG = f"Go grammar unavailable from tree_sitter_language_pack: {e}"


class BaseStructTSTestCase(unittest.TestCase):
    """Base test case class with a temporary working directory."""

    def setUp(self):
        super().setUp()
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        try:
            if self.temp_dir.exists():
                shutil.rmtree(self.temp_dir)
        except Exception as e:
            # Log the error but don't fail the test
            print(f"Warning: Failed to clean up test resources: {e}")
        finally:
            super().tearDown()

    def write_go_file(self, name: str, content: str, package_dir: Path = None) -> Path:
        """Write a Go source file into a package directory under the temp dir."""
        package_dir = package_dir or self.temp_dir / "pkg"
        package_dir.mkdir(parents=True, exist_ok=True)
        file_path = package_dir / name
        file_path.write_text(content)
        return file_path
