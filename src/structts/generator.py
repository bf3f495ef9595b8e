"""
TypeScript generation for Go packages.

This module renders the declarations found by the Go analyzer into
TypeScript and writes one output file per configured package.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader
from pydantic import BaseModel

from .config import Config, PackageConfig
from .exceptions import GenerationError, StructTSError
from .models import Identifier, LiteralValue, StructLiteral, TypeExpression
from .names import is_exported
from .translator import TypeTranslator, comment_block, line_comment
from .treesitter import TreeSitterParser
from .treesitter.exceptions import TreeSitterError
from .treesitter.models import Declaration, FailedAnalysis, FileAnalysis, TypeSpec, ValueSpec

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "package.ts.j2"

def _render_template(template_name: str, **kwargs) -> str:
    """Renders a Jinja2 output template."""
    template_dir = Path(__file__).parent / "templates"
    env = Environment(
        loader=FileSystemLoader(template_dir),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.get_template(template_name)
    return template.render(**kwargs)

def substitute_iota(node: TypeExpression, value: int) -> TypeExpression:
    """Replace every `iota` identifier in a constant expression with `value`."""
    if isinstance(node, Identifier) and node.name == "iota":
        return LiteralValue(raw=str(value))

    updates = {}
    for name in type(node).model_fields:
        child = getattr(node, name)
        if isinstance(child, BaseModel):
            updates[name] = substitute_iota(child, value)
        elif isinstance(child, list):
            updates[name] = [
                substitute_iota(item, value) if isinstance(item, BaseModel) else item
                for item in child
            ]
    if not updates:
        return node
    return node.model_copy(update=updates)

class DeclarationWriter:
    """Renders top-level Go declarations as exported TypeScript declarations."""

    def __init__(self, config: PackageConfig, translator: TypeTranslator):
        self.config = config
        self.translator = translator

    def write(self, declaration: Declaration) -> List[str]:
        """Render a declaration; each returned chunk is one TypeScript declaration."""
        if declaration.keyword == "type":
            chunks = [self.type_spec(spec) for spec in declaration.specs]
        elif declaration.keyword == "const":
            chunks = self.const_specs(declaration.specs)
        else:
            return []

        chunks = [chunk for chunk in chunks if chunk]
        if chunks and declaration.grouped and declaration.doc and self.config.preserve_type_comments:
            chunks.insert(0, comment_block(declaration.doc, "").rstrip("\n"))
        return chunks

    def type_spec(self, spec: TypeSpec) -> Optional[str]:
        if not is_exported(spec.name):
            return None

        logger.debug(f"Writing type {spec.name}")
        preserve = self.config.preserve_type_comments
        out = ""
        if preserve and spec.doc:
            out += comment_block(spec.doc, "")

        params = self.translator.type_params(spec.type_params) if spec.type_params else ""

        if isinstance(spec.type, StructLiteral) and not spec.alias:
            out += f"export interface {spec.name}{params}"
            extends = self.translator.extends_clause(spec.type.fields)
            if extends:
                out += f" extends {extends}"
            out += " {\n" + self.translator.struct_fields(spec.type.fields, 0) + "}"
        else:
            out += f"export type {spec.name}{params} = " + self.translator.emit(spec.type) + ";"

        if preserve and spec.comment:
            out += line_comment(spec.comment)
        return out

    def const_specs(self, specs: List[ValueSpec]) -> List[str]:
        """Render a constant group.

        A spec without values repeats the previous spec's type and values, and
        `iota` takes the spec's position in the group.
        """
        preserve = self.config.preserve_type_comments
        chunks = []
        last_type: Optional[TypeExpression] = None
        last_values: List[TypeExpression] = []

        for iota, spec in enumerate(specs):
            if spec.values:
                last_type, last_values = spec.type, spec.values
            type_ = spec.type if spec.values else last_type
            values = spec.values or last_values

            lines = []
            for i, name in enumerate(spec.names):
                if name == "_" or not is_exported(name):
                    continue
                if i >= len(values):
                    logger.debug(f"Constant {name} has no value, skipping")
                    continue
                line = f"export const {name}"
                if type_ is not None:
                    line += ": " + self.translator.emit(type_)
                line += " = " + self.translator.emit(substitute_iota(values[i], iota)) + ";"
                lines.append(line)

            if not lines:
                continue
            if preserve and spec.comment:
                lines[-1] += line_comment(spec.comment)
            chunk = "\n".join(lines)
            if preserve and spec.doc:
                chunk = comment_block(spec.doc, "") + chunk
            chunks.append(chunk)

        return chunks

class PackageGenerator:
    """Generates the TypeScript output for one configured Go package."""

    def __init__(self, config: PackageConfig, parser: Optional[TreeSitterParser] = None):
        self.config = config
        self.parser = parser or TreeSitterParser()
        self.translator = TypeTranslator(config)
        self.writer = DeclarationWriter(config, self.translator)

    def analyze(self) -> List[FileAnalysis]:
        """Parse every selected file of the package.

        Raises:
            GenerationError: If the directory is missing or a file fails to parse.
        """
        try:
            results = self.parser.analyze_package(
                self.config.path,
                include_files=self.config.include_files,
                exclude_files=self.config.exclude_files,
            )
        except TreeSitterError as e:
            raise GenerationError(f"Could not read package {self.config.path}: {e}")

        analyses = []
        for result in results:
            if isinstance(result, FailedAnalysis):
                raise GenerationError(f"Failed to parse {result.file_path}: {result.reason}")
            analyses.append(result)
        return analyses

    def render_file(self, analysis: FileAnalysis) -> Optional[Dict[str, str]]:
        """Render one file's declarations, or None if it has nothing to export."""
        chunks = []
        for declaration in analysis.declarations:
            try:
                chunks.extend(self.writer.write(declaration))
            except StructTSError as e:
                raise GenerationError(
                    f"Failed to translate a {declaration.keyword} declaration in {analysis.file_path}: {e}"
                ) from e

        if not chunks:
            logger.debug(f"No exported declarations in {analysis.file_path}")
            return None

        doc = ""
        if self.config.preserve_doc_comments and analysis.doc:
            doc = comment_block(analysis.doc, "")

        return {
            "file_name": Path(analysis.file_path).name,
            "doc": doc,
            "body": "\n\n".join(chunks),
        }

    def generate(self) -> str:
        """Render the complete TypeScript file for the package."""
        sections = []
        for analysis in self.analyze():
            section = self.render_file(analysis)
            if section is not None:
                sections.append(section)

        return _render_template(
            TEMPLATE_NAME,
            frontmatter=self.config.frontmatter.rstrip("\n"),
            sections=sections,
        )

    def write(self) -> Path:
        """Generate the package and write it to its output path."""
        output_path = self.config.resolved_output_path()
        content = self.generate()
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise GenerationError(f"Failed to write {output_path}: {e}")

        logger.info(f"Generated {self.config.path} -> {output_path}")
        return output_path

class Generator:
    """Runs every package of a configuration."""

    def __init__(self, config: Config):
        self.config = config
        self.parser = TreeSitterParser()

    def generate(self) -> List[Path]:
        """Generate all configured packages in order, stopping at the first failure."""
        if not self.config.packages:
            logger.warning("No packages configured, nothing to generate.")
            return []

        written = []
        for package in self.config.packages:
            written.append(PackageGenerator(package, self.parser).write())
        return written
