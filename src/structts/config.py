"""Configuration models and YAML loading."""

import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "structts.yaml"
DEFAULT_OUTPUT_FILE = "index.ts"

class EmitConfig(BaseModel):
    """Settings consumed by the type translator."""
    indent: str = "  "
    fallback_type: str = "any"
    type_mappings: Dict[str, str] = Field(default_factory=dict)
    flavor: Literal["default", "yaml"] = "default"
    preserve_comments: Literal["default", "types", "none"] = "default"

    @property
    def preserve_type_comments(self) -> bool:
        return self.preserve_comments != "none"

    @property
    def preserve_doc_comments(self) -> bool:
        """Whether package-level doc comments are written."""
        return self.preserve_comments == "default"

class PackageConfig(EmitConfig):
    """One Go package to generate TypeScript for."""
    path: Path
    output_path: Optional[Path] = None
    frontmatter: str = ""
    include_files: List[str] = Field(default_factory=list)
    exclude_files: List[str] = Field(default_factory=list)

    def resolved_output_path(self) -> Path:
        if self.output_path is not None:
            return self.output_path
        return self.path / DEFAULT_OUTPUT_FILE

class Config(BaseModel):
    """Top-level configuration file."""
    packages: List[PackageConfig] = Field(default_factory=list)

def load_config(config_path: Path) -> Config:
    """Load and validate a structts YAML configuration file.

    Relative package and output paths are resolved against the directory
    containing the configuration file.

    Raises:
        ConfigError: If the file is missing, is not valid YAML or does not
            match the configuration schema.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Could not read {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {config_path}")

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}")

    base_dir = config_path.parent
    for package in config.packages:
        if not package.path.is_absolute():
            package.path = base_dir / package.path
        if package.output_path is not None and not package.output_path.is_absolute():
            package.output_path = base_dir / package.output_path

    logger.debug(f"Loaded {len(config.packages)} package(s) from {config_path}")
    return config
