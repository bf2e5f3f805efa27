"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Project config (.soypot/config.yaml)
  2. User config (~/.soypot/config.yaml)
  3. Environment variables
  4. Defaults

Example project config:

    sources:
      extensions: [".soy"]
      exclude: ["node_modules", "*_test.soy"]
    catalog:
      project: "shop 2.1"
      bugs_address: "i18n@example.com"
      width: 79
"""

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .core.errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = [".soy"]

DEFAULT_EXCLUDE = [
    ".git",
    ".svn",
    ".hg",
    "node_modules",
]


def _as_list(value: Any) -> List[str]:
    """A single YAML string counts as a one-item list."""
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class SourceConfig:
    """Which files are read as templates."""
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))

    def matches_extension(self, path: Path) -> bool:
        """Check if a file has one of the template extensions."""
        name = path.name.lower()
        return any(name.endswith(ext.lower()) for ext in self.extensions)

    def should_exclude(self, path: Path) -> bool:
        """Check a path (or its last component) against exclude patterns."""
        posix = path.as_posix()
        return any(
            fnmatch.fnmatch(path.name, pattern) or fnmatch.fnmatch(posix, pattern)
            for pattern in self.exclude
        )

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not self.extensions:
            return "sources.extensions must not be empty"
        for ext in self.extensions:
            if not ext.startswith("."):
                return f"Extension '{ext}' must start with '.'"
        return None


@dataclass
class CatalogConfig:
    """Header and formatting of the written catalog."""
    project: str = "PACKAGE VERSION"
    bugs_address: str = ""
    width: int = 79             # 0 disables wrapping
    merge_duplicates: bool = True
    creation_date: bool = False  # Off keeps output byte-identical across runs

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.width < 0:
            return f"catalog.width must be >= 0, got {self.width}"
        return None


@dataclass
class Config:
    """Application configuration."""
    sources: SourceConfig = field(default_factory=SourceConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)

    def validate(self) -> Optional[str]:
        return self.sources.validate() or self.catalog.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sources": {
                "extensions": list(self.sources.extensions),
                "exclude": list(self.sources.exclude),
            },
            "catalog": {
                "project": self.catalog.project,
                "bugs_address": self.catalog.bugs_address,
                "width": self.catalog.width,
                "merge_duplicates": self.catalog.merge_duplicates,
                "creation_date": self.catalog.creation_date,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        sources_data = data.get("sources") or {}
        catalog_data = data.get("catalog") or {}

        return cls(
            sources=SourceConfig(
                extensions=_as_list(sources_data.get("extensions", DEFAULT_EXTENSIONS)),
                exclude=_as_list(sources_data.get("exclude", DEFAULT_EXCLUDE)),
            ),
            catalog=CatalogConfig(
                project=str(catalog_data.get("project", "PACKAGE VERSION")),
                bugs_address=str(catalog_data.get("bugs_address", "")),
                width=int(catalog_data.get("width", 79)),
                merge_duplicates=bool(catalog_data.get("merge_duplicates", True)),
                creation_date=bool(catalog_data.get("creation_date", False)),
            ),
        )


class ConfigManager:
    """
    Manages configuration loading.

    Hierarchy:
      1. Project config (.soypot/config.yaml)
      2. User config (~/.soypot/config.yaml)
      3. Environment
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".soypot"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".soypot"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Environment sits below both files
        env_extensions = os.environ.get("SOYPOT_EXTENSIONS")
        if env_extensions:
            config_data.setdefault("sources", {})["extensions"] = [
                ext.strip() for ext in env_extensions.split(",") if ext.strip()
            ]
        if os.environ.get("SOYPOT_CATALOG_PROJECT"):
            config_data.setdefault("catalog", {})["project"] = os.environ["SOYPOT_CATALOG_PROJECT"]
        if os.environ.get("SOYPOT_CATALOG_WIDTH"):
            config_data.setdefault("catalog", {})["width"] = os.environ["SOYPOT_CATALOG_WIDTH"]

        for path in (self.user_config_path, self.project_config_path):
            config_data = self._merge(config_data, self._read(path))

        try:
            self._config = Config.from_dict(config_data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", path)
            return {}
        return data

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
