"""
Configuration management for QueryLens.

Handles the database connection options, the translator's tunable
defaults, and loading both from YAML.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path
import json

import yaml


class SchemaLoadError(Exception):
    """Raised when a config or schema snapshot file cannot be read."""
    pass


@dataclass
class DatabaseConfig:
    """Database connection configuration."""
    db_path: Optional[str] = None  # None means an in-memory database
    read_only: bool = True
    max_rows: int = 500  # Rows fetched per executed statement
    connection_timeout: int = 30

    def get_connection_string(self) -> str:
        """Generate SQLAlchemy connection string."""
        if not self.db_path:
            return "sqlite://"
        if self.read_only:
            return f"sqlite:///file:{self.db_path}?mode=ro&uri=true"
        return f"sqlite:///{self.db_path}"


@dataclass
class TranslatorConfig:
    """Defaults used by the free-text translator."""
    default_limit: int = 20
    recent_limit: int = 5
    # Tried in order by "find" when no table is named
    find_fallback_tables: List[str] = field(default_factory=lambda: ["Book", "Author"])


@dataclass
class QueryLensConfig:
    """Main configuration container."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    translator: TranslatorConfig = field(default_factory=TranslatorConfig)
    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: str) -> "QueryLensConfig":
        """Load configuration from YAML file."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SchemaLoadError(f"Could not read config {path}: {e}")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "QueryLensConfig":
        """Create config from dictionary."""
        db_data = data.get("database") or {}
        db_config = DatabaseConfig(
            db_path=db_data.get("path"),
            read_only=db_data.get("read_only", True),
            max_rows=db_data.get("max_rows", 500),
            connection_timeout=db_data.get("connection_timeout", 30),
        )

        tr_data = data.get("translator") or {}
        tr_config = TranslatorConfig(
            default_limit=tr_data.get("default_limit", 20),
            recent_limit=tr_data.get("recent_limit", 5),
            find_fallback_tables=list(tr_data.get("find_fallback_tables", ["Book", "Author"])),
        )

        return cls(
            database=db_config,
            translator=tr_config,
            verbose=data.get("verbose", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "database": {
                "path": self.database.db_path,
                "read_only": self.database.read_only,
                "max_rows": self.database.max_rows,
                "connection_timeout": self.database.connection_timeout,
            },
            "translator": {
                "default_limit": self.translator.default_limit,
                "recent_limit": self.translator.recent_limit,
                "find_fallback_tables": list(self.translator.find_fallback_tables),
            },
            "verbose": self.verbose,
        }


def load_schema_file(path: str) -> Dict[str, Any]:
    """
    Read a schema snapshot mapping from a YAML or JSON file.

    The file holds the same mapping SchemaModel.from_dict accepts.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
        if path.lower().endswith(".json"):
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise SchemaLoadError(f"Could not read schema {path}: {e}")

    if not isinstance(data, dict):
        raise SchemaLoadError(f"Schema file {path} must contain a mapping of tables")
    return data


def create_default_config(
    db_path: Optional[str] = None,
    read_only: bool = True,
    verbose: bool = False,
) -> QueryLensConfig:
    """Factory function to create a default configuration."""
    return QueryLensConfig(
        database=DatabaseConfig(db_path=db_path, read_only=read_only),
        translator=TranslatorConfig(),
        verbose=verbose,
    )
