"""Configuration Manager.

This module loads database configuration from the environment or from a
JSON file and validates it before any adapter is built.

Architecture:
    - Infrastructure layer, isolated from the domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

SUPPORTED_DB_TYPES = ["duckdb"]


class DatabaseConfig(BaseModel):
    """Database configuration model.

    Parameters:
        db_type: Type of database (currently 'duckdb')
        db_path: Path to database file, or ':memory:' / None for in-memory
    """

    db_type: str = Field("duckdb", description="Database type")
    db_path: Optional[str] = Field(None, description="Path to database file (for DuckDB)")

    @field_validator("db_type")
    @classmethod
    def validate_db_type(cls, v: str) -> str:
        """Validate database type."""
        if v.lower() not in SUPPORTED_DB_TYPES:
            raise ValueError(f"Unsupported database type: {v}. Supported: {SUPPORTED_DB_TYPES}")
        return v.lower()

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, v: Optional[str]) -> Optional[str]:
        """Validate the database directory exists (if a path is given)."""
        if v is None or v == ":memory:":
            return v

        db_path_obj = Path(v)
        # File may not exist yet, its directory must
        if not db_path_obj.parent.exists():
            raise ValueError(f"Database directory does not exist: {db_path_obj.parent}")

        return str(db_path_obj)

    def get_connection_string(self) -> str:
        """Connection target for the configured database."""
        return self.db_path or ":memory:"


class ConfigManager:
    """Configuration manager for database and application settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        db_config = config.get_database_config()

        # Load from file
        config = ConfigManager.from_file("config.json")
        db_config = config.get_database_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._database_config: Optional[DatabaseConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - NC_DB_TYPE: Database type (duckdb)
            - NC_DB_PATH: Path to database file

        A ``.env`` file in the project root is loaded first when present.

        Returns:
            ConfigManager instance
        """
        load_env_file()

        config_data = {
            "database": {
                "db_type": os.getenv("NC_DB_TYPE", "duckdb"),
                "db_path": os.getenv("NC_DB_PATH"),
            }
        }

        return cls(config_data)

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        return cls(config_data)

    def get_database_config(self) -> DatabaseConfig:
        """Get database configuration.

        Returns:
            DatabaseConfig instance
        """
        if self._database_config is None:
            db_config_data = {
                k: v for k, v in self._config_data.get("database", {}).items() if v is not None
            }
            self._database_config = DatabaseConfig(**db_config_data)

        return self._database_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "database.db_path")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default


_env_loaded = False


def load_env_file() -> None:
    """Load the project ``.env`` file once, if it exists."""
    global _env_loaded
    if _env_loaded:
        return
    _env_loaded = True

    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug(f"Loaded environment variables from {env_path}")


# ============================================================================
# Convenience Functions
# ============================================================================

def get_database_config() -> DatabaseConfig:
    """Convenience function to get database configuration from environment.

    Returns:
        DatabaseConfig instance (defaults to an in-memory DuckDB database)
    """
    config_manager = ConfigManager.from_environment()
    return config_manager.get_database_config()


