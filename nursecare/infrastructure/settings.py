"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from typing import Optional

from nursecare.infrastructure.config_manager import ConfigManager, DatabaseConfig, load_env_file

# Application metadata
APP_NAME = "NurseCare"
APP_VERSION = "1.0.0"

# Default forward window for upcoming todos (hours)
DEFAULT_UPCOMING_HOURS = 24

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000,"
    "http://localhost:3001,"
    "http://127.0.0.1:3000,"
    "http://127.0.0.1:3001"
)


class Settings:
    """Application settings loaded from configuration manager and environment.

    This class provides a unified interface for accessing application settings,
    combining values from the configuration manager with environment variables
    and sensible defaults.
    """

    def __init__(self):
        """Initialize settings from configuration manager and environment."""
        load_env_file()

        self._db_config: Optional[DatabaseConfig] = None
        self._config_manager: Optional[ConfigManager] = None

        self.app_name = os.getenv("NC_APP_NAME", APP_NAME)
        self.version = APP_VERSION

        # Logging
        self.log_level = os.getenv("NC_LOG_LEVEL", "INFO")
        self.json_logs = os.getenv("NC_JSON_LOGS", "false").lower() == "true"

        # Todo classification
        self.upcoming_hours = int(os.getenv("NC_UPCOMING_HOURS", str(DEFAULT_UPCOMING_HOURS)))

        # API server
        self.api_host = os.getenv("NC_API_HOST", "0.0.0.0")
        self.api_port = int(os.getenv("NC_API_PORT", "8000"))
        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("NC_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
            if origin.strip()
        ]

    @property
    def config_manager(self) -> ConfigManager:
        """Get configuration manager instance."""
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def db_config(self) -> DatabaseConfig:
        """Get database configuration (loaded lazily on first access)."""
        if self._db_config is None:
            self._db_config = self.config_manager.get_database_config()
        return self._db_config

    def get_db_path(self) -> str:
        """Get database path for DuckDB.

        Returns:
            Database path or ':memory:' for in-memory database
        """
        return self.db_config.get_connection_string()


# Global settings instance
settings = Settings()
