"""Configuration service for Nexus CLI.

ConfigService is the single source of truth for configuration. It handles:

- Loading and saving config.json (created with defaults on first run)
- Dot-separated key access (``google.client_id``)
- Environment overrides for the Google OAuth client
- Resolving the local database path
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from nexus_cli.errors import ConfigurationError
from nexus_cli.models.config_models import AppConfig, GoogleConfig

APP_NAME = "nexus_cli"

ENV_OVERRIDES = {
    "NEXUS_GOOGLE_CLIENT_ID": "client_id",
    "NEXUS_GOOGLE_CLIENT_SECRET": "client_secret",
    "NEXUS_GOOGLE_REDIRECT_URI": "redirect_uri",
}


class ConfigService:
    """Loads, saves and queries the application configuration.

    Args:
        config_dir: Directory holding config.json (defaults to the platform
            user config dir).
        data_dir: Directory for the local database (defaults to the platform
            user data dir).
        environ: Environment used for overrides (defaults to ``os.environ``).
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        data_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self.config_dir = config_dir or Path(user_config_dir(APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = data_dir or Path(user_data_dir(APP_NAME))
        self._environ = os.environ if environ is None else environ

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            self._config = AppConfig()
            self.save_config()
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid config file {self.config_path}: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Write the current configuration (without env overrides) to disk."""
        if self._config is None:
            raise ConfigurationError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write(self._config.model_dump_json(indent=4))

        # holds the OAuth client secret
        self.config_path.chmod(0o600)

    def reset_config(self) -> AppConfig:
        """Replace the configuration with defaults, keeping the local user id."""
        user_id = self._config.user_id if self._config else None
        self._config = AppConfig(user_id=user_id) if user_id else AppConfig()
        self.save_config()
        return self._config

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key (None if missing)."""
        value: Any = self.config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key and save.

        Raises:
            ConfigurationError: Unknown key or a value the model rejects.
        """
        keys = key.split(".")
        config_dict = self.config.model_dump(mode="json")

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise ConfigurationError(f"Unknown config key: {key}")
            current = current[k]
        if keys[-1] not in current:
            raise ConfigurationError(f"Unknown config key: {key}")
        current[keys[-1]] = value

        try:
            self._config = AppConfig.model_validate(config_dict)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid value for {key}: {e}") from e
        self.save_config()

    @property
    def google(self) -> GoogleConfig:
        """Google settings with environment overrides applied."""
        overrides = {
            field: self._environ[env]
            for env, field in ENV_OVERRIDES.items()
            if self._environ.get(env)
        }
        return self.config.google.model_copy(update=overrides)

    @property
    def user_id(self) -> str:
        return self.config.user_id

    @property
    def db_path(self) -> Path:
        if self.config.storage.db_path:
            return Path(self.config.storage.db_path).expanduser()
        return self.data_dir / "nexus.db"


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
