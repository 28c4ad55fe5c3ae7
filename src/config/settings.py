"""
Loader configuration management.

Loads loader settings from a YAML file and applies environment
variable overrides on top.
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

ENV_OVERRIDES = {
    "LOADER_PAGE_SIZE": "page_size",
    "LOADER_BATCH_SIZE": "batch_size",
    "LOADER_DEFAULT_HOURLY_RATE": "default_hourly_rate",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
}


class LoaderSettings(BaseModel):
    """
    Tunables of the streaming loader.

    Attributes:
        page_size: Dispatches requested per page
        batch_size: Dispatches whose children are fetched concurrently
        default_hourly_rate: Rate for time entries that carry none
        log_level: Logger level name
        log_format: "json" or "text"
    """

    page_size: int = Field(100, ge=1, le=1000)
    batch_size: int = Field(5, ge=1, le=100)
    default_hourly_rate: float = Field(50.0, ge=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"


class SettingsLoader:
    """
    Loads LoaderSettings from a YAML configuration file.

    Expected YAML format:
    ```yaml
    loader:
      page_size: 100
      batch_size: 5
      default_hourly_rate: 50
      log_level: INFO
      log_format: json
    ```
    """

    def __init__(self, config_path: str | Path | None = None, environ: dict[str, str] | None = None):
        """
        Initialize the settings loader.

        Args:
            config_path: Path to the YAML configuration file (optional)
            environ: Environment mapping (defaults to os.environ)

        Raises:
            FileNotFoundError: If config_path is given but does not exist
        """
        self.config_path = Path(config_path) if config_path else None
        if self.config_path is not None and not self.config_path.exists():
            raise FileNotFoundError(f"Loader configuration file not found: {config_path}")
        self.environ = environ if environ is not None else os.environ

    def load(self) -> LoaderSettings:
        """
        Build settings from file values, then environment overrides.

        Raises:
            ValueError: If the YAML has no 'loader' section
            pydantic.ValidationError: If a value is out of range
        """
        values: dict[str, Any] = {}

        if self.config_path is not None:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)

            if not config or "loader" not in config:
                raise ValueError("Configuration file must contain 'loader' section")
            if not isinstance(config["loader"], dict):
                raise ValueError("'loader' section must be a mapping")
            values.update(config["loader"])

        for env_name, field_name in ENV_OVERRIDES.items():
            raw = self.environ.get(env_name)
            if raw:
                values[field_name] = raw.upper() if field_name == "log_level" else raw

        return LoaderSettings(**values)


def load_settings(config_path: str | Path | None = None) -> LoaderSettings:
    """Convenience wrapper around SettingsLoader."""
    return SettingsLoader(config_path).load()
