# bus_client/utils/config_manager.py
"""
utils/config_manager.py

Handles loading client settings from a YAML configuration file
using Pydantic for validation and type-hinting.

The file path is taken from the BUS_CLIENT_CONFIG environment variable,
falling back to config/settings.yaml. When no file exists the defaults
below are used.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml
import os
import sys

CONFIG_ENV_VAR = "BUS_CLIENT_CONFIG"
DEFAULT_CONFIG_PATH = os.path.join("config", "settings.yaml")


class GeneralSettings(BaseModel):
    """General application settings."""
    log_level: str = Field(
        "INFO", description="Set to INFO for production readiness, DEBUG for development.")


class ClientSettings(BaseModel):
    """Settings used to build a bus Client."""
    url: Optional[str] = Field(
        None, description="Bus base URL (https only).")
    uuid: Optional[str] = Field(
        None, description="Client identifier used for Basic-Auth.")
    timeout: int = Field(
        1000, description="Per-request timeout in milliseconds.")
    worker_type: str = Field(
        "inline", description="Dispatch strategy: inline or queued.")
    lazy: bool = Field(
        False, description="Skip the startup /pulse check.")
    verify_ssl: bool = Field(
        True, description="Verify the bus TLS certificate.")
    queue: str = Field(
        "realtime", description="Celery queue for queued dispatch.")


class CelerySettings(BaseModel):
    """Settings for the Celery job queue used by queued dispatch."""
    broker_url: str = Field("redis://localhost:6379/0",
                            description="Redis as broker URL.")
    result_backend: str = Field(
        "redis://localhost:6379/0", description="Redis as result backend URL.")
    task_acks_late: bool = Field(
        True, description="Acknowledge task only after it's done.")
    worker_prefetch_multiplier: int = Field(
        1, description="Only fetch one task at a time per worker process.")
    default_queue: str = Field(
        "realtime", description="Queue consumed by event delivery workers.")
    max_retries: int = Field(
        3, description="Retries for a delivery job after transport failures.")


class Settings(BaseSettings):
    """Main settings model, loaded from a YAML file."""
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)
    logging: Optional[Dict[str, Any]] = Field(
        None, description="logging.config.dictConfig schema.")

    model_config = SettingsConfigDict(
        protected_namespaces=()
    )


class ConfigManager:
    """
    Singleton class to manage and load application settings.
    """
    _settings: Optional[Settings] = None

    @staticmethod
    def config_path() -> str:
        return os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)

    @staticmethod
    def get_settings() -> Settings:
        """
        Loads and returns the application settings. This is a singleton
        method that ensures the config is loaded only once.
        """
        if ConfigManager._settings is None:
            config_path = ConfigManager.config_path()
            if not os.path.exists(config_path):
                ConfigManager._settings = Settings()
                return ConfigManager._settings

            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            try:
                ConfigManager._settings = Settings.model_validate(config_data)
            except Exception as e:
                print(f"CRITICAL ERROR: Failed to validate settings from {config_path}. "
                      f"Please check your settings.yaml file against the schema. Error: {e}", file=sys.stderr)
                raise RuntimeError(
                    "Failed to load and validate application settings.") from e

        return ConfigManager._settings

    @staticmethod
    def reset():
        """Forget the loaded settings so the next call reloads them."""
        ConfigManager._settings = None
