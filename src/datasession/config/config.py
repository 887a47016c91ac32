"""Define configuration for the project."""

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


_app_config_path = Path(__file__).parent / "resources" / "app.toml"

with Path.open(_app_config_path, "rb") as f:
    _config = tomllib.load(f)
    _app_config = _config.get("app", {})
    _api_config = _app_config.get("api", {})
    _record_config = _app_config.get("record", {})
    _timer_config = _app_config.get("timers", {})
    _dataset_config = _app_config.get("dataset", {})
    _log_config = _app_config.get("logging", {})


class Settings(BaseSettings):
    """Client configuration settings."""

    # Environment configuration
    app_env: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Current application environment determining behavior.",
        validation_alias="ENV",
    )

    version: str = Field(
        default=_app_config.get("version", "0.1.0"),
        description="Version of the client library.",
    )

    # Backend API configuration
    api_base_url: str = Field(
        default=_api_config.get("base_url", "http://localhost:8000"),
        description="Base URL of the dataset backend.",
        validation_alias="DATASESSION_API_URL",
    )

    api_timeout: float = Field(
        default=_api_config.get("timeout", 120.0),
        description="Timeout in seconds for a single backend request.",
    )

    session_header: str = Field(
        default=_api_config.get("session_header", "X-Session-ID"),
        description="Header carrying the session identity on backend calls.",
    )

    # Local record configuration
    record_path_config: Path = Field(
        default=Path(_record_config.get("path", "data/local_storage.json")),
        description="File backing the persisted key/value store.",
        validation_alias="DATASESSION_RECORD_PATH",
        exclude=True,
    )

    record_key: str = Field(
        default=_record_config.get("key", "lastUploadedFile"),
        description="Key under which the last committed upload is stored.",
    )

    # Timer configuration (seconds)
    error_dismiss_delay: float = Field(
        default=_timer_config.get("error_dismiss_delay", 5.0),
        description="Delay before an error notification and its upload clear.",
    )

    success_banner_delay: float = Field(
        default=_timer_config.get("success_banner_delay", 3.0),
        description="How long the commit success indicator stays visible.",
    )

    description_settle_delay: float = Field(
        default=_timer_config.get("description_settle_delay", 0.3),
        description="Wait before auto-generating a description after upload.",
    )

    # Dataset texts
    placeholder_description: str = Field(
        default=_dataset_config.get("placeholder_description"),
        description="Guidance text sent as description for fresh uploads.",
    )

    default_dataset_name: str = Field(
        default=_dataset_config.get("default_dataset_name", "Dataset"),
        description="Fallback name for the backend default dataset.",
    )

    default_dataset_description: str = Field(
        default=_dataset_config.get("default_dataset_description"),
        description="Fallback description for the backend default dataset.",
    )

    custom_dataset_name: str = Field(
        default=_dataset_config.get("custom_dataset_name", "Custom Dataset"),
        description="Display name for a custom dataset the client cannot identify.",
    )

    # Log configuration
    log_dir: str = Field(
        default=_log_config.get("log_dir", "log"),
        description="Directory for storing log files.",
    )

    log_file: str = Field(
        default=_log_config.get("log_file", "app.log"),
        description="Name of the log file.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (e.g., DEBUG, INFO, WARNING, ERROR).",
    )

    rotation: str = Field(
        default=_log_config.get("rotation", "10 MB"),
        description="Log rotation strategy (time or size-based).",
    )

    loki_url: str | None = Field(
        default=None,
        validation_alias="LOKI_URL",
        description="Loki push endpoint; production logs are shipped when set.",
    )

    @computed_field
    @property
    def record_path(self) -> Path:
        """File backing the persisted key/value store."""
        if self.app_env == "testing":
            return Path("test_data/local_storage.json")
        return self.record_path_config

    @computed_field
    @property
    def log_path(self) -> Path:
        """Path where client logs are stored."""
        return Path(self.log_dir) / self.log_file

    @model_validator(mode="after")
    def validate_log_level(self) -> "Settings":
        """Adjust log level based on environment."""
        if self.app_env == "production" and self.log_level == "DEBUG":
            self.log_level = "INFO"
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Create a single instance of Settings to use throughout the client
settings = Settings()
