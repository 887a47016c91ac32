"""Configuration module for the datasession client.

Key Components:
- settings: Client configuration loaded from environment variables and TOML files
- Logging: Loguru-based logging configuration with development/production modes
- Error handling: Centralized error codes and user-facing error texts

Defaults live in ``resources/app.toml`` and can be overridden through
environment variables or a ``.env`` file.
"""

from datasession.config.config import Settings, settings
from datasession.config.errors import ErrorCode, ErrorNames
from datasession.config.logger import config_logger

__all__ = [
    "ErrorCode",
    "ErrorNames",
    "Settings",
    "config_logger",
    "settings",
]
