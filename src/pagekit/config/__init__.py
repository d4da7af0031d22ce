"""Config – 12-factor settings, loaders and validation errors."""

from pagekit.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    PaginationSettings,
    Settings,
    SettingsLoader,
)
from pagekit.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PaginationSettings",
    "Settings",
    "SettingsLoader",
]
