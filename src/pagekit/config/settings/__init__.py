"""Config settings – 12-factor env-based configuration."""
from pagekit.config.settings.base import Settings
from pagekit.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader
from pagekit.config.settings.pagination import PaginationSettings

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "PaginationSettings",
    "Settings",
    "SettingsLoader",
]
