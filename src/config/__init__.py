"""
Loader configuration.
"""

from .settings import LoaderSettings, SettingsLoader, load_settings

__all__ = ["LoaderSettings", "SettingsLoader", "load_settings"]
