"""Configuration package."""

from jeko.config.settings import JekoSettings, load_settings

__all__ = [
    "JekoSettings",
    "load_settings",
]
