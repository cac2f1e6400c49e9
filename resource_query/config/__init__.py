"""Configuration package."""
from resource_query.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
