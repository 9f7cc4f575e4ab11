"""Configuration objects."""

from .settings import CompressionConfig, Settings, get_settings

__all__ = ["CompressionConfig", "Settings", "get_settings"]
