"""Configuration management."""

from gateflow.config.settings import Environment, Settings, get_settings

__all__ = ["Environment", "Settings", "get_settings"]
