"""
Configuration management for gqlbind.
"""

from .loader import ConfigLoader, load_config
from .models import GlobalConfig, LoggingConfig, LogLevel

__all__ = [
    "ConfigLoader",
    "load_config",
    "GlobalConfig",
    "LoggingConfig",
    "LogLevel",
]
