"""
Logging setup for gqlbind.

This module provides structured and colored formatters, credential masking
and a manager configuring the root logger from ``LoggingConfig``.
"""

from .filters import SensitiveDataFilter
from .formatters import ColoredFormatter, StructuredFormatter
from .manager import LoggingManager, setup_logging

__all__ = [
    "LoggingManager",
    "setup_logging",
    "StructuredFormatter",
    "ColoredFormatter",
    "SensitiveDataFilter",
]
