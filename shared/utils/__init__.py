"""
Shared utilities for gateway services

This package contains common utilities used across services.
"""

from .logger import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]

__version__ = "1.0.0"
