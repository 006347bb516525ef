"""
API routes for gateway service
"""

from . import health, proxy

__all__ = ["health", "proxy"]
