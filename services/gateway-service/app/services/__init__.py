"""
Service layer for gateway service
"""

from .proxy_service import ProxyForwarder

__all__ = ["ProxyForwarder"]
