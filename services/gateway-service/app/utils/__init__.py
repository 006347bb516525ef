"""
Utility modules for gateway service
"""

from .backend_client import BackendClient, BodyTooLargeError, decode_body, loads_strict
from .body import RequestBodyError, read_json_body

__all__ = [
    "BackendClient",
    "BodyTooLargeError",
    "decode_body",
    "loads_strict",
    "RequestBodyError",
    "read_json_body",
]
