"""
JSON request body parsing for proxied requests
"""

from typing import Any

from fastapi import Request

from app.utils.backend_client import loads_strict


class RequestBodyError(Exception):
    """Inbound body rejected before it reaches the forwarder"""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message


def is_json_media_type(content_type: str) -> bool:
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_json_body(request: Request) -> Any:
    """
    Parse the request body as JSON.

    Returns None when there is no body. Only objects and arrays are
    accepted at the top level.
    """
    raw = await request.body()
    if not raw.strip():
        return None

    if not is_json_media_type(request.headers.get("content-type", "")):
        raise RequestBodyError(
            415,
            "Unsupported Media Type",
            "Request body must be sent as application/json",
        )

    try:
        body = loads_strict(raw)
    except ValueError:
        raise RequestBodyError(400, "Invalid JSON", "Request body is not valid JSON")

    if not isinstance(body, (dict, list)):
        raise RequestBodyError(400, "Invalid JSON", "Request body must be a JSON object or array")

    return body
