"""
Backend Service HTTP Client
Performs the single outbound call for a proxied request and classifies
transport failures
"""

import asyncio
import json
import math
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
import structlog

from app.config import GatewaySettings
from app.models import (
    OtherFailure,
    OutboundRequest,
    Timeout,
    TransportFailure,
    Unreachable,
    UpstreamReply,
    UpstreamResponse,
)

logger = structlog.get_logger(__name__)

# httpx adds these to every request; only the forwarding allow-list goes upstream
CLIENT_DEFAULT_HEADERS = ("accept", "accept-encoding", "connection", "user-agent")


class BodyTooLargeError(Exception):
    """Raised when a request or response body exceeds the configured limit"""


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def _finite_float(value: str) -> float:
    number = float(value)
    if math.isinf(number):
        raise ValueError(f"JSON number out of range: {value}")
    return number


def loads_strict(data: bytes) -> Any:
    """
    json.loads that refuses NaN, Infinity and numbers overflowing a float.

    The json module accepts them, but they are not JSON and cannot be
    re-encoded into a response.
    """
    return json.loads(data, parse_constant=_reject_constant, parse_float=_finite_float)


def decode_body(content: bytes, encoding: Optional[str] = None) -> Any:
    """Interpret a backend body as JSON, falling back to text"""
    if not content:
        return None
    try:
        return loads_strict(content)
    except ValueError:
        return content.decode(encoding or "utf-8", errors="replace")


class BackendClient:
    """HTTP client for the backend service"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_body_bytes: int = 50 * 1024 * 1024,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        event_hooks: Optional[Mapping[str, List[Any]]] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_body_bytes = max_body_bytes
        self.transport = transport
        self.event_hooks = event_hooks

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BackendClient":
        return cls(
            base_url=settings.backend_url,
            timeout=settings.request_timeout,
            max_body_bytes=settings.max_body_bytes,
            transport=transport,
        )

    def build_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            transport=self.transport,
            event_hooks=self.event_hooks,
            follow_redirects=True,
        )

    async def send(self, outbound: OutboundRequest) -> Union[UpstreamReply, TransportFailure]:
        """
        Issue one call to the backend.

        Every backend status code is a normal reply. Transport failures are
        returned as one of the failure variants, checked in this order:
        unreachable, timeout/aborted, error carrying a response, other.
        """
        if outbound.content is not None and len(outbound.content) > self.max_body_bytes:
            return Timeout(
                message=f"Request body exceeds {self.max_body_bytes} bytes",
                reason="aborted",
            )

        try:
            return await asyncio.wait_for(self._send(outbound), timeout=self.timeout)
        except httpx.ConnectError as e:
            return Unreachable(message=str(e) or "Connection refused")
        except asyncio.TimeoutError:
            return Timeout(message=f"No response within {self.timeout}s")
        except httpx.TimeoutException as e:
            return Timeout(message=str(e) or f"No response within {self.timeout}s")
        except BodyTooLargeError as e:
            return Timeout(message=str(e), reason="aborted")
        except httpx.HTTPStatusError as e:
            return UpstreamResponse(
                status_code=e.response.status_code,
                body=self._error_body(e.response),
                message=str(e),
            )
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            return OtherFailure(message=str(e), error_type=type(e).__name__)

    async def _send(self, outbound: OutboundRequest) -> UpstreamReply:
        async with self._client(self.timeout) as client:
            request = client.build_request(
                outbound.method,
                outbound.url,
                params=outbound.params or None,
                headers=outbound.headers,
                content=outbound.content,
            )
            for name in CLIENT_DEFAULT_HEADERS:
                if name in request.headers:
                    del request.headers[name]

            response = await client.send(request, stream=True)
            try:
                content = await self._read_limited(response)
            finally:
                await response.aclose()

            return UpstreamReply(
                status_code=response.status_code,
                headers={k.lower(): v for k, v in response.headers.items()},
                body=decode_body(content, response.encoding),
            )

    async def _read_limited(self, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_body_bytes:
            raise BodyTooLargeError(
                f"Response body of {declared} bytes exceeds {self.max_body_bytes} bytes"
            )

        chunks = []
        size = 0
        async for chunk in response.aiter_bytes():
            size += len(chunk)
            if size > self.max_body_bytes:
                raise BodyTooLargeError(f"Response body exceeds {self.max_body_bytes} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        try:
            return decode_body(response.content, response.encoding)
        except httpx.ResponseNotRead:
            return None

    async def check_health(self, path: str, timeout: float = 5.0) -> Dict[str, Any]:
        """Check the backend health endpoint"""
        url = self.build_url(path)
        async with self._client(timeout) as client:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                logger.warning("Backend health check failed", url=url, error=str(e))
                return {"status": "unreachable", "error": type(e).__name__}

        if response.is_success:
            return {"status": "healthy", "status_code": response.status_code}
        return {"status": "unhealthy", "status_code": response.status_code}
