"""
Proxy Service
Rewrites inbound gateway requests into backend calls and maps the
outcome back to a client response
"""

import json
import time
from typing import Any, Dict, Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from app.config import GatewaySettings
from app.models import (
    InboundRequest,
    OtherFailure,
    OutboundRequest,
    Timeout,
    Unreachable,
    UpstreamReply,
    UpstreamResponse,
)
from app.utils.backend_client import BackendClient

logger = structlog.get_logger(__name__)

# Statuses that must not carry a body
NO_BODY_STATUSES = {204, 304}


def _first_forwarded(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    first = value.split(",")[0].strip()
    return first or None


class ProxyForwarder:
    """Forwards one inbound request to the backend and produces one response"""

    def __init__(self, settings: GatewaySettings, client: BackendClient):
        self.settings = settings
        self.client = client

    def inbound_from_request(self, request: Request, body: Any) -> InboundRequest:
        """Capture the parts of a Starlette request the forwarder needs"""
        headers = {k.lower(): v for k, v in request.headers.items()}

        client_ip = None
        scheme = request.url.scheme
        if self.settings.trust_proxy:
            client_ip = _first_forwarded(headers.get("x-forwarded-for"))
            scheme = _first_forwarded(headers.get("x-forwarded-proto")) or scheme
        if not client_ip and request.client:
            client_ip = request.client.host

        # Some servers include the query string in raw_path
        raw_path = request.scope.get("raw_path")
        if raw_path:
            path = raw_path.split(b"?", 1)[0].decode("latin-1")
        else:
            path = request.url.path

        return InboundRequest(
            method=request.method,
            path=path,
            query=request.query_params.multi_items(),
            headers=headers,
            body=body,
            client_ip=client_ip,
            scheme=scheme,
        )

    def build_outbound(self, inbound: InboundRequest) -> OutboundRequest:
        """
        Build the backend call for an inbound request.

        The path is forwarded unchanged and the query string travels only
        as params. Inbound headers are not passed through: the backend sees
        Content-Type (when a body is sent) and the X-Forwarded-* pair.
        """
        headers: Dict[str, str] = {}
        content = None

        if inbound.has_body:
            headers["Content-Type"] = inbound.headers.get("content-type") or "application/json"
            content = json.dumps(
                inbound.body, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")

        headers["X-Forwarded-For"] = inbound.client_ip or ""
        headers["X-Forwarded-Proto"] = inbound.scheme

        return OutboundRequest(
            method=inbound.method,
            url=self.client.build_url(inbound.path),
            params=list(inbound.query),
            headers=headers,
            content=content,
        )

    async def forward(self, inbound: InboundRequest) -> Response:
        start = time.monotonic()
        outbound = self.build_outbound(inbound)

        logger.info(
            "Proxying request",
            method=inbound.method,
            path=inbound.path,
            target_url=outbound.url,
        )

        outcome = await self.client.send(outbound)
        duration_ms = int((time.monotonic() - start) * 1000)

        if isinstance(outcome, UpstreamReply):
            logger.info(
                "Proxy response",
                method=inbound.method,
                path=inbound.path,
                status_code=outcome.status_code,
                duration_ms=duration_ms,
            )
            return self._relay(outcome)

        return self._failure_response(outcome, outbound.url, duration_ms)

    def _relay(self, reply: UpstreamReply) -> Response:
        # content-length is recomputed by the response for the re-encoded body
        headers = {}
        if "content-type" in reply.headers:
            headers["content-type"] = reply.headers["content-type"]
        return _json_or_empty(reply.status_code, reply.body, headers)

    def _failure_response(self, failure, target_url: str, duration_ms: int) -> Response:
        logger.error(
            "Proxy error",
            error=failure.message,
            error_type=type(failure).__name__,
            url=target_url,
            duration_ms=duration_ms,
        )

        if isinstance(failure, Unreachable):
            logger.error("Connection refused", url=target_url)
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Backend service unavailable",
                    "message": "The backend service is currently unavailable. Please try again later.",
                },
            )

        if isinstance(failure, Timeout):
            logger.error("Backend timeout", url=target_url, reason=failure.reason)
            return JSONResponse(
                status_code=504,
                content={
                    "error": "Backend service timeout",
                    "message": "The backend service did not respond in time. Please try again later.",
                },
            )

        if isinstance(failure, UpstreamResponse):
            return _json_or_empty(failure.status_code, failure.body, {})

        if isinstance(failure, OtherFailure):
            return JSONResponse(
                status_code=502,
                content={
                    "error": "Bad Gateway",
                    "message": "Failed to proxy request to backend service",
                },
            )

        raise TypeError(f"Unknown proxy outcome: {failure!r}")


def _json_or_empty(status_code: int, body: Any, headers: Dict[str, str]) -> Response:
    if status_code in NO_BODY_STATUSES or status_code < 200 or body is None:
        return Response(status_code=status_code, headers=headers)
    return JSONResponse(status_code=status_code, content=body, headers=headers)
