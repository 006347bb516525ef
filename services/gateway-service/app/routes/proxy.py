"""
Catch-all proxy route for the API prefix
"""

from fastapi import APIRouter, Depends, Request

from app.services.proxy_service import ProxyForwarder
from app.utils.body import read_json_body

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

router = APIRouter()


def get_forwarder(request: Request) -> ProxyForwarder:
    return request.app.state.forwarder


@router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy_request(
    request: Request,
    path: str,
    forwarder: ProxyForwarder = Depends(get_forwarder),
):
    """Forward any request under the API prefix to the backend service"""
    body = await read_json_body(request)
    inbound = forwarder.inbound_from_request(request, body)
    return await forwarder.forward(inbound)
