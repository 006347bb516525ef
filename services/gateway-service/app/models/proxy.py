"""
Request and response value types passed between the proxy route,
the forwarder and the backend client
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class InboundRequest:
    """A client request as received by the gateway"""

    method: str
    path: str
    query: List[Tuple[str, str]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    client_ip: Optional[str] = None
    scheme: str = "http"

    @property
    def has_body(self) -> bool:
        # Empty objects and arrays count as no body
        if self.body is None:
            return False
        if isinstance(self.body, (dict, list)):
            return len(self.body) > 0
        return True


@dataclass(frozen=True)
class OutboundRequest:
    """The single call the gateway makes to the backend for one inbound request"""

    method: str
    url: str
    params: List[Tuple[str, str]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None


@dataclass(frozen=True)
class UpstreamReply:
    """A backend response, whatever its status code"""

    status_code: int
    headers: Dict[str, str]
    body: Any
