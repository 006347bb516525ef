"""
Data models for gateway service
"""

from .proxy import InboundRequest, OutboundRequest, UpstreamReply
from .outcome import Unreachable, Timeout, UpstreamResponse, OtherFailure, TransportFailure

__all__ = [
    "InboundRequest",
    "OutboundRequest",
    "UpstreamReply",
    "Unreachable",
    "Timeout",
    "UpstreamResponse",
    "OtherFailure",
    "TransportFailure",
]
