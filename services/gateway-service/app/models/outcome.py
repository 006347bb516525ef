"""
Failure variants produced by the backend client when a proxied call
does not yield a normal backend response
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Unreachable:
    """Connection refused or the backend host could not be reached"""

    message: str


@dataclass(frozen=True)
class Timeout:
    """The call exceeded its time bound or was aborted before completion"""

    message: str
    reason: str = "timeout"


@dataclass(frozen=True)
class UpstreamResponse:
    """The transport reported an error that still carries a backend response"""

    status_code: int
    body: Any
    message: str = ""


@dataclass(frozen=True)
class OtherFailure:
    """Any transport failure not covered above"""

    message: str
    error_type: str = ""


TransportFailure = Union[Unreachable, Timeout, UpstreamResponse, OtherFailure]
