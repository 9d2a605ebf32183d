"""
Error types raised by the Blitline client.

Construction and serialization errors are local programmer errors and are
raised before anything is sent. Transport errors wrap whatever went wrong
while talking to the service and are never retried.
"""

from __future__ import annotations

from typing import Optional


class BlitlineError(Exception):
    """Base class for all errors raised by this package."""


class ConstructionError(BlitlineError, ValueError):
    """A job, function or saved image was assembled incorrectly."""


class SerializationError(BlitlineError, TypeError):
    """A parameter value cannot be represented in the wire format."""

    def __init__(self, function_name: str, param: str, value: object) -> None:
        self.function_name = function_name
        self.param = param
        self.value = value
        super().__init__(
            f"Parameter '{param}' of function '{function_name}' cannot be encoded as JSON: {value!r} ({type(value).__name__})"
        )


class TransportError(BlitlineError):
    """The submission request failed or the service answered with something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
