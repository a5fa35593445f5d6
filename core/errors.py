"""Failure taxonomy for remote calls and the classifier that turns it into text.

The union is closed: every failure a component can observe is one of the four
FetchError subclasses below. Anything else reaching a component boundary is a
bug in request setup and is reported as such.
"""

from typing import Any, Mapping, Optional

TRANSPORT_MESSAGE = "Could not reach the news server. Please check your connection."


class FetchError(Exception):
    kind = "fetch"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class TransportError(FetchError):
    """Request dispatched, no response received (network failure, timeout)."""
    kind = "transport"


class ServerError(FetchError):
    """Response received with a non-success status."""
    kind = "server"

    def __init__(self, status: int, body: Any = None, message: str = ""):
        super().__init__(message or f"Request failed with status code {status}")
        self.status = status
        self.body = body

    def structured_field(self, name: str) -> Optional[str]:
        if isinstance(self.body, Mapping):
            value = self.body.get(name)
            if value:
                return str(value)
        return None


class DataShapeError(FetchError):
    """Response received but its shape fails validation."""
    kind = "shape"


class MissingResourceError(FetchError):
    """A field required to build the request is absent; nothing was sent."""
    kind = "missing"


def classify_error(err: BaseException, fallback: Optional[str] = None) -> str:
    """Map a failure to the single message shown to the user.

    Priority: server `error` field, then server `details` field, then the
    transport-level message, then a request-setup message.
    """
    if isinstance(err, ServerError):
        structured = err.structured_field("error") or err.structured_field("details")
        if structured:
            return structured
        body_msg = err.structured_field("message") or err.message
        return f"Server error: {err.status} - {body_msg}"
    if isinstance(err, TransportError):
        return err.message or fallback or TRANSPORT_MESSAGE
    if isinstance(err, (DataShapeError, MissingResourceError)):
        return err.message or fallback or "Unexpected response from server"
    detail = str(err)
    if not detail:
        return fallback or "Error setting up request"
    return f"Error setting up request: {detail}"
