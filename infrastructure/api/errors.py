"""Error types raised by the API gateway client."""

from typing import Optional

from infrastructure.api.envelope import Envelope

GENERIC_FAILURE_MESSAGE = "Request failed"
NETWORK_UNREACHABLE_MESSAGE = "Network unreachable. Check your connection and try again."


class CrmClientError(Exception):
    """Base exception for the CRM client."""
    pass


class ApiError(CrmClientError):
    """Any failure coming out of the API gateway client."""
    pass


class NetworkUnreachableError(ApiError):
    """The HTTP exchange itself failed: offline, DNS, TLS or timeout."""

    def __init__(self, message: str = NETWORK_UNREACHABLE_MESSAGE, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ApplicationError(ApiError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, status_code: int, envelope: Optional[Envelope] = None):
        super().__init__(message)
        self.status_code = status_code
        self.envelope = envelope


class AuthenticationError(ApplicationError):
    """HTTP 401: the token is missing, expired or rejected."""
    pass


class InvalidResponseError(ApiError):
    """A success status arrived with a body that is not a JSON envelope."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


def failure_message(envelope: Optional[Envelope]) -> str:
    if envelope is not None:
        if envelope.error:
            return envelope.error
        if envelope.message:
            return envelope.message
    return GENERIC_FAILURE_MESSAGE
