"""Exceptions raised by the davcloud client."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .results import ShareResult


class CloudError(Exception):
    """Base exception for davcloud errors."""
    pass


class ConfigurationError(CloudError, ValueError):
    """Malformed base URL, remote path or client configuration."""
    pass


class DecodeError(CloudError):
    """Response body is not the XML document the endpoint is expected to return."""

    def __init__(self, message: str, body: bytes = b""):
        super().__init__(message)
        self.body = body


class WebDAVError(CloudError):
    """Fault reported by the server inside a WebDAV response body.

    Attributes:
        exception: Server-side exception class (e.g. ``Sabre\\DAV\\Exception\\NotFound``)
        message: Human readable message sent by the server
    """

    def __init__(self, exception: str, message: str = ""):
        super().__init__(f"Exception: {exception}, Message: {message}")
        self.exception = exception
        self.message = message

    @property
    def is_not_found(self) -> bool:
        return self.exception.rsplit("\\", 1)[-1] == "NotFound"


class OCSError(CloudError):
    """OCS envelope decoded fine but carries an unsuccessful status code."""

    def __init__(self, status_code: int, message: str = "", result: Optional["ShareResult"] = None):
        text = f"Share API returned an unsuccessful status code {status_code}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
        self.status_code = status_code
        self.message = message
        self.result = result
