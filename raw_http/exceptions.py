"""
Exception classes for the raw HTTP adapter.
"""

from typing import Any, Optional, Union


class RawHttpError(Exception):
    """Base exception for all raw_http errors."""

    pass


class ConfigurationError(RawHttpError):
    """
    Adapter configuration error.

    Raised when an adapter cannot be built from the given input.
    """

    pass


class ClientError(RawHttpError):
    """
    HTTP client error.

    Raised when an exchange could not be completed, when the underlying
    client classified it as a bad response, or when the server answered
    with a status code of 400 or above.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[bytes] = None,
        code: Optional[Union[int, str]] = None,
    ):
        """
        Initialize client error.

        Args:
            message: Error message (the decoded body for HTTP failures)
            status_code: HTTP status code, if a response was received
            body: Raw response body, if a response was received
            code: Transport error code (errno), if any
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.code = code

    @classmethod
    def from_body(cls, body: Optional[bytes], status_code: Optional[int] = None) -> "ClientError":
        """Wrap an HTTP error response body."""
        message = _decode(body)
        if not message:
            message = f"HTTP {status_code}" if status_code else "Empty response"
        return cls(message, status_code=status_code, body=body)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ClientError":
        """Wrap a transport failure that carries no response."""
        message = str(exc) or exc.__class__.__name__
        return cls(message, code=getattr(exc, "errno", None))

    @classmethod
    def from_requests_exception(cls, exc: Any) -> "ClientError":
        """Create ClientError from a requests exception."""
        response = getattr(exc, "response", None)
        if response is None:
            return cls.from_exception(exc)

        error = cls.from_body(response.content, response.status_code)
        error.code = getattr(exc, "errno", None)
        return error

    @classmethod
    def from_aiohttp_exception(cls, exc: Any) -> "ClientError":
        """
        Create ClientError from an aiohttp exception.

        ``ClientResponseError`` carries the status but not the body, so the
        reason phrase becomes the message.
        """
        status = getattr(exc, "status", None)
        if not status:
            return cls.from_exception(exc)
        message = getattr(exc, "message", "") or f"HTTP {status}"
        return cls(message, status_code=status)

    def __repr__(self) -> str:
        return (
            f"ClientError(message={self.message!r}, "
            f"status_code={self.status_code}, "
            f"code={self.code!r})"
        )


def _decode(body: Optional[Any]) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return str(body)
