"""Custom error classes for the Data API Python client."""

from typing import Optional


class DataApiError(Exception):
    """Base exception for Data API client operations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAuthOptionsError(DataApiError, ValueError):
    """Raised when the credentials match none of the supported shapes."""

    def __init__(self, message: str = "Invalid auth options"):
        super().__init__(message)


class DataApiRequestError(DataApiError):
    """Raised when the Data API answers with a non-success status."""

    def __init__(
        self,
        reason: str,
        body: str,
        status_code: Optional[int] = None,
    ):
        self.reason = reason
        self.body = body
        self.status_code = status_code
        super().__init__(f"{reason}: {body}")


class DataApiConnectionError(DataApiRequestError):
    """Raised when the request never got an HTTP response."""

    def __init__(self, message: str):
        super().__init__("Connection error", message, status_code=0)
