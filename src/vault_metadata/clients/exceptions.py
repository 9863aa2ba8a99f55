"""Errors raised by the Dataverse client."""


class ClientError(Exception):
    """Base class for failures talking to Dataverse."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ConnectionError(ClientError):
    """Raised when Dataverse could not be reached, even after retrying."""

    pass


class APIError(ClientError):
    """Raised for a non-2xx response.

    Attributes:
        status_code: HTTP status of the response
        detail: The "message" member of the Dataverse error body, if any
    """

    def __init__(self, message: str, status_code: int, detail: str = "", *args, **kwargs):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message, *args, **kwargs)


class RateLimitError(APIError):
    """Raised for a 429 response."""

    def __init__(self, message: str = "Rate limit exceeded", detail: str = ""):
        super().__init__(message, status_code=429, detail=detail)


class NotFoundError(APIError):
    """Raised for a 404 response.

    On a workflow resume this usually means the paused workflow is not
    visible yet, which is worth retrying.
    """

    def __init__(self, message: str = "Resource not found", detail: str = ""):
        super().__init__(message, status_code=404, detail=detail)


class ValidationError(ClientError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str, errors: list | None = None, *args, **kwargs):
        self.errors = errors or []
        super().__init__(message, *args, **kwargs)


class LockTimeoutError(ClientError):
    """Raised when an expected dataset lock does not show up in time."""

    pass
