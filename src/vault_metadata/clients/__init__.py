"""Network clients for the Dataverse API."""

from .client import Client
from .dataverse_client import DataverseClient
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    LockTimeoutError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "Client",
    "DataverseClient",
    "ClientError",
    "ConnectionError",
    "APIError",
    "LockTimeoutError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
]
