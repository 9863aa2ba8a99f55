"""Base client for the Dataverse native API."""

import logging
from abc import ABC, abstractmethod
from time import sleep
from typing import Any

import httpx

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Dataverse-key"


class Client(ABC):
    """Base class for Dataverse API clients.

    Provides a lazy-initialized httpx.Client with context manager support,
    API token authentication, retries on connection failures and
    unwrapping of the {"status": ..., "data": ...} envelope that every
    Dataverse API response uses.

    Config keys:
        base_url (required): Dataverse server URL, e.g. "http://localhost:8080/"
        api_key: API token sent in the X-Dataverse-key header
        timeout: Request timeout in seconds (default: 30)
        retry_attempts: Attempts for connect errors and timeouts (default: 3)
        retry_delay: Delay between those attempts in seconds (default: 1)
        headers: Additional headers to include in requests
    """

    def __init__(self, config: dict):
        if "base_url" not in config:
            raise ValueError("config must include 'base_url'")

        self._config = config
        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return str(self._config["base_url"])

    @property
    def api_key(self) -> str | None:
        return self._config.get("api_key") or None

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def retry_attempts(self) -> int:
        return int(self._config.get("retry_attempts", 3))

    @property
    def retry_delay(self) -> float:
        return float(self._config.get("retry_delay", 1))

    @property
    def headers(self) -> dict[str, str]:
        headers = dict(self._config.get("headers", {}))
        if self.api_key:
            headers[API_KEY_HEADER] = self.api_key
        return headers

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Extract the "message" Dataverse puts in error responses, if any."""
        try:
            body = response.json()
        except ValueError:
            return ""
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return ""

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions.

        Raises:
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code
        detail = self._error_detail(response)
        suffix = f" ({detail})" if detail else ""

        if status_code == 404:
            raise NotFoundError(f"Resource not found: {response.url}{suffix}", detail=detail)
        elif status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {response.url}", detail=detail)
        else:
            raise APIError(
                f"API error {status_code}: {response.url}{suffix}",
                status_code=status_code,
                detail=detail,
            )

    def _request(
        self, method: str, path: str, retry: bool = True, **kwargs
    ) -> httpx.Response:
        """Make a request, retrying connect errors and timeouts.

        HTTP error statuses are never retried here; callers that expect
        a transient status wrap the call in their own policy. With
        ``retry=False`` the request is sent once, for calls that must not
        be repeated after the server may already have acted on them.

        Raises:
            ConnectionError: If all attempts fail due to network issues
            APIError: If the API returns a non-2xx response
        """
        attempts = self.retry_attempts if retry else 1
        last_exception: Exception | None = None

        for attempt in range(attempts):
            try:
                response = self.client.request(method, path, **kwargs)
                return self._handle_response(response)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                logger.warning(
                    f"{method} {path} failed (attempt {attempt + 1}/{attempts}): {e}"
                )
                if attempt < attempts - 1:
                    sleep(self.retry_delay)

        msg = f"Connection failed after {attempts} attempts"
        raise ConnectionError(msg) from last_exception

    def _unwrap(self, response: httpx.Response) -> Any:
        """Return the "data" member of a Dataverse response envelope.

        Raises:
            ValidationError: If the body is not a JSON envelope with data
        """
        try:
            body = response.json()
        except ValueError as e:
            raise ValidationError(f"Response is not JSON: {response.url}") from e

        if not isinstance(body, dict) or "data" not in body:
            raise ValidationError(
                f"Response has no 'data' member: {response.url}",
                errors=[f"status={body.get('status') if isinstance(body, dict) else None}"],
            )
        return body["data"]

    def get(self, path: str, **kwargs) -> httpx.Response:
        return self._request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> httpx.Response:
        return self._request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> httpx.Response:
        return self._request("PUT", path, **kwargs)

    @abstractmethod
    def fetch(self, *args, **kwargs) -> Any:
        """Fetch data from the API. Must be implemented by subclasses."""
        pass
