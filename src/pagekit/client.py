"""HTTP client for the tenant pages API."""

from typing import Any

import httpx
import structlog

from pagekit.utils.exceptions import NetworkError, RequestTimeoutError, error_for_status

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 10.0


class ApiClient:
    """JSON client with bearer-token auth and structured errors.

    Non-2xx responses raise an ApiError subclass carrying the status code and
    parsed body. Transport failures raise NetworkError (RequestTimeoutError
    for timeouts). Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the API, e.g. ``https://host/api``.
            token: Optional bearer token.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests mount a MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    def set_token(self, token: str | None) -> None:
        """Install or clear the bearer token."""
        self.token = token

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Get request headers including auth token."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method.
            path: API path, relative to the base URL.
            params: Query string parameters.
            json: Request body, JSON-encoded.
            headers: Extra headers.

        Returns:
            Parsed JSON body, or None for empty responses.

        Raises:
            ApiError: Non-2xx response (see ``error_for_status``).
            RequestTimeoutError: The request timed out.
            NetworkError: Any other transport failure.
        """
        path = "/" + path.lstrip("/")
        try:
            response = self._client.request(
                method=method,
                url=path,
                params=params,
                json=json,
                headers=self._headers(headers),
            )
        except httpx.TimeoutException as e:
            logger.warning("API request timed out", method=method, path=path, timeout=self.timeout)
            raise RequestTimeoutError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.warning("API request failed", method=method, path=path, error=str(e))
            raise NetworkError(f"{method} {path} failed: {e}") from e

        body = self._parse_body(response)
        if response.is_success:
            logger.debug("API request completed", method=method, path=path, status=response.status_code)
            return body

        logger.info(
            "API request rejected",
            method=method,
            path=path,
            status=response.status_code,
        )
        raise error_for_status(
            response.status_code,
            body if body is not None else {},
            response.reason_phrase,
        )

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
