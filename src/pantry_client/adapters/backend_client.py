"""HTTPX transport for the pantry backend."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from pantry_client.domain.errors import (
    ApiFailure,
    ApiOk,
    ApiResult,
    BackendError,
    NotAuthenticatedError,
)

_logger = logging.getLogger(__name__)

_UNAUTHORIZED = 401


@dataclass
class HttpxBackendClient:
    """Sends requests to the backend and normalizes every outcome."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 30.0
    token_provider: Callable[[], str | None] | None = None
    on_unauthorized: Callable[[], None] | None = None

    @classmethod
    def create(
        cls,
        base_url: str,
        timeout: float = 30.0,
        token_provider: Callable[[], str | None] | None = None,
        on_unauthorized: Callable[[], None] | None = None,
    ) -> "HttpxBackendClient":
        """Create a backend client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
            token_provider=token_provider,
            on_unauthorized=on_unauthorized,
        )

    async def request(  # noqa: PLR0913
        self,
        method: str,
        path: str,
        *,
        json: object | None = None,
        params: dict[str, object] | None = None,
        bearer: str | None = None,
        authenticated: bool = False,
    ) -> ApiResult[object]:
        """Send a request and return its body or a normalized failure."""
        headers = {"Accept": "application/json"}
        if authenticated:
            # Re-read on every call; the session may be replaced between requests.
            token = self.token_provider() if self.token_provider else None
            if not token:
                raise NotAuthenticatedError
            headers["Authorization"] = f"Bearer {token}"
        elif bearer is not None:
            headers["Authorization"] = f"Bearer {bearer}"

        url = f"{self.base_url}{path}"
        try:
            response = await self.http_client.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            _logger.warning("%s %s timed out after %ss", method, path, self.timeout)
            return ApiFailure(BackendError.timeout())
        except httpx.TransportError as exc:
            _logger.warning("%s %s failed: %s", method, path, exc.__class__.__name__)
            return ApiFailure(BackendError.network(str(exc) or None))

        body = _decode_body(response)
        if response.is_success:
            return ApiOk(body)

        error = BackendError.from_response(response.status_code, body)
        _logger.info("%s %s -> %s: %s", method, path, error.status, error.message)
        if (
            authenticated
            and response.status_code == _UNAUTHORIZED
            and self.on_unauthorized is not None
        ):
            self.on_unauthorized()
        return ApiFailure(error)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _decode_body(response: httpx.Response) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
