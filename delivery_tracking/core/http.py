"""
Authenticated HTTP client for the backend API.

Resolves a bearer credential per request through an injected token
provider and returns decoded JSON. Timeouts are owned here; callers
above this layer never impose their own.
"""
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from delivery_tracking.core.config import settings
from delivery_tracking.core.exceptions import ApiRequestError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[Optional[str]]]


class ApiClient:
    """
    Client for the storefront backend REST API.

    Each request opens a short-lived httpx.AsyncClient, so an ApiClient
    instance holds no connection state and can be shared freely.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout or httpx.Timeout(
            settings.HTTP_TIMEOUT_SECONDS,
            connect=settings.HTTP_CONNECT_TIMEOUT_SECONDS,
        )
        self._transport = transport

    async def _auth_headers(self) -> dict:
        """
        Build request headers, adding the bearer token when one is available.

        Raises:
            ApiRequestError: If the token provider fails
        """
        headers = {"Content-Type": "application/json"}
        if self.token_provider is None:
            return headers

        try:
            token = await self.token_provider()
        except Exception as e:
            logger.error(f"Error resolving auth token: {e}")
            raise ApiRequestError(
                message=f"Could not resolve auth token: {e}",
                cause=e,
            ) from e

        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Make an authenticated request and return the JSON body.

        Args:
            method: HTTP method (GET, POST)
            path: Path relative to base_url
            params: Query parameters
            json: JSON body

        Returns:
            Decoded JSON response

        Raises:
            ApiRequestError: On network failure, non-2xx status or a non-JSON body
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = await self._auth_headers()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method.upper(), url, params=params, json=json, headers=headers
                )
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            body = _error_body(e.response)
            logger.warning(
                f"{method.upper()} {url} failed with HTTP {e.response.status_code}: {body}"
            )
            raise ApiRequestError(
                message=f"HTTP {e.response.status_code} from {url}: {body}",
                status_code=e.response.status_code,
                details={"url": url, "body": body},
                cause=e,
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"{method.upper()} {url} network error: {e}")
            raise ApiRequestError(
                message=f"Network error calling {url}: {e}",
                details={"url": url},
                cause=e,
            ) from e
        except ValueError as e:
            logger.warning(f"{method.upper()} {url} returned a non-JSON body")
            raise ApiRequestError(
                message=f"Expected JSON from {url}",
                details={"url": url},
                cause=e,
            ) from e

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        """GET a backend resource."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Any] = None) -> Any:
        """POST to a backend resource."""
        return await self.request("POST", path, json=json)


def _error_body(response: httpx.Response) -> str:
    """Extract the backend's error message, falling back to a text preview."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]

    if isinstance(data, dict):
        message = data.get("error") or data.get("message")
        if message:
            return str(message)
    return str(data)[:200]


def unwrap_data(payload: Any) -> Any:
    """Strip the backend's {success, data} envelope."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload
