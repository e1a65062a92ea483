"""
HTTP layer for the vault REST API.

Builds URLs against ``{vault_url}/api``, attaches the bearer token, and
normalizes every failure into AuthenticationError or ApiRequestError.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import structlog

from ..errors import ApiRequestError, AuthenticationError

logger = structlog.get_logger()

API_SUFFIX = "/api"
REQUEST_FAILED_PREFIX = "CyberArk API Request Failed: "
MISSING_CREDENTIALS = "Please enter PVWA URL, username, and password."
NO_TOKEN = "No authentication token received from CyberArk"
AUTH_FALLBACK = "Authentication failed. Please verify your credentials and try again."


def resolve_api_base(vault_url: str) -> str:
    """
    Return the API base for a vault URL.

    The URL is used as is when it already ends in ``/api``; otherwise
    ``/api`` is appended.

    Examples:
        >>> resolve_api_base("https://pvwa.example.com")
        'https://pvwa.example.com/api'
        >>> resolve_api_base("https://pvwa.example.com/api/")
        'https://pvwa.example.com/api'
    """
    url = (vault_url or "").rstrip("/")
    return url if url.endswith(API_SUFFIX) else f"{url}{API_SUFFIX}"


def encode_segment(value: str) -> str:
    """URL-encode a single path segment."""
    return quote(str(value), safe="")


def _parse_body(response: httpx.Response) -> Any:
    """Parse a JSON body, treating an empty or unparsable body as {}."""
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {}


def _server_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        for key in ("error", "message", "ErrorMessage"):
            if body.get(key):
                return str(body[key])
    return None


async def login(
    vault_url: str,
    username: str,
    password: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    Authenticate against the vault and return a bearer token.

    POSTs ``{username, password}`` to ``{vault_url}/auth/login``. The caller
    is responsible for persisting the token and discarding the password.

    Args:
        vault_url: PVWA base URL
        username: Vault username
        password: Vault password
        timeout: Transport timeout in seconds
        transport: Optional httpx transport (tests)

    Returns:
        The bearer token

    Raises:
        AuthenticationError: On missing input, a failed response, a transport
            error, or a response carrying no token

    Example:
        ```python
        token = await login("https://pvwa.example.com", "admin", "secret")
        ```
    """
    if not vault_url or not username or not password:
        raise AuthenticationError(MISSING_CREDENTIALS)

    login_url = f"{vault_url.rstrip('/')}/auth/login"

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(
                login_url,
                json={"username": username, "password": password},
                headers={"Content-Type": "application/json"},
            )
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("login_transport_error", url=login_url, error=str(e))
        raise AuthenticationError(str(e) or AUTH_FALLBACK) from e

    if not response.is_success:
        message = _server_message(_parse_body(response))
        logger.warning("login_rejected", url=login_url, status=response.status_code)
        raise AuthenticationError(message or f"Authentication failed: {response.reason_phrase}")

    body = _parse_body(response)
    token = body.get("token") if isinstance(body, dict) else body
    if not token or not isinstance(token, str):
        raise AuthenticationError(NO_TOKEN)

    logger.info("login_succeeded", url=login_url, username=username)
    return token


class VaultApiClient:
    """
    Authenticated JSON client for the vault REST API.

    Every request carries ``Authorization: Bearer {token}`` and
    ``Content-Type: application/json``. There are no retries.

    Example:
        ```python
        async with VaultApiClient("https://pvwa.example.com", token) as api:
            safes = await api.request("/safes")
        ```
    """

    def __init__(
        self,
        vault_url: str,
        token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize VaultApiClient.

        Args:
            vault_url: PVWA base URL, with or without the /api suffix
            token: Bearer token from login
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.vault_url = vault_url
        self.base_url = resolve_api_base(vault_url)
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http_client

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue one API call and return the parsed JSON body.

        Args:
            endpoint: Path under the API base, e.g. ``/safes``
            method: HTTP method
            body: JSON-serializable request body
            params: Query string parameters

        Returns:
            Parsed JSON; ``{}`` for an empty or unparsable successful body

        Raises:
            ApiRequestError: On a non-2xx response or any transport failure
        """
        url = f"{self.base_url}{endpoint}"
        client = await self._get_http_client()

        try:
            response = await client.request(
                method,
                url,
                json=body,
                params=params,
                headers=self._headers(),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("api_transport_error", method=method, url=url, error=str(e))
            raise ApiRequestError(f"{REQUEST_FAILED_PREFIX}{e}") from e

        if not response.is_success:
            message = _server_message(_parse_body(response)) or (
                f"API Error {response.status_code}: {response.reason_phrase}"
            )
            logger.warning("api_request_failed", method=method, url=url, status=response.status_code)
            raise ApiRequestError(f"{REQUEST_FAILED_PREFIX}{message}", status_code=response.status_code)

        logger.debug("api_request", method=method, url=url, status=response.status_code)
        return _parse_body(response)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "VaultApiClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


def unwrap_list(body: Any, *keys: str) -> list:
    """
    Extract a record list from a list endpoint's response.

    Accepts a bare JSON array or an envelope such as ``{"value": [...]}``.
    """
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in keys + ("value",):
            value = body.get(key)
            if isinstance(value, list):
                return value
    return []
