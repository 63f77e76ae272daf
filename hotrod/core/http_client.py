"""
Base HTTP client with bounded concurrency, per-call timeouts and error handling.

Provides a reusable foundation for the FCC upstream clients.
Each request is attempted exactly once: the coverage pipeline recovers from
upstream failures by falling back to another tier, never by retrying.
"""
import asyncio
import logging
from abc import ABC
from typing import Dict, Optional, Any
import httpx

from hotrod.core.api_errors import (
    APIError,
    UpstreamUnavailable,
    UpstreamTimeout,
    classify_http_error
)

logger = logging.getLogger(__name__)


class BaseAPIClient(ABC):
    """
    Base class for all upstream API clients.

    Provides unified:
    - Single-attempt HTTP requests with a per-request timeout override
    - Concurrency cap via semaphore
    - Standardized error classification into UpstreamUnavailable
    - Connection pooling

    Subclasses should:
    - Set SOURCE_NAME and BASE_URL class attributes
    - Implement API-specific methods that call get_json() / get_bytes()
    - Override _check_api_error() for API-specific error envelopes
    """

    # Override in subclass
    SOURCE_NAME: str = "unknown"
    BASE_URL: str = ""

    # Default settings
    DEFAULT_MAX_CONCURRENCY: int = 16
    DEFAULT_TIMEOUT: float = 30.0
    DEFAULT_CONNECT_TIMEOUT: float = 10.0

    def __init__(
        self,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            max_concurrency: Maximum concurrent requests (semaphore size)
            timeout: Default request timeout in seconds
            connect_timeout: Connection timeout in seconds
            base_url: Overrides the class BASE_URL
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        if base_url:
            self.BASE_URL = base_url
        self._transport = transport

        # Semaphore for bounded concurrency
        self.semaphore = asyncio.Semaphore(max_concurrency)

        # HTTP client (lazy initialization)
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized {self.SOURCE_NAME} client: "
            f"max_concurrency={max_concurrency}, "
            f"timeout={timeout}"
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client with connection pooling."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                follow_redirects=True,
                limits=httpx.Limits(
                    max_connections=self.max_concurrency * 2,
                    max_keepalive_connections=self.max_concurrency
                ),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug(f"{self.SOURCE_NAME} client closed")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - ensures cleanup."""
        await self.close()

    def _check_api_error(
        self,
        data: Any,
        resource_id: str
    ) -> Optional[APIError]:
        """
        Check a parsed JSON response for source-specific errors.

        Override in subclass to handle API-specific error formats.

        Args:
            data: Parsed JSON response
            resource_id: Resource being requested (for logging)

        Returns:
            APIError if error detected, None otherwise
        """
        if isinstance(data, dict) and "error" in data:
            error_msg = data.get("error")
            if isinstance(error_msg, dict):
                error_msg = error_msg.get("message", str(error_msg))
            return UpstreamUnavailable(
                message=str(error_msg),
                source=self.SOURCE_NAME,
                response_data=data
            )
        return None

    def _build_headers(self) -> Dict[str, str]:
        """
        Build request headers.

        Override to add API-specific headers.

        Returns:
            Dict of headers
        """
        return {
            "Accept": "application/json",
            "User-Agent": f"hotrod/{self.SOURCE_NAME}-client"
        }

    def _build_url(self, url: str) -> str:
        """Prepend BASE_URL if url is a path."""
        if url.startswith("http"):
            return url
        return f"{self.BASE_URL.rstrip('/')}/{url.lstrip('/')}"

    async def _send(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        resource_id: str = "unknown",
        timeout: Optional[float] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Issue a single GET and return the 2xx response.

        Raises:
            UpstreamTimeout: On any httpx timeout
            UpstreamUnavailable: On network errors and non-2xx statuses
        """
        url = self._build_url(url)
        headers = self._build_headers()
        if extra_headers:
            headers.update(extra_headers)

        request_timeout = httpx.USE_CLIENT_DEFAULT
        if timeout is not None:
            request_timeout = httpx.Timeout(timeout, connect=min(timeout, self.connect_timeout))

        async with self.semaphore:
            client = await self._get_client()
            logger.debug(f"[{self.SOURCE_NAME}] GET {resource_id}")

            try:
                response = await client.get(
                    url, params=params, headers=headers, timeout=request_timeout
                )
                response.raise_for_status()
            except httpx.TimeoutException as e:
                raise UpstreamTimeout(
                    message=f"Request for {resource_id} timed out",
                    source=self.SOURCE_NAME,
                    timeout=timeout if timeout is not None else self.timeout,
                ) from e
            except httpx.HTTPStatusError as e:
                raise classify_http_error(
                    e.response.status_code,
                    e.response.text[:500],
                    self.SOURCE_NAME
                ) from e
            except httpx.RequestError as e:
                raise UpstreamUnavailable(
                    message=f"Request failed: {str(e) or e.__class__.__name__}",
                    source=self.SOURCE_NAME
                ) from e

        return response

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        resource_id: str = "unknown",
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make a GET request and parse the JSON body.

        Args:
            url: URL or path
            params: Query parameters
            resource_id: Identifier for logging
            timeout: Per-request timeout override in seconds

        Returns:
            Parsed JSON response

        Raises:
            UpstreamUnavailable: On transport, status, body or envelope errors
        """
        response = await self._send(
            url, params=params, resource_id=resource_id, timeout=timeout
        )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailable(
                message=f"Invalid JSON body for {resource_id}",
                source=self.SOURCE_NAME,
                status_code=response.status_code,
            ) from e

        api_error = self._check_api_error(data, resource_id)
        if api_error:
            raise api_error

        logger.debug(f"[{self.SOURCE_NAME}] Successfully fetched {resource_id}")
        return data

    async def get_bytes(
        self,
        url: str,
        resource_id: str = "unknown",
        timeout: Optional[float] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> bytes:
        """
        Make a GET request and return the raw body.

        An empty body is returned as b"" rather than treated as an error.
        """
        response = await self._send(
            url,
            resource_id=resource_id,
            timeout=timeout,
            extra_headers=extra_headers,
        )
        return response.content
