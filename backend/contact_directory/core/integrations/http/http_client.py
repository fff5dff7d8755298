"""
Generic async HTTP client wrapper using aiohttp.
Retries transport failures with exponential backoff for idempotent methods
and turns error responses into exceptions through a pluggable factory.
"""

import asyncio
from typing import Any, Callable, Dict, Optional
import aiohttp
import logging

from contact_directory.core.exceptions import AppException

logger = logging.getLogger(__name__)

# Only these are safe to resend after a transport error
IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})

ErrorFactory = Callable[[int, Any], Exception]


def default_error_factory(status: int, payload: Any) -> Exception:
    """Wrap an error response in a plain AppException."""
    message = f"Request failed with status {status}"
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        message = payload["error"].get("message") or message
    return AppException(message, status_code=status, details=payload)


class HttpClient:
    """
    Async HTTP client wrapper using aiohttp.
    Provides get/post/put/patch/delete methods with retry/backoff support.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        headers: Optional[Dict[str, str]] = None,
        error_factory: ErrorFactory = default_error_factory,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Optional base URL for all requests
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts for idempotent requests
            retry_delay: Initial delay between retries in seconds
            headers: Headers sent with every request
            error_factory: Builds the exception raised for a non-success response
        """
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.headers = dict(headers or {})
        self.error_factory = error_factory
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint."""
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        return endpoint

    @staticmethod
    def is_success(status: int) -> bool:
        """2xx except 207, whose body describes a mixed outcome."""
        return 200 <= status < 300 and status != 207

    @staticmethod
    async def _read_payload(response: aiohttp.ClientResponse) -> Any:
        if response.status == 204:
            return None
        body = await response.text()
        if not body:
            return None
        try:
            return await response.json(content_type=None)
        except ValueError:
            return body

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Additional arguments for aiohttp request

        Returns:
            Decoded response body
        """
        session = await self._get_session()
        attempts = self.max_retries if method in IDEMPOTENT_METHODS else 1
        last_exception = None

        for attempt in range(attempts):
            try:
                async with session.request(method, url, **kwargs) as response:
                    payload = await self._read_payload(response)
                    if not self.is_success(response.status):
                        raise self.error_factory(response.status, payload)
                    return payload
            except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                last_exception = e
                if attempt < attempts - 1:
                    delay = self.retry_delay * (2 ** attempt)  # Exponential backoff
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{attempts}): {e}. Retrying in {delay}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"{method} {url} failed after {attempts} attempt(s): {e}")

        raise last_exception

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make GET request and return the decoded body."""
        url = self._build_url(endpoint)
        return await self._request_with_retry("GET", url, params=params, headers=headers)

    async def post(
        self,
        endpoint: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make POST request and return the decoded body."""
        url = self._build_url(endpoint)
        return await self._request_with_retry("POST", url, json=json, headers=headers)

    async def put(
        self,
        endpoint: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make PUT request and return the decoded body."""
        url = self._build_url(endpoint)
        return await self._request_with_retry("PUT", url, json=json, headers=headers)

    async def patch(
        self,
        endpoint: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make PATCH request and return the decoded body."""
        url = self._build_url(endpoint)
        return await self._request_with_retry("PATCH", url, json=json, headers=headers)

    async def delete(
        self,
        endpoint: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make DELETE request and return the decoded body, if any."""
        url = self._build_url(endpoint)
        return await self._request_with_retry("DELETE", url, headers=headers)
