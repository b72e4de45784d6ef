"""
HTTP gateway performing single async requests with aiohttp.

The gateway never retries; callers decide which failures are transient.
"""

import asyncio
import json
import logging
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field
from enum import Enum

import aiohttp
from aiohttp import ClientSession, ClientTimeout, ClientError

from ..exceptions import FetchError, InvalidResponseError


logger = logging.getLogger(__name__)


class RequestMethod(Enum):
    """HTTP request methods."""
    GET = "GET"
    POST = "POST"


@dataclass
class RetryConfig:
    """Configuration for download retry logic."""
    max_attempts: int = 3
    delay_seconds: float = 2.0
    non_retryable_status: frozenset = field(default_factory=lambda: frozenset({403, 404}))

    def is_retryable(self, status_code: Optional[int]) -> bool:
        return status_code not in self.non_retryable_status


class HTTPGateway:
    """
    Thin async HTTP gateway over an aiohttp session.

    Every non-2xx response and every transport failure is raised as FetchError,
    carrying the status code when one was received.
    """

    def __init__(self, timeout: float = 60.0):
        """
        Initialize the gateway.

        Args:
            timeout: Default total request timeout in seconds
        """
        self.timeout = ClientTimeout(total=timeout)
        self._session: Optional[ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=self.timeout)

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: RequestMethod,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        json_body: Optional[Any] = None,
        data: Optional[Union[aiohttp.FormData, bytes]] = None,
        timeout: Optional[float] = None
    ) -> bytes:
        """
        Make a single HTTP request and return the raw body.

        Raises:
            FetchError: On transport failure or non-2xx status
        """
        await self._ensure_session()

        kwargs: Dict[str, Any] = {"headers": headers or {}}
        if json_body is not None:
            kwargs["json"] = json_body
        if data is not None:
            kwargs["data"] = data
        if timeout is not None:
            kwargs["timeout"] = ClientTimeout(total=timeout)

        logger.debug(f"{method.value} {url}")

        try:
            async with self._session.request(method.value, url, **kwargs) as response:
                body = await response.read()

                if not 200 <= response.status < 300:
                    text = body[:500].decode("utf-8", errors="replace")
                    raise FetchError(
                        f"HTTP {response.status}: request to {url} failed",
                        url=url,
                        status_code=response.status,
                        response_body=text
                    )

                return body

        except (ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Request to {url} failed: {str(e) or type(e).__name__}", url=url, cause=e) from e

    async def get_bytes(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> bytes:
        """GET a URL and return the body as raw bytes."""
        return await self._request(RequestMethod.GET, url, headers=headers, timeout=timeout)

    async def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        """GET a URL and parse the body as JSON."""
        body = await self._request(RequestMethod.GET, url, headers=headers)
        return self._parse_json(url, body)

    async def post_json(
        self,
        url: str,
        payload: Any,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """POST a JSON payload and parse the JSON response."""
        body = await self._request(RequestMethod.POST, url, headers=headers, json_body=payload)
        return self._parse_json(url, body)

    async def post_form(
        self,
        url: str,
        form: aiohttp.FormData,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """POST a multipart form and parse the JSON response."""
        body = await self._request(RequestMethod.POST, url, headers=headers, data=form)
        return self._parse_json(url, body)

    @staticmethod
    def _parse_json(url: str, body: bytes) -> Any:
        if not body:
            return {}
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidResponseError(f"Invalid JSON response from {url}: {e}", cause=e) from e
