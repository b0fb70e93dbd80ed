"""Async HTTP client for talking JSON to the server."""

from typing import Any

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession
from loguru import logger

from infrastructure.errors import TransportError


class AsyncHTTPClient:
    """Thin JSON wrapper around a curl_cffi session."""

    def __init__(self, timeout: float = 30, headers: dict[str, str] | None = None):
        """
        Initialize client.

        Args:
            timeout: Request timeout in seconds
            headers: Headers sent with every request
        """
        self.timeout = timeout
        self.headers = {"Accept": "application/json", **(headers or {})}

    async def request_json(self, method: str, url: str, payload: Any = None) -> Any:
        """
        Send a request and decode the JSON response.

        Raises:
            TransportError: On connection failure or a non-2xx status
        """
        logger.debug(f"{method} {url}")
        try:
            async with AsyncSession(timeout=self.timeout) as session:
                response = await session.request(method, url, json=payload, headers=self.headers)
                status = response.status_code
                body = response.text
        except CurlError as e:
            raise TransportError(f"Error connecting to {url}: {e}") from e

        if not 200 <= status < 300:
            logger.error(f"Unexpected status from {url}: {status}")
            raise TransportError(f"Unexpected status {status} from {url}: {body}", status_code=status)

        if not body:
            return None
        return response.json()

    async def get_json(self, url: str) -> Any:
        return await self.request_json("GET", url)

    async def post_json(self, url: str, payload: Any) -> Any:
        return await self.request_json("POST", url, payload)
