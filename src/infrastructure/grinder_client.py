"""Client for the codegrinder server API."""

from typing import Any

from loguru import logger

from infrastructure.client_config import ClientConfig
from infrastructure.http_client import AsyncHTTPClient


class GrinderClient:
    """Server API calls used by the command-line tool.

    Every request carries the session cookie from the client configuration. The
    auth layer in front of the API exchanges it for the caller's user id, which
    reaches the API as the ``X-User-ID`` header.
    """

    def __init__(self, config: ClientConfig, http_client: AsyncHTTPClient | None = None):
        self.config = config
        self.http_client = http_client or AsyncHTTPClient(headers={"Cookie": config.cookie})

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            raise ValueError("API path must start with /")
        return f"{self.config.base_url}{path}"

    async def get_current_user(self) -> dict[str, Any]:
        return await self.http_client.get_json(self._url("/users/me"))

    async def post_commit(self, assignment_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        """Submit a commit and return the stored commit as the server reports it."""
        logger.debug(f"Posting commit for assignment {assignment_id} with {len(payload.get('submission', {}))} file(s)")
        return await self.http_client.post_json(
            self._url(f"/users/me/assignments/{assignment_id}/commits"), payload
        )
