"""Direct httpx transport with browser-like headers.

Useful for local runs against a mirror or when the site does not need a
proxy.  Same contract and error mapping as the ScraperAPI transport.
"""

from __future__ import annotations

import httpx

from specharvest.interfaces.transport import FetchResponse
from specharvest.providers.transport.http_base import HttpTransportBase

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class DirectHttpTransport(HttpTransportBase):
    """Fetches target URLs directly."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(
            http_client=http_client,
            timeout=timeout,
            headers=_DEFAULT_HEADERS,
        )

    def get_provider_name(self) -> str:
        return "direct"

    async def fetch(self, url: str) -> FetchResponse:
        return await self._get(url, url)
