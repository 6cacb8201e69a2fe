"""ScraperAPI fetch-as-a-service transport.

Routes every request through ``https://api.scraperapi.com/`` with
``render=false``.  ScraperAPI bills one credit per call, which is why the
engine's budget governor charges exactly once per ``fetch``.
"""

from __future__ import annotations

import httpx

from specharvest.interfaces.transport import FetchResponse
from specharvest.providers.transport.http_base import HttpTransportBase
from specharvest.utils.errors import ConfigurationError

_DEFAULT_ENDPOINT = "https://api.scraperapi.com/"


class ScraperAPITransport(HttpTransportBase):
    """Fetches target URLs through the ScraperAPI proxy.

    Parameters
    ----------
    api_key:
        ScraperAPI key; required.
    endpoint:
        API endpoint (overridable for testing).
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = _DEFAULT_ENDPOINT,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                message="SCRAPERAPI_KEY is required for the scraperapi transport",
                provider_name="scraperapi",
            )
        super().__init__(http_client=http_client, timeout=timeout)
        self._api_key = api_key
        self._endpoint = endpoint

    def get_provider_name(self) -> str:
        return "scraperapi"

    async def fetch(self, url: str) -> FetchResponse:
        params = {"api_key": self._api_key, "url": url, "render": "false"}
        return await self._get(url, self._endpoint, params=params)
