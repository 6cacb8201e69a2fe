"""Shared httpx plumbing for the concrete transports.

Maps httpx outcomes onto the transport contract:

- ``httpx.TimeoutException``      -> :class:`FetchTimeoutError`
- any other ``httpx.HTTPError``   -> :class:`FetchError`
- HTTP status >= 500              -> :class:`FetchError`
- anything below 500              -> :class:`FetchResponse` (``ok`` for 2xx/3xx)

4xx bodies are returned rather than raised so the governor can still
scan them for block indicators.
"""

from __future__ import annotations

from typing import Any

import httpx

from specharvest.interfaces.transport import FetchResponse, ITransport
from specharvest.utils.errors import FetchError, FetchTimeoutError

_DEFAULT_TIMEOUT = 30.0


class HttpTransportBase(ITransport):
    """Base class holding the ``httpx.AsyncClient`` and error mapping.

    Parameters
    ----------
    http_client:
        Injected client; when omitted one is created and owned here.
    timeout:
        Per-request timeout in seconds.
    headers:
        Headers sent with every request.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )
        self._headers = headers
        self._timeout = timeout

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, target_url: str, request_url: str, params: dict[str, Any] | None = None) -> FetchResponse:
        try:
            response = await self._client.get(
                request_url,
                params=params,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(
                message=f"Timeout after {self._timeout}s fetching {target_url}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                message=f"HTTP error fetching {target_url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 500:
            raise FetchError(
                message=f"HTTP {response.status_code} for {target_url}",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            )

        return FetchResponse(
            url=target_url,
            body=response.text,
            ok=response.status_code < 400,
            status_code=response.status_code,
        )
