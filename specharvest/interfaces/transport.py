"""Abstract base class for outbound page transports.

A transport turns a URL into a response body over a fixed timeout.  It
may talk to the site directly or go through a fetch-as-a-service proxy;
the engine does not care, it charges one credit per call either way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchResponse:
    """Raw result of one fetch.

    Attributes
    ----------
    url:
        The target URL that was requested (not the proxy URL).
    body:
        Response body text.  May be an error or challenge page.
    ok:
        ``True`` for a 2xx/3xx status.
    status_code:
        HTTP status code as reported by the transport.
    """

    url: str
    body: str
    ok: bool
    status_code: int | None = None


class ITransport(ABC):
    """Contract for components that fetch a single page."""

    @abstractmethod
    async def fetch(self, url: str) -> FetchResponse:
        """Fetch *url* and return its body.

        Raises
        ------
        specharvest.utils.errors.FetchTimeoutError
            If the request exceeds the transport's timeout.
        specharvest.utils.errors.FetchError
            For any other transport-level failure.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"scraperapi"``."""

    async def aclose(self) -> None:
        """Release network resources.  Default: nothing to release."""
