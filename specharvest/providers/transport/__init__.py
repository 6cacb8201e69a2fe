"""Outbound page transports."""

from specharvest.providers.transport.direct_transport import DirectHttpTransport
from specharvest.providers.transport.scraperapi_transport import ScraperAPITransport

__all__ = ["DirectHttpTransport", "ScraperAPITransport"]
