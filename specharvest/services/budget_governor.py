"""Fetch budget governor, block detector, and the governed fetch path.

Every outbound request in the engine goes through :class:`GovernedFetcher`,
which applies three gates in a fixed order:

    1. charge one credit against the :class:`BudgetGovernor` (refused once
       the ceiling is reached or the run has been halted),
    2. wait the randomized inter-request delay,
    3. fetch through the transport and scan the body for block indicators,
       saving an HTML snapshot only once the body has passed.

The governor is irrevocable.  After the ceiling is reached or a block is
detected it stays halted for the rest of the process and every further
charge is refused, so even a caller that wrongly swallowed the fatal
error cannot spend another credit.
"""

from __future__ import annotations

from enum import Enum

import structlog

from specharvest.interfaces.transport import ITransport
from specharvest.utils.errors import (
    BlockDetectedError,
    BudgetExhaustedError,
    ConfigurationError,
    FatalHarvestError,
    FetchError,
)
from specharvest.utils.logging import get_logger
from specharvest.utils.pacing import RequestPacer
from specharvest.utils.snapshots import HtmlSnapshotWriter

# Case-insensitive phrases whose presence in a response body means the
# source has switched to its anti-bot defences.
BLOCK_INDICATORS: tuple[str, ...] = (
    "captcha",
    "access denied",
    "unusual traffic",
    "blocked",
    "forbidden",
    "rate limit",
    "too many requests",
)


class FetchCharge(str, Enum):  # noqa: UP042
    """Answer of :meth:`BudgetGovernor.charge_fetch`."""

    ALLOWED = "allowed"
    EXHAUSTED = "exhausted"


class BudgetGovernor:
    """Process-lifetime fetch counter with a hard ceiling and block detector.

    Parameters
    ----------
    max_credits:
        Maximum number of fetches this process may perform.
    block_indicators:
        Phrases that mark a response body as a block page.
    """

    def __init__(
        self,
        max_credits: int,
        block_indicators: tuple[str, ...] = BLOCK_INDICATORS,
    ) -> None:
        if max_credits < 0:
            raise ConfigurationError(message=f"max_credits must be >= 0, got {max_credits}")
        self._max_credits = max_credits
        self._credits_used = 0
        self._indicators = tuple(phrase.lower() for phrase in block_indicators)
        self._halt_error: FatalHarvestError | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Budget
    # ------------------------------------------------------------------

    @property
    def credits_used(self) -> int:
        return self._credits_used

    @property
    def max_credits(self) -> int:
        return self._max_credits

    @property
    def remaining(self) -> int:
        return max(self._max_credits - self._credits_used, 0)

    @property
    def halted(self) -> bool:
        return self._halt_error is not None

    @property
    def halt_error(self) -> FatalHarvestError | None:
        """The fatal condition that halted the governor, if any."""
        return self._halt_error

    def charge_fetch(self) -> FetchCharge:
        """Charge one credit for an upcoming fetch.

        Returns :attr:`FetchCharge.EXHAUSTED` without charging when the
        ceiling has been reached or the governor is already halted; the
        caller must then stop the whole run without fetching.
        """
        if self._halt_error is not None:
            return FetchCharge.EXHAUSTED
        if self._credits_used >= self._max_credits:
            self._halt_error = BudgetExhaustedError(
                message=(
                    f"Credit limit reached ({self._credits_used}/{self._max_credits}); "
                    "stopping to prevent over-spend"
                ),
                credits_used=self._credits_used,
                max_credits=self._max_credits,
            )
            self._logger.error(
                "budget_exhausted",
                credits_used=self._credits_used,
                max_credits=self._max_credits,
            )
            return FetchCharge.EXHAUSTED
        self._credits_used += 1
        return FetchCharge.ALLOWED

    # ------------------------------------------------------------------
    # Block detection
    # ------------------------------------------------------------------

    def detect_block(self, body: str) -> str | None:
        """Return the first block indicator found in *body*, or ``None``."""
        lowered = (body or "").lower()
        for phrase in self._indicators:
            if phrase in lowered:
                return phrase
        return None

    def inspect_response(self, body: str, url: str) -> None:
        """Halt the governor and raise if *body* is a block page.

        Raises
        ------
        BlockDetectedError
            If any block indicator is present.
        """
        indicator = self.detect_block(body)
        if indicator is None:
            return
        error = BlockDetectedError(
            message=f"Page contains blocking indicator {indicator!r}",
            indicator=indicator,
            url=url,
        )
        self._halt_error = error
        self._logger.error(
            "block_detected",
            url=url,
            indicator=indicator,
            credits_used=self._credits_used,
        )
        raise error


class GovernedFetcher:
    """Single fetch path shared by the paginator and the item pipeline.

    When *snapshots* is given, bodies that pass block detection and carry an
    ok status are also written to disk for selector debugging.
    """

    def __init__(
        self,
        transport: ITransport,
        governor: BudgetGovernor,
        pacer: RequestPacer,
        snapshots: HtmlSnapshotWriter | None = None,
    ) -> None:
        self._transport = transport
        self._governor = governor
        self._pacer = pacer
        self._snapshots = snapshots
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def governor(self) -> BudgetGovernor:
        return self._governor

    async def fetch(self, url: str) -> str:
        """Charge, pace, fetch and inspect *url*; return the body text.

        Raises
        ------
        BudgetExhaustedError
            If no credit is left (no request is issued).
        BlockDetectedError
            If the response is a block page, or the governor was already
            halted by an earlier block (no request is issued).
        FetchTimeoutError, FetchError
            For recoverable transport failures or a non-ok status.
        """
        if self._governor.charge_fetch() is FetchCharge.EXHAUSTED:
            halt_error = self._governor.halt_error
            if halt_error is None:  # pragma: no cover - EXHAUSTED always sets it
                raise BudgetExhaustedError()
            raise halt_error

        await self._pacer.before_request()
        self._logger.debug(
            "fetch_start",
            url=url,
            credits_used=self._governor.credits_used,
        )
        response = await self._transport.fetch(url)
        self._governor.inspect_response(response.body, url)

        if not response.ok:
            raise FetchError(
                message=f"HTTP {response.status_code} for {url}",
                provider_name=self._transport.get_provider_name(),
                status_code=response.status_code,
            )
        if self._snapshots is not None:
            self._snapshots.save(url, response.body)
        return response.body
