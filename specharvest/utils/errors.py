"""Custom exception hierarchy for specharvest.

All application exceptions inherit from :class:`HarvestError`, which
carries an optional ``provider_name`` so error handlers can identify which
adapter (e.g. "scraperapi", "gsmarena", "json_ledger") caused the failure.

The hierarchy is organized by how far an error is allowed to travel:

    HarvestError  (base -- catch-all for any specharvest error)
    +-- FatalHarvestError        (halts the whole run, crosses every boundary)
    |   +-- BlockDetectedError   (anti-bot page detected in a response body)
    |   +-- BudgetExhaustedError (fetch credit ceiling reached)
    |   +-- ConfigurationError   (malformed listing URL, bad settings)
    +-- FetchError               (non-block fetch failure)
    |   +-- FetchTimeoutError    (request exceeded the fixed timeout)
    +-- ExtractionError          (mandatory field missing from a page)
    +-- LedgerError              (ledger file could not be written)
    +-- SinkError                (a sink could not persist a record)

Per-item and per-category handlers always re-raise
:class:`FatalHarvestError` before handling anything else, so a block or a
spent budget reaches the orchestrator no matter where it was raised.
"""


class HarvestError(Exception):
    """Base exception for all specharvest errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which adapter triggered the error.  The
    ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[scraperapi] Request timed out``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Fatal errors: the run stops, state is flushed, exit status is non-zero
# ---------------------------------------------------------------------------

class FatalHarvestError(HarvestError):
    """Raised for conditions that must terminate the entire run."""

    def __init__(
        self,
        message: str = "Fatal harvest error",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BlockDetectedError(FatalHarvestError):
    """Raised when a response body carries an anti-bot block indicator.

    Continuing to fetch while blocked only burns credits on guaranteed
    failures, so this error is never handled below the orchestrator.
    """

    def __init__(
        self,
        message: str = "Block indicator detected in response",
        provider_name: str | None = None,
        indicator: str = "",
        url: str = "",
    ) -> None:
        self._indicator = indicator
        self._url = url
        super().__init__(message=message, provider_name=provider_name)

    @property
    def indicator(self) -> str:
        return self._indicator

    @property
    def url(self) -> str:
        return self._url


class BudgetExhaustedError(FatalHarvestError):
    """Raised when the fetch-credit ceiling has been reached."""

    def __init__(
        self,
        message: str = "Fetch credit budget exhausted",
        provider_name: str | None = None,
        credits_used: int = 0,
        max_credits: int = 0,
    ) -> None:
        self._credits_used = credits_used
        self._max_credits = max_credits
        super().__init__(message=message, provider_name=provider_name)

    @property
    def credits_used(self) -> int:
        return self._credits_used

    @property
    def max_credits(self) -> int:
        return self._max_credits


class ConfigurationError(FatalHarvestError):
    """Raised when configuration is invalid or missing (never retried)."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Recoverable errors: logged and skipped at the narrowest useful scope
# ---------------------------------------------------------------------------

class FetchError(HarvestError):
    """Raised when a fetch fails for a reason other than a block."""

    def __init__(
        self,
        message: str = "Fetch failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


class FetchTimeoutError(FetchError):
    """Raised when a fetch exceeds the transport's fixed timeout."""

    def __init__(
        self,
        message: str = "Fetch timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(HarvestError):
    """Raised when a mandatory field cannot be located in a fetched page."""

    def __init__(
        self,
        message: str = "Extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LedgerError(HarvestError):
    """Raised when the ledger cannot be persisted."""

    def __init__(
        self,
        message: str = "Ledger persistence failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SinkError(HarvestError):
    """Raised when a sink fails to persist an item record."""

    def __init__(
        self,
        message: str = "Sink write failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
