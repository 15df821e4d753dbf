"""niftyscan core exception classes."""

from typing import Any


class NiftyScanError(Exception):
    """Base exception for niftyscan."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        """Initialise the exception.

        Args:
            message: human readable message
            error_code: stable machine readable code
            details: extra context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(NiftyScanError):
    """Required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if missing:
            super_details["missing"] = list(missing)
        super().__init__(message, "CONFIGURATION_ERROR", super_details)
        self.missing = list(missing or [])


class InsufficientDataError(NiftyScanError):
    """Price history is shorter than the indicator period."""

    def __init__(self, required: int, available: int, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details.update({"required": required, "available": available})
        super().__init__(
            f"Insufficient data for EMA calculation. Need {required} days, got {available}",
            "INSUFFICIENT_DATA",
            super_details,
        )
        self.required = required
        self.available = available


class ProviderError(NiftyScanError):
    """Market data provider failure."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        error_code: str = "PROVIDER_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)
        self.provider_name = provider_name


class QuoteFetchError(ProviderError):
    """A quote could not be fetched for a symbol."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        symbol: str,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["symbol"] = symbol
        super().__init__(message, provider_name, "QUOTE_FETCH_ERROR", super_details)
        self.symbol = symbol


class HistoryFetchError(ProviderError):
    """Historical closes could not be fetched for a symbol."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        symbol: str,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["symbol"] = symbol
        super().__init__(message, provider_name, "HISTORY_FETCH_ERROR", super_details)
        self.symbol = symbol


class ScrapeError(NiftyScanError):
    """The screener did not return a usable candidate list."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str = "SCRAPE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, error_code, super_details)
        self.status_code = status_code


class AuthError(ScrapeError):
    """Session or CSRF token acquisition against the screener failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, status_code, "AUTHENTICATION_ERROR", details)


class DeliveryError(NiftyScanError):
    """The report could not be delivered."""

    def __init__(
        self,
        message: str,
        recipients: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if recipients:
            super_details["recipients"] = list(recipients)
        super().__init__(message, "DELIVERY_ERROR", super_details)


class RunInProgressError(NiftyScanError):
    """Another report run is still executing."""

    def __init__(self, message: str = "A report run is already in progress"):
        super().__init__(message, "RUN_IN_PROGRESS")


class ReportTimeoutError(NiftyScanError):
    """A report run exceeded its time budget."""

    def __init__(self, timeout: float):
        super().__init__(
            f"Report run timed out after {timeout} seconds",
            "RUN_TIMEOUT",
            {"timeout": timeout},
        )
        self.timeout = timeout
