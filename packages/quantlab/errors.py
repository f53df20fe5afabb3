"""Typed failures raised by the risk engine and the market-data boundary.

Every error carries an ``error_type`` code so the API layer can translate it
into a response without string matching.
"""

from __future__ import annotations

from typing import Any


class QuantLabError(Exception):
    """Base class for all user-input and data-availability failures."""

    error_type = "QUANTLAB_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {"error_type": self.error_type, "detail": str(self)}


class ValidationError(QuantLabError, ValueError):
    """Malformed or contradictory request parameters."""

    error_type = "VALIDATION_ERROR"


class InsufficientDataError(QuantLabError, ValueError):
    """Not enough (overlapping) history to run a calculation."""

    error_type = "INSUFFICIENT_DATA"

    def __init__(
        self,
        message: str,
        found: int | None = None,
        required: int | None = None,
    ) -> None:
        super().__init__(message)
        self.found = found
        self.required = required

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.found is not None:
            payload["found"] = self.found
        if self.required is not None:
            payload["required"] = self.required
        return payload


class MarketDataError(QuantLabError):
    """History for a single symbol could not be retrieved."""

    error_type = "MARKET_DATA_ERROR"

    def __init__(self, symbol: str, reason: str) -> None:
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason


class PartialFetchFailure(QuantLabError):
    """One or more requested tickers failed to fetch.

    The whole request fails; ``failures`` maps each failing ticker to its
    reason.
    """

    error_type = "PARTIAL_FETCH_FAILURE"

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = dict(failures)
        names = ", ".join(self.failures)
        super().__init__(
            f"Failed to fetch history for: {names}. Please check the tickers."
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["failures"] = self.failures
        return payload
