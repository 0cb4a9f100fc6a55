"""Exception hierarchy for quote resolution and currency normalization."""

from __future__ import annotations


class QuoteError(RuntimeError):
    """Base class for every failure surfaced by the pricing engine."""


class ConfigurationError(QuoteError):
    """Asset is missing the provider field its quote source requires."""


class ProviderTransportError(QuoteError):
    """Provider was unreachable or answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderDataError(QuoteError):
    """Provider answered, but the payload lacks the expected fields."""


class NoDataError(QuoteError):
    """Request succeeded but the matched or aggregated result set is empty."""


__all__ = [
    "QuoteError",
    "ConfigurationError",
    "ProviderTransportError",
    "ProviderDataError",
    "NoDataError",
]
