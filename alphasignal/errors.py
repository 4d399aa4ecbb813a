from __future__ import annotations


class MarketDataError(Exception):
    """Base class for market data failures."""


class TransportFailure(MarketDataError):
    """Timeout, connection error or non-success HTTP status."""


class AllRelaysExhausted(TransportFailure):
    """Every relay template failed for one target URL."""

    def __init__(self, target_url: str, attempts: int):
        super().__init__(f"all {attempts} relays failed for {target_url}")
        self.target_url = target_url
        self.attempts = attempts


class ParseFailure(MarketDataError):
    """Provider answered, but the payload does not match its schema."""


class ConfigurationError(MarketDataError):
    """
    Programming / configuration error (e.g. an asset without a provider chain).

    Unlike the other failures this one is never downgraded to an empty result.
    """
