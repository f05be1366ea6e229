"""Error taxonomy surfaced by ingestion, pricing and quoting."""

from __future__ import annotations


class UpstreamFetchError(Exception):
    """Raised when an external provider is unreachable or answers with a non-2xx status."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body

    @property
    def details(self) -> str:
        parts = [f"provider={self.provider}"]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        parts.append(str(self))
        if self.body:
            parts.append(f"body={self.body[:500]}")
        return " ".join(parts)


class InvalidAmountError(ValueError):
    """Raised when a trade size is zero, negative or beyond what can be sold."""


class UnknownCurveError(LookupError):
    """Raised when a curve shape is requested that is not registered."""


class MarketDecodeError(ValueError):
    """Raised when a contract read returns a result that cannot be decoded."""


class MarketUnavailableError(LookupError):
    """Raised when neither a live market snapshot nor caller-supplied state is available."""
