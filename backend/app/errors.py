"""
Failure taxonomy for the price pipeline.

Everything raised below the HTTP boundary derives from PriceServiceError so the
route can turn it into a uniform `{error, details}` body.
"""
from typing import Optional


class PriceServiceError(Exception):
    """Base class for pipeline failures."""

    public_message = "Failed to get response from AI service."

    def details(self) -> Optional[str]:
        return str(self) or None


class ConfigError(PriceServiceError):
    """Required configuration (API credential) is missing."""

    public_message = "Server configuration error: AI Key missing."

    def details(self) -> Optional[str]:
        return None


class UpstreamError(PriceServiceError):
    """The upstream model API could not produce a usable response."""


class ClientRejection(UpstreamError):
    """Upstream answered 4xx: the request itself is invalid, never retried."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Upstream rejected request with HTTP {status_code}")


class RetriesExhausted(UpstreamError):
    """Every allowed attempt ended in a retryable failure (429, 5xx, transport)."""

    def __init__(self, attempts: int, last_failure: str):
        self.attempts = attempts
        self.last_failure = last_failure
        super().__init__(f"Upstream still failing after {attempts} attempts (last: {last_failure})")


class ParseFailure(PriceServiceError):
    """A successful response did not contain a usable price payload."""

    public_message = "Failed to parse response from AI service."

    def __init__(self, reason: str, raw_text: Optional[str] = None):
        self.reason = reason
        self.raw_text = raw_text
        super().__init__(reason)

    def details(self) -> Optional[str]:
        return self.reason
