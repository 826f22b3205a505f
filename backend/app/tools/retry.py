# backend/app/tools/retry.py
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from app.errors import ClientRejection, RetriesExhausted, UpstreamError

log = logging.getLogger("cropprice.retry")


def uniform_jitter(low: float, high: float) -> float:
    """Uniform draw from the half-open range [low, high)."""
    return low + random.random() * (high - low)


SUCCESS = "success"
RETRYABLE = "retryable"
TERMINAL = "terminal"


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule for one outbound call: base * multiplier**attempt + jitter."""
    max_retries: int = 5          # total attempts, first call included
    base_delay_ms: float = 1000
    jitter_ms: float = 1000       # jitter drawn from [0, jitter_ms)
    multiplier: float = 2.0

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.base_delay_ms < 0 or self.jitter_ms < 0:
            raise ValueError("delays must be non-negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    def delay_ms(self, attempt: int, jitter: float = 0.0) -> float:
        return self.base_delay_ms * (self.multiplier ** attempt) + jitter


@dataclass
class UpstreamAttempt:
    attempt: int
    status_code: Optional[int] = None
    error: Optional[str] = None

    def describe(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}"
        return f"transport error: {self.error}"


def classify_status(status_code: int) -> str:
    if 200 <= status_code <= 299:
        return SUCCESS
    # 429 sits inside the 4xx range but is a throttle, not a bad request
    if status_code == 429 or 500 <= status_code <= 599:
        return RETRYABLE
    return TERMINAL


def _body_preview(response: Any, limit: int = 300) -> str:
    try:
        return (response.text or "")[:limit]
    except (AttributeError, httpx.ResponseNotRead):
        return ""


async def call_with_retry(
    request_fn: Callable[[], Awaitable[Any]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    jitter: Callable[[float, float], float] = uniform_jitter,
) -> Any:
    """
    Issue `request_fn()` until it yields a 2xx response or the policy gives up.

    - 2xx: returned immediately.
    - 4xx (except 429): ClientRejection on the spot, retry budget untouched.
    - 429 / 5xx / httpx.TransportError: warning, backoff, next attempt.
    - No sleep after the final attempt; RetriesExhausted is raised instead.

    `sleep` and `jitter` are injectable so tests can script time.
    """
    attempt = 0
    while True:
        try:
            response = await request_fn()
        except httpx.TransportError as e:
            outcome = UpstreamAttempt(attempt=attempt, error=f"{type(e).__name__}: {e}")
        else:
            status = response.status_code
            kind = classify_status(status)
            if kind == SUCCESS:
                if attempt:
                    log.info("Upstream succeeded on attempt %d/%d", attempt + 1, policy.max_retries)
                return response
            if kind == TERMINAL:
                body = _body_preview(response)
                if 400 <= status <= 499:
                    log.error("Upstream rejected request (HTTP %d), not retrying: %s", status, body)
                    raise ClientRejection(status, body)
                log.error("Unexpected upstream status %d, not retrying", status)
                raise UpstreamError(f"Unexpected upstream status {status}")
            outcome = UpstreamAttempt(attempt=attempt, status_code=status)

        log.warning(
            "Retryable upstream failure (%s) on attempt %d/%d",
            outcome.describe(), attempt + 1, policy.max_retries,
        )
        if attempt >= policy.max_retries - 1:
            raise RetriesExhausted(attempt + 1, outcome.describe())

        delay = policy.delay_ms(attempt, jitter(0, policy.jitter_ms) if policy.jitter_ms else 0.0)
        log.debug("Backing off %.0fms before attempt %d", delay, attempt + 2)
        await sleep(delay / 1000.0)
        attempt += 1
