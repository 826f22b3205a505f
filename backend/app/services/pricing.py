# backend/app/services/pricing.py
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

import httpx

from app.config import Settings
from app.errors import ConfigError, ParseFailure, UpstreamError
from app.schemas import PriceQuery, PriceResult
from app.tools.extract import INVALID_STRUCTURE, extract_price
from app.tools.gemini import make_request_fn
from app.tools.retry import call_with_retry

log = logging.getLogger("cropprice.pricing")

def t(): return time.perf_counter()


async def fetch_price(
    name: str,
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> PriceResult:
    """
    Ask the model for the current mandi price of `name`.

    Raises ConfigError (no key, nothing sent), UpstreamError (4xx or retries
    exhausted) or ParseFailure (2xx without a usable price payload).
    """
    if not settings.GEMINI_API_KEY:
        log.error("GEMINI_API_KEY is not set in environment variables.")
        raise ConfigError("GEMINI_API_KEY is not set")

    query = PriceQuery(name=name)
    start = t()

    try:
        response = await call_with_retry(
            make_request_fn(client, query.name, settings),
            settings.retry_policy(),
            sleep=sleep,
        )
    except httpx.HTTPError as e:
        # transport errors are retried inside; what reaches here is terminal (decoding, redirects, bad URL)
        log.error("Upstream request for %r failed: %s: %s", query.name, type(e).__name__, e)
        raise UpstreamError(f"{type(e).__name__}: {e}")
    api_ms = round((t() - start) * 1000)

    try:
        envelope = response.json()
    except ValueError:
        log.error("Upstream returned non-JSON body for %r: %s", query.name, response.text[:500])
        raise ParseFailure(INVALID_STRUCTURE, raw_text=response.text)

    try:
        result = extract_price(envelope)
    except ParseFailure as e:
        log.error("Could not parse price for %r (%s). Raw text: %r", query.name, e.reason, e.raw_text)
        raise

    total_ms = round((t() - start) * 1000)
    log.info("⏱️  Price lookup %r: %sms (API: %sms) -> %s %s %s",
             query.name, total_ms, api_ms, result.price, result.currency, result.unit)
    return result
