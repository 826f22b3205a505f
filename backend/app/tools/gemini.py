# backend/app/tools/gemini.py
from typing import Any, Awaitable, Callable, Dict

import httpx

from app.config import Settings

USER_AGENT = "CropPrice/1.0"

SYSTEM_INSTRUCTION = (
    "You are a market price assistant for Indian agricultural commodities. "
    "Use search results to find the current national average wholesale or mandi price. "
    "Reply with ONLY a JSON object of the form "
    '{"commodity": "<name>", "price": <number>, "currency": "INR", "unit": "per kilogram"}. '
    "price is a plain number rounded to one decimal place. No markdown, no explanation."
)


def build_price_prompt(name: str) -> str:
    return (
        f"Search for the current national average wholesale or mandi price of {name} "
        "in Indian Rupees per kilogram and return it as the JSON object described."
    )


def build_payload(name: str, settings: Settings) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": build_price_prompt(name)}]}],
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "generationConfig": {"temperature": settings.GEMINI_TEMPERATURE},
    }
    if settings.GEMINI_USE_SEARCH:
        payload["tools"] = [{"google_search": {}}]
    return payload


def generate_content_url(settings: Settings) -> str:
    return f"{settings.GEMINI_API_BASE.rstrip('/')}/models/{settings.GEMINI_MODEL}:generateContent"


def make_request_fn(
    client: httpx.AsyncClient, name: str, settings: Settings
) -> Callable[[], Awaitable[httpx.Response]]:
    """Zero-arg coroutine factory; each call is one upstream attempt."""
    url = generate_content_url(settings)
    payload = build_payload(name, settings)
    headers = {
        "x-goog-api-key": settings.GEMINI_API_KEY,
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }
    timeout = httpx.Timeout(connect=10.0, read=settings.HTTP_TIMEOUT_SEC, write=10.0, pool=30.0)

    async def _send() -> httpx.Response:
        return await client.post(url, json=payload, headers=headers, timeout=timeout)

    return _send
