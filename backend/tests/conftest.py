import json
from types import SimpleNamespace

import pytest

from app.config import Settings


def gemini_envelope(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


WHEAT_JSON = json.dumps(
    {"commodity": "wheat", "price": 25.5, "currency": "INR", "unit": "per kilogram"}
)


class SleepRecorder:
    """Stands in for asyncio.sleep; records requested delays in seconds."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def scripted_upstream(*outcomes):
    """
    Request function returning the given outcomes in order: an int is a
    response status, an exception instance is raised.
    """
    calls = []

    async def request_fn():
        item = outcomes[len(calls)]
        calls.append(item)
        if isinstance(item, Exception):
            raise item
        return SimpleNamespace(status_code=item, text=f"status {item}")

    return request_fn, calls


@pytest.fixture()
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture()
def fast_settings():
    return Settings(
        GEMINI_API_KEY="test-key",
        PRICE_RETRY_MAX=5,
        PRICE_RETRY_BASE_MS=0,
        PRICE_RETRY_JITTER_MS=0,
    )
