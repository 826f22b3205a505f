# backend/app/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

from app.tools.retry import RetryPolicy

dotenv_path = Path(__file__).parents[2] / '.env'
load_dotenv(dotenv_path)


class Settings:
    # --- Gemini ---
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_API_BASE: str = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))
    GEMINI_USE_SEARCH: bool = os.getenv("GEMINI_USE_SEARCH", "1") == "1"

    # --- Server ---
    PORT: int = int(os.getenv("PORT", "3000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Outbound retry policy ---
    PRICE_RETRY_MAX: int = int(os.getenv("PRICE_RETRY_MAX", "5"))
    PRICE_RETRY_BASE_MS: int = int(os.getenv("PRICE_RETRY_BASE_MS", "1000"))
    PRICE_RETRY_JITTER_MS: int = int(os.getenv("PRICE_RETRY_JITTER_MS", "1000"))
    PRICE_RETRY_MULTIPLIER: float = float(os.getenv("PRICE_RETRY_MULTIPLIER", "2"))

    # per-attempt read timeout; grounded search answers are slow
    HTTP_TIMEOUT_SEC: float = float(os.getenv("HTTP_TIMEOUT_SEC", "25"))

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.PRICE_RETRY_MAX,
            base_delay_ms=self.PRICE_RETRY_BASE_MS,
            jitter_ms=self.PRICE_RETRY_JITTER_MS,
            multiplier=self.PRICE_RETRY_MULTIPLIER,
        )

settings = Settings()
