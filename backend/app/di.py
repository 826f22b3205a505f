"""
Dependency providers for routes. Tests swap these via app.dependency_overrides.
"""
import httpx

from app.config import Settings, settings
from app.http import get_http_client


def get_settings() -> Settings:
    """Process-wide settings captured at import time."""
    return settings


def get_http() -> httpx.AsyncClient:
    return get_http_client()
