import httpx
from typing import Optional

from app.config import settings

# Global HTTP client instance
client: Optional[httpx.AsyncClient] = None

async def init_http():
    """Initialize the global HTTP client shared by all upstream calls."""
    global client

    # - connect: 10s (establishing connection)
    # - read: per-attempt model latency, see HTTP_TIMEOUT_SEC
    # - write: 10s (sending request)
    # - pool: 30s (getting connection from pool)
    timeout_config = httpx.Timeout(
        connect=10.0,
        read=settings.HTTP_TIMEOUT_SEC,
        write=10.0,
        pool=30.0
    )

    client = httpx.AsyncClient(
        timeout=timeout_config,
        limits=httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=30  # Keep connections alive for 30s
        ),
        headers={"Accept-Encoding": "gzip, deflate"},
    )

async def close_http():
    """Close the global HTTP client."""
    global client
    if client:
        await client.aclose()
        client = None

def get_http_client() -> httpx.AsyncClient:
    """Get the global HTTP client instance."""
    if client is None:
        raise RuntimeError("HTTP client not initialized. Call init_http() first.")
    return client
