"""
Shared httpx.AsyncClient for the weather provider.
Created once in the app lifespan; tests install one with a MockTransport instead.
"""
from __future__ import annotations

import httpx

USER_AGENT = "health-diary/0.1 (+weather lookup)"
_LIMITS = httpx.Limits(max_connections=4, max_keepalive_connections=2)

_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Return the shared client. Raises RuntimeError before init_http_client() has run."""
    if _http_client is None:
        raise RuntimeError("Weather HTTP client not initialized; call init_http_client() in the lifespan.")
    return _http_client


def init_http_client(
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared client once; later calls return the existing one."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            limits=_LIMITS,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
    return _http_client


async def close_http_client() -> None:
    global _http_client
    client, _http_client = _http_client, None
    if client is not None:
        await client.aclose()
