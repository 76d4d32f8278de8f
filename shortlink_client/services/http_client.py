"""
HTTP Client Management

This module builds the async HTTP client shared by the shortening executor
and the statistics aggregator.

Key Features:
- Base URL and timeout taken from settings
- Request/response logging via event hooks
- Injectable transport so tests can route requests to an in-process app
"""

from typing import Optional

import httpx

from shortlink_client.core.setting import settings
from shortlink_client.middleware.logging import logging_event_hooks


def create_http_client(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the async client used to talk to the shortening service.

    Args:
        base_url: Service base URL (default: settings.BACKEND_BASE_URL)
        timeout: Per-request timeout in seconds (default: settings.REQUEST_TIMEOUT)
        transport: Optional transport override (e.g. httpx.ASGITransport)

    Returns:
        Configured httpx.AsyncClient; the caller owns closing it

    Usage:
        async with create_http_client() as client:
            executor = ShortenRequestExecutor(client)
    """
    return httpx.AsyncClient(
        base_url=base_url or settings.BACKEND_BASE_URL,
        timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
        headers={"Accept": "application/json"},
        event_hooks=logging_event_hooks(),
        transport=transport,
    )
