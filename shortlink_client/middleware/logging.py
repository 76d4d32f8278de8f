"""
Logging Hooks for Outbound Request/Response Logging

These httpx event hooks log every request the client sends to the
shortening service. They capture:
- Request method and path
- Response status code
- Round-trip time

Design Decisions:
- Implemented as httpx event hooks so executor and aggregator code stays
  free of logging boilerplate
- Logs to standard Python logging under the "shortlink_client.http" logger
"""

import time
import logging

import httpx

logger = logging.getLogger("shortlink_client.http")

_START_TIME_KEY = "shortlink_client.start_time"


async def log_request(request: httpx.Request) -> None:
    """
    Record the send time of a request.

    Args:
        request: The outgoing httpx request
    """
    request.extensions[_START_TIME_KEY] = time.perf_counter()
    logger.debug(f"--> {request.method} {request.url.path}")


async def log_response(response: httpx.Response) -> None:
    """
    Log method, path, status and elapsed time of a completed exchange.

    Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS

    Args:
        response: The httpx response (body not yet read)
    """
    request = response.request
    start_time = request.extensions.get(_START_TIME_KEY)
    elapsed_ms = (time.perf_counter() - start_time) * 1000 if start_time else 0.0

    level = logging.INFO if response.is_success else logging.WARNING
    logger.log(
        level,
        f"{request.method} {request.url.path} "
        f"{response.status_code} {elapsed_ms:.2f}ms"
    )


def logging_event_hooks() -> dict:
    """
    Event hooks to pass to httpx.AsyncClient.

    Returns:
        Mapping suitable for the ``event_hooks`` argument
    """
    return {"request": [log_request], "response": [log_response]}
