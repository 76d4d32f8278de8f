"""
Pytest configuration and fixtures.

The remote shortening service is replaced by an in-process FastAPI app
reached through httpx.ASGITransport, so every test exercises the real
HTTP client, event hooks and JSON decoding without a network.
"""

import asyncio
from typing import Dict, List, Optional, Set, Tuple

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shortlink_client.services.batch_controller import BatchController
from shortlink_client.services.http_client import create_http_client

SERVICE_BASE_URL = "http://localhost:5000"
DEFAULT_EXPIRY = "2025-01-01T00:00:00Z"


class FakeShortLinkService:
    """
    Minimal implementation of the remote service contract.

    Attributes tests can tweak:
        next_codes: Shortcodes handed out (in order) when none is requested
        reject_create: (status, body) returned for every POST when set
        malformed_create: Answer POSTs with a 201 body missing required fields
        rejected_stats: Shortcodes whose statistics answer 404
        delays: Per-URL (POST) or per-shortcode (GET) delay in seconds
    """

    def __init__(self):
        self.links: Dict[str, str] = {}
        self.clicks: Dict[str, List[dict]] = {}
        self.create_calls: List[dict] = []
        self.stats_calls: List[str] = []

        self.next_codes: List[str] = []
        self.reject_create: Optional[Tuple[int, dict]] = None
        self.malformed_create = False
        self.rejected_stats: Set[str] = set()
        self.delays: Dict[str, float] = {}

        self.active_stats_requests = 0
        self.max_active_stats_requests = 0
        self._counter = 0
        self.app = self._build_app()

    def _generate_code(self) -> str:
        if self.next_codes:
            return self.next_codes.pop(0)
        self._counter += 1
        return f"gen{self._counter:03d}"

    def add_link(self, shortcode: str, url: str, clicks: Optional[List[dict]] = None) -> None:
        self.links[shortcode] = url
        self.clicks[shortcode] = clicks or []

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/shorturls")
        async def create_short_url(request: Request):
            body = await request.json()
            self.create_calls.append(body)

            delay = self.delays.get(body.get("url"))
            if delay:
                await asyncio.sleep(delay)

            if self.reject_create:
                status_code, content = self.reject_create
                return JSONResponse(status_code=status_code, content=content)
            if self.malformed_create:
                return JSONResponse(status_code=201, content={"expiry": DEFAULT_EXPIRY})

            shortcode = body.get("shortcode") or self._generate_code()
            if shortcode in self.links:
                return JSONResponse(
                    status_code=409,
                    content={"error": f"Shortcode '{shortcode}' already in use"}
                )

            self.add_link(shortcode, body["url"])
            return JSONResponse(
                status_code=201,
                content={"shortLink": f"{SERVICE_BASE_URL}/{shortcode}", "expiry": DEFAULT_EXPIRY}
            )

        @app.get("/shorturls/{shortcode}")
        async def get_stats(shortcode: str):
            self.stats_calls.append(shortcode)
            self.active_stats_requests += 1
            self.max_active_stats_requests = max(
                self.max_active_stats_requests, self.active_stats_requests
            )
            try:
                delay = self.delays.get(shortcode)
                if delay:
                    await asyncio.sleep(delay)
            finally:
                self.active_stats_requests -= 1

            if shortcode in self.rejected_stats or shortcode not in self.links:
                return JSONResponse(status_code=404, content={"error": "Shortcode not found"})

            clicks = self.clicks.get(shortcode, [])
            return {
                "shortcode": shortcode,
                "original_url": self.links[shortcode],
                "creation_date": "2024-12-31T23:00:00Z",
                "expiry_date": DEFAULT_EXPIRY,
                "total_clicks": len(clicks),
                "detailed_clicks": clicks,
            }

        return app


@pytest.fixture
def fake_service() -> FakeShortLinkService:
    return FakeShortLinkService()


@pytest.fixture
async def client(fake_service):
    """HTTP client routed to the fake service."""
    transport = httpx.ASGITransport(app=fake_service.app)
    async with create_http_client(base_url=SERVICE_BASE_URL, transport=transport) as client:
        yield client


@pytest.fixture
async def unreachable_client():
    """HTTP client whose every request fails to connect."""
    calls: List[httpx.Request] = []

    def refuse(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("Connection refused", request=request)

    transport = httpx.MockTransport(refuse)
    async with create_http_client(base_url=SERVICE_BASE_URL, transport=transport) as client:
        client.refused_calls = calls
        yield client


@pytest.fixture
def controller(client) -> BatchController:
    return BatchController.from_client(client)
