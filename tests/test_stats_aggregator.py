"""
Tests for the statistics aggregator: fan-out over every stored outcome,
collect what succeeds, never fail the whole pass.
"""

from datetime import datetime, timezone

import httpx
import pytest

from shortlink_client.api.schemas import ShortenOutcome
from shortlink_client.core.exceptions import StatsFetchError
from shortlink_client.services.http_client import create_http_client
from shortlink_client.services.stats_aggregator import StatsAggregator

EXPIRY = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_outcome(shortcode: str, source_id: int = 1) -> ShortenOutcome:
    return ShortenOutcome(
        original_url=f"https://example.com/{shortcode}",
        short_link=f"http://localhost:5000/{shortcode}",
        expiry=EXPIRY,
        source_id=source_id,
    )


@pytest.mark.asyncio
class TestRefresh:
    """Test StatsAggregator.refresh()."""

    async def test_empty_snapshot_issues_no_requests(self, client, fake_service):
        aggregator = StatsAggregator(client)

        entries = await aggregator.refresh(())

        assert entries == []
        assert fake_service.stats_calls == []

    async def test_all_succeed(self, client, fake_service):
        fake_service.add_link("a1", "https://example.com/a1", clicks=[
            {"timestamp": "2024-12-31T23:30:00Z", "source": "email", "location": "Berlin"},
        ])
        fake_service.add_link("b2", "https://example.com/b2")
        aggregator = StatsAggregator(client)

        entries = await aggregator.refresh((make_outcome("a1"), make_outcome("b2", 2)))

        assert [entry.shortcode for entry in entries] == ["a1", "b2"]
        first = entries[0]
        assert first.original_url == "https://example.com/a1"
        assert first.total_clicks == 1
        assert first.detailed_clicks[0].source == "email"
        assert first.detailed_clicks[0].location == "Berlin"
        assert first.expiry_date == EXPIRY
        assert entries[1].detailed_clicks == []

    async def test_partial_failure_drops_only_failed_entries(self, client, fake_service):
        """a1 answers 200, b2 answers 404: one entry, no error."""
        fake_service.add_link("a1", "https://example.com/a1")
        fake_service.add_link("b2", "https://example.com/b2")
        fake_service.rejected_stats = {"b2"}
        aggregator = StatsAggregator(client)

        entries = await aggregator.refresh((make_outcome("a1"), make_outcome("b2", 2)))

        assert len(entries) == 1
        assert entries[0].shortcode == "a1"
        assert sorted(fake_service.stats_calls) == ["a1", "b2"]

    async def test_n_minus_k_entries_returned(self, client, fake_service):
        codes = [f"c{i}" for i in range(6)]
        for code in codes:
            fake_service.add_link(code, f"https://example.com/{code}")
        fake_service.rejected_stats = {"c1", "c4"}
        aggregator = StatsAggregator(client)

        entries = await aggregator.refresh([make_outcome(code) for code in codes])

        assert len(entries) == len(codes) - 2
        assert {entry.shortcode for entry in entries} == {"c0", "c2", "c3", "c5"}

    async def test_requests_are_issued_concurrently(self, client, fake_service):
        codes = ["x1", "x2", "x3", "x4"]
        for code in codes:
            fake_service.add_link(code, f"https://example.com/{code}")
            fake_service.delays[code] = 0.05
        aggregator = StatsAggregator(client)

        entries = await aggregator.refresh([make_outcome(code) for code in codes])

        assert len(entries) == 4
        assert fake_service.max_active_stats_requests == 4

    async def test_all_fail_when_service_unreachable(self, unreachable_client):
        aggregator = StatsAggregator(unreachable_client)

        entries = await aggregator.refresh([make_outcome("a1"), make_outcome("b2")])

        assert entries == []
        assert len(unreachable_client.refused_calls) == 2

    async def test_malformed_body_dropped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/bad"):
                return httpx.Response(200, json={"shortcode": "bad", "total_clicks": -1})
            return httpx.Response(200, json={
                "shortcode": "good",
                "original_url": "https://example.com",
                "creation_date": "2024-12-31T00:00:00Z",
                "expiry_date": "2025-01-01T00:00:00Z",
                "total_clicks": 0,
                "detailed_clicks": [],
            })

        async with create_http_client(base_url="http://localhost:5000", transport=httpx.MockTransport(handler)) as client:
            entries = await StatsAggregator(client).refresh([make_outcome("bad"), make_outcome("good")])

        assert [entry.shortcode for entry in entries] == ["good"]

    async def test_unrequestable_short_link_dropped(self, client, fake_service):
        """A shortcode httpx refuses to build a URL for fails alone."""
        fake_service.add_link("a1", "https://example.com/a1")
        broken = ShortenOutcome(
            original_url="https://example.com/b",
            short_link="http://localhost:5000/b\x01c",
            expiry=EXPIRY,
            source_id=2,
        )
        aggregator = StatsAggregator(client)

        entries = await aggregator.refresh([make_outcome("a1"), broken])

        assert [entry.shortcode for entry in entries] == ["a1"]
        assert fake_service.stats_calls == ["a1"]

    async def test_unexpected_error_drops_only_that_entry(self, client, fake_service, monkeypatch, caplog):
        fake_service.add_link("a1", "https://example.com/a1")
        fake_service.add_link("b2", "https://example.com/b2")
        aggregator = StatsAggregator(client)
        fetch_stats = aggregator.fetch_stats

        async def flaky_fetch(shortcode):
            if shortcode == "b2":
                raise RuntimeError("boom")
            return await fetch_stats(shortcode)

        monkeypatch.setattr(aggregator, "fetch_stats", flaky_fetch)

        entries = await aggregator.refresh([make_outcome("a1"), make_outcome("b2", 2)])

        assert [entry.shortcode for entry in entries] == ["a1"]
        assert aggregator.entries == entries
        assert "Unexpected error fetching stats for 'b2'" in caplog.text

    async def test_each_pass_replaces_previous_entries(self, client, fake_service):
        fake_service.add_link("a1", "https://example.com/a1")
        aggregator = StatsAggregator(client)

        await aggregator.refresh([make_outcome("a1")])
        assert [entry.shortcode for entry in aggregator.entries] == ["a1"]

        fake_service.rejected_stats = {"a1"}
        await aggregator.refresh([make_outcome("a1")])
        assert aggregator.entries == []

    async def test_failures_are_logged(self, client, fake_service, caplog):
        aggregator = StatsAggregator(client)

        await aggregator.refresh([make_outcome("missing")])

        assert "Error fetching stats for shortcode" in caplog.text
        assert "missing" in caplog.text


@pytest.mark.asyncio
class TestFetchStats:
    """Test the single-shortcode fetch."""

    async def test_not_found_raises(self, client):
        with pytest.raises(StatsFetchError) as exc_info:
            await StatsAggregator(client).fetch_stats("nope")

        assert exc_info.value.shortcode == "nope"
        assert exc_info.value.status_code == 404

    async def test_blank_shortcode_raises_without_request(self, client, fake_service):
        with pytest.raises(StatsFetchError):
            await StatsAggregator(client).fetch_stats("")

        assert fake_service.stats_calls == []
