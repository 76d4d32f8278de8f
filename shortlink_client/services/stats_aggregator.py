"""
Statistics Aggregator

This service collects usage statistics for every short link created in the
session by querying the remote service once per shortcode.

Design Decisions:
- One request per shortcode, all scheduled as concurrent tasks on the
  event loop and awaited together
- Collect what succeeds: a rejected, unreachable or malformed answer drops
  that one entry and is logged; it never fails the whole pass
- Each pass replaces the previous result set wholesale
- Overlapping passes are not cancelled; `entries` holds the pass that
  resolved last
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx
from pydantic import ValidationError as SchemaValidationError

from shortlink_client.api.schemas import ShortenOutcome, StatEntry
from shortlink_client.core.exceptions import StatsFetchError
from shortlink_client.core.validators import extract_shortcode

logger = logging.getLogger(__name__)

STATS_PATH = "/shorturls/{shortcode}"


class StatsAggregator:
    """
    Fan-out/fan-in statistics collection over a ResultStore snapshot.
    """

    def __init__(self, client: httpx.AsyncClient):
        """
        Initialize the aggregator.

        Args:
            client: Async HTTP client with the service base URL configured
        """
        self.client = client
        self._entries: List[StatEntry] = []

    @property
    def entries(self) -> List[StatEntry]:
        """Entries of the most recently resolved pass."""
        return list(self._entries)

    async def fetch_stats(self, shortcode: str) -> StatEntry:
        """
        Fetch and decode statistics for one shortcode.

        Args:
            shortcode: The shortcode to query

        Returns:
            A complete StatEntry

        Raises:
            StatsFetchError: On transport failure, non-2xx status or a body
                that does not decode
        """
        if not shortcode:
            raise StatsFetchError(shortcode, "short link has no shortcode segment")

        try:
            response = await self.client.get(STATS_PATH.format(shortcode=shortcode))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise StatsFetchError(shortcode, f"network error: {e!r}") from e

        if not response.is_success:
            raise StatsFetchError(
                shortcode,
                f"service answered {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            return StatEntry.model_validate_json(response.content)
        except SchemaValidationError as e:
            raise StatsFetchError(
                shortcode,
                f"malformed statistics body ({e.error_count()} invalid field(s))",
                status_code=response.status_code
            ) from e

    async def _fetch_or_none(self, shortcode: str) -> Optional[StatEntry]:
        try:
            return await self.fetch_stats(shortcode)
        except StatsFetchError as e:
            logger.warning(f"Error fetching stats for shortcode: {e}")
            return None

    async def refresh(self, snapshot: Sequence[ShortenOutcome]) -> List[StatEntry]:
        """
        Run one aggregation pass.

        Args:
            snapshot: Outcomes to collect statistics for (ResultStore.all())

        Returns:
            The successfully fetched entries, in snapshot order. Failed
            shortcodes are left out.
        """
        if not snapshot:
            logger.info("No shortened URLs in this session; skipping statistics fetch")
            self._entries = []
            return []

        shortcodes = [extract_shortcode(outcome.short_link) for outcome in snapshot]
        logger.info(f"Fetching statistics for {len(shortcodes)} short link(s)")

        tasks = [asyncio.create_task(self._fetch_or_none(code)) for code in shortcodes]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        entries = []
        for shortcode, result in zip(shortcodes, results):
            if isinstance(result, StatEntry):
                entries.append(result)
            elif isinstance(result, Exception):
                logger.error(
                    f"Unexpected error fetching stats for {shortcode!r}: {result!r}",
                    exc_info=result
                )
            elif isinstance(result, BaseException):
                raise result
        self._entries = entries

        logger.info(
            f"Statistics fetched: {len(entries)} succeeded, "
            f"{len(shortcodes) - len(entries)} failed"
        )
        return list(entries)
