"""
Result Store

Ordered, append-only collection of successful shortening outcomes.
Insertion order is the order in which requests completed, not the order
in which they were submitted. The same URL shortened twice is stored twice.

All mutation happens on the event loop thread between awaits, so no lock
is taken.
"""

from typing import List, Tuple

from shortlink_client.api.schemas import ShortenOutcome


class ResultStore:
    """In-memory sequence of ShortenOutcome records for the session."""

    def __init__(self):
        self._outcomes: List[ShortenOutcome] = []

    def append(self, outcome: ShortenOutcome) -> None:
        """Add an outcome to the end of the sequence."""
        self._outcomes.append(outcome)

    def all(self) -> Tuple[ShortenOutcome, ...]:
        """Read-only snapshot of the current outcomes, in completion order."""
        return tuple(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)
