"""
Batch Controller

Single entry point for the presentation layer. Owns the batch of drafts
and the result store, and drives each submission through validation,
the shortening request and, on success, the store.

Errors that the caller should show to the user are returned, not raised:
- add_draft -> LimitReachedError when the batch is full
- submit -> ValidationError, ShortenError or DraftNotFoundError
"""

import logging
from typing import List, Optional, Tuple, Union

import httpx

from shortlink_client.api.schemas import (
    DraftStatus,
    ShortenOutcome,
    StatEntry,
    SubmissionDraft,
)
from shortlink_client.core.exceptions import (
    DraftNotFoundError,
    LimitReachedError,
    ShortenError,
    ValidationError,
)
from shortlink_client.core.setting import settings
from shortlink_client.core.validators import validate
from shortlink_client.services.result_store import ResultStore
from shortlink_client.services.shorten_executor import ShortenRequestExecutor
from shortlink_client.services.stats_aggregator import StatsAggregator

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("url", "validity", "shortcode")

SubmitResult = Union[ShortenOutcome, ValidationError, ShortenError, DraftNotFoundError]


class BatchController:
    """
    Orchestrates drafts, submissions and statistics for one session.

    The batch starts with a single blank draft and grows up to
    `max_drafts`. Drafts are never removed.
    """

    def __init__(
        self,
        executor: ShortenRequestExecutor,
        aggregator: StatsAggregator,
        store: Optional[ResultStore] = None,
        max_drafts: Optional[int] = None,
    ):
        """
        Initialize the controller.

        Args:
            executor: Sends shortening requests
            aggregator: Collects statistics for stored outcomes
            store: Result store (a new empty one by default)
            max_drafts: Batch size limit (default: settings.MAX_DRAFTS)
        """
        self.executor = executor
        self.aggregator = aggregator
        self.store = store if store is not None else ResultStore()
        self.max_drafts = max_drafts if max_drafts is not None else settings.MAX_DRAFTS

        self._drafts: List[SubmissionDraft] = [SubmissionDraft(id=1)]
        self._in_flight = 0

    @classmethod
    def from_client(cls, client: httpx.AsyncClient, max_drafts: Optional[int] = None) -> "BatchController":
        """Build a controller whose executor and aggregator share one client."""
        return cls(
            ShortenRequestExecutor(client),
            StatsAggregator(client),
            max_drafts=max_drafts,
        )

    @property
    def drafts(self) -> Tuple[SubmissionDraft, ...]:
        """Copies of the current drafts, in creation order."""
        return tuple(draft.model_copy() for draft in self._drafts)

    @property
    def results(self) -> Tuple[ShortenOutcome, ...]:
        return self.store.all()

    @property
    def is_busy(self) -> bool:
        """True while at least one shortening request is in flight."""
        return self._in_flight > 0

    def get_draft(self, draft_id: int) -> Optional[SubmissionDraft]:
        draft = self._find(draft_id)
        return draft.model_copy() if draft else None

    def _find(self, draft_id: int) -> Optional[SubmissionDraft]:
        for draft in self._drafts:
            if draft.id == draft_id:
                return draft
        return None

    def add_draft(self) -> Union[SubmissionDraft, LimitReachedError]:
        """
        Append a blank draft.

        Returns:
            The new draft, or LimitReachedError if the batch is full
            (the batch is left unchanged)
        """
        if len(self._drafts) >= self.max_drafts:
            logger.info(f"Draft limit reached: {self.max_drafts}")
            return LimitReachedError(self.max_drafts)

        draft = SubmissionDraft(id=len(self._drafts) + 1)
        self._drafts.append(draft)
        return draft.model_copy()

    def update_draft(self, draft_id: int, field: str, value) -> None:
        """
        Replace one field of a draft and return it to EDITING.

        Unknown ids are ignored.

        Raises:
            ValueError: If `field` is not an editable draft field, or
                pydantic.ValidationError if `value` has the wrong type (the
                draft is left unchanged)
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown draft field '{field}'; expected one of {EDITABLE_FIELDS}")

        draft = self._find(draft_id)
        if draft is None:
            return

        setattr(draft, field, value)
        draft.status = DraftStatus.EDITING

    async def submit(self, draft_id: int) -> SubmitResult:
        """
        Validate and shorten one draft.

        Invalid drafts are rejected without any network call. A successful
        outcome is appended to the result store before it is returned.
        Submissions are independent of each other; the same draft may be
        submitted again after success or failure.

        Args:
            draft_id: Id of the draft to submit

        Returns:
            ShortenOutcome, or the ValidationError / ShortenError /
            DraftNotFoundError describing why nothing was stored
        """
        draft = self._find(draft_id)
        if draft is None:
            return DraftNotFoundError(draft_id)

        error = validate(draft.url, draft.validity)
        if error is not None:
            draft.status = DraftStatus.FAILED
            logger.info(f"Client-side validation failed: draft={draft_id} error={error.kind.value}")
            return error

        # Later edits must not change what is sent
        submitted = draft.model_copy()
        draft.status = DraftStatus.SUBMITTING
        self._in_flight += 1
        try:
            result = await self.executor.execute(submitted)
        finally:
            self._in_flight -= 1

        if isinstance(result, ShortenOutcome):
            self.store.append(result)
            draft.status = DraftStatus.SUCCEEDED
            logger.info(f"Stored outcome for draft={draft_id}; session has {len(self.store)} result(s)")
        else:
            draft.status = DraftStatus.FAILED
        return result

    async def request_stats(self) -> List[StatEntry]:
        """Collect statistics for every stored outcome."""
        return await self.aggregator.refresh(self.store.all())
