"""
URL Shortening Request Executor

This service sends a single draft to the remote shortening service and
turns whatever happens into a uniform outcome:
- 2xx with a well-formed body: ShortenOutcome
- any other status: ShortenError(REMOTE_REJECTED)
- unreachable service, timeout or undecodable 2xx body: ShortenError(NETWORK_FAILURE)

Exactly one request is sent per call. There are no retries; the caller
may submit again.
"""

import logging
from typing import Union

import httpx
from pydantic import ValidationError as SchemaValidationError

from shortlink_client.api.schemas import (
    ShortenOutcome,
    ShortenRequest,
    ShortenResponse,
    SubmissionDraft,
)
from shortlink_client.core.exceptions import (
    NETWORK_ERROR_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
    ShortenError,
    ShortenErrorKind,
)
from shortlink_client.core.validators import normalize_validity

logger = logging.getLogger(__name__)

SHORTEN_PATH = "/shorturls"


def build_shorten_request(draft: SubmissionDraft) -> ShortenRequest:
    """
    Build the request body for a draft.

    `validity` is included only when it is a valid positive integer and
    `shortcode` only when it is non-blank.
    """
    shortcode = draft.shortcode.strip() if draft.shortcode else ""
    return ShortenRequest(
        url=draft.url.strip(),
        validity=normalize_validity(draft.validity),
        shortcode=shortcode or None,
    )


def extract_error_detail(response: httpx.Response) -> str:
    """
    Pull a human readable cause out of an error response.

    Uses the body's ``detail`` field, then ``error``, then a generic message.
    """
    try:
        body = response.json()
    except ValueError:
        return UNKNOWN_ERROR_MESSAGE

    if isinstance(body, dict):
        for key in ("detail", "error"):
            value = body.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    return UNKNOWN_ERROR_MESSAGE


class ShortenRequestExecutor:
    """
    Issues shortening requests against the remote service.

    Never raises past `execute`; every failure comes back as a ShortenError.
    """

    def __init__(self, client: httpx.AsyncClient):
        """
        Initialize the executor.

        Args:
            client: Async HTTP client with the service base URL configured
        """
        self.client = client

    async def execute(self, draft: SubmissionDraft) -> Union[ShortenOutcome, ShortenError]:
        """
        Shorten the URL of one draft.

        Args:
            draft: The draft to submit (already validated by the caller)

        Returns:
            ShortenOutcome on success, ShortenError otherwise
        """
        payload = build_shorten_request(draft).to_payload()
        logger.info(f"Attempting to shorten URL: draft={draft.id} payload={payload}")

        try:
            response = await self.client.post(SHORTEN_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Network error during URL shortening: draft={draft.id} error={e!r}")
            return ShortenError(ShortenErrorKind.NETWORK_FAILURE, NETWORK_ERROR_MESSAGE)

        if not response.is_success:
            detail = extract_error_detail(response)
            logger.warning(
                f"Error shortening URL: draft={draft.id} "
                f"status={response.status_code} detail={detail}"
            )
            return ShortenError(
                ShortenErrorKind.REMOTE_REJECTED,
                detail,
                status_code=response.status_code
            )

        try:
            body = ShortenResponse.model_validate_json(response.content)
        except SchemaValidationError as e:
            logger.error(
                f"Undecodable shorten response: draft={draft.id} "
                f"errors={e.error_count()}"
            )
            return ShortenError(
                ShortenErrorKind.NETWORK_FAILURE,
                f"Malformed response from service: {e.error_count()} invalid field(s)",
                status_code=response.status_code
            )

        outcome = ShortenOutcome(
            original_url=payload["url"],
            short_link=body.short_link,
            expiry=body.expiry,
            source_id=draft.id,
        )
        logger.info(f"URL shortened successfully: draft={draft.id} short_link={outcome.short_link}")
        return outcome
