"""
Custom Exceptions

This module defines the error taxonomy of the client.

Errors that a caller is expected to react to (bad input, a rejected or
failed shortening, a full batch) are returned from the controller as
values rather than raised, so every error carries the structured fields
a caller needs to render it. StatsFetchError is the exception: it is
raised and caught inside the statistics aggregator and never leaves it.
"""

from enum import Enum
from typing import Optional


UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
NETWORK_ERROR_MESSAGE = "Could not connect to the backend service."


class ShortLinkClientError(Exception):
    """Base exception for the short link client."""
    pass


class ValidationErrorKind(str, Enum):
    """Reasons a draft fails client-side validation."""
    EMPTY_URL = "EmptyUrl"
    MALFORMED_URL = "MalformedUrl"
    INVALID_VALIDITY = "InvalidValidity"


VALIDATION_MESSAGES = {
    ValidationErrorKind.EMPTY_URL: "URL cannot be empty.",
    ValidationErrorKind.MALFORMED_URL: "Invalid URL format.",
    ValidationErrorKind.INVALID_VALIDITY: "Validity must be a positive integer in minutes.",
}


class ValidationError(ShortLinkClientError):
    """Returned when a draft fails validation; no request was sent."""

    def __init__(self, kind: ValidationErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or VALIDATION_MESSAGES[kind]
        super().__init__(self.message)


class ShortenErrorKind(str, Enum):
    """Failure classes of a single shortening request."""
    REMOTE_REJECTED = "RemoteRejected"
    NETWORK_FAILURE = "NetworkFailure"


class ShortenError(ShortLinkClientError):
    """
    Returned when a shortening request did not produce a short link.

    Attributes:
        kind: REMOTE_REJECTED for a non-2xx answer, NETWORK_FAILURE when
            the service could not be reached or answered with an
            undecodable body
        detail: Human readable cause
        status_code: HTTP status of the response, if one was received
    """

    def __init__(
        self,
        kind: ShortenErrorKind,
        detail: str,
        status_code: Optional[int] = None
    ):
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{kind.value}: {detail}")


class LimitReachedError(ShortLinkClientError):
    """Returned by add_draft when the batch already holds the maximum."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"You can shorten up to {limit} URLs concurrently.")


class DraftNotFoundError(ShortLinkClientError):
    """Returned by submit when no draft has the given id."""

    def __init__(self, draft_id: int):
        self.draft_id = draft_id
        super().__init__(f"Draft '{draft_id}' not found")


class StatsFetchError(ShortLinkClientError):
    """Raised when statistics for one shortcode could not be fetched."""

    def __init__(self, shortcode: str, reason: str, status_code: Optional[int] = None):
        self.shortcode = shortcode
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Statistics for '{shortcode}' unavailable: {reason}")
