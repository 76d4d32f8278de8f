"""
Request, Response and Data Model Schemas

This module defines all Pydantic models exchanged with the remote
shortening service and the in-memory records the client keeps.

Design Principles:
- Request models: Define the outbound payload, omitting unset fields
- Response models: Strict decode of the service's JSON; a body that does
  not match is a decode failure, never a partially filled record
- Records (ShortenOutcome, StatEntry) are frozen once created
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, field_validator

from shortlink_client.core.validators import extract_shortcode, is_absolute_url


class ShortenRequest(BaseModel):
    """Body of POST /shorturls."""
    url: str = Field(..., description="The long URL to shorten")
    validity: Optional[PositiveInt] = Field(default=None, description="Validity in minutes")
    shortcode: Optional[str] = Field(default=None, description="Requested custom shortcode")

    def to_payload(self) -> dict:
        """JSON payload with unset optional fields left out."""
        return self.model_dump(exclude_none=True)


class ShortenResponse(BaseModel):
    """Successful (2xx) body of POST /shorturls."""
    short_link: str = Field(..., alias="shortLink")
    expiry: datetime

    @field_validator("short_link")
    @classmethod
    def short_link_must_be_usable(cls, value: str) -> str:
        # Same check as user input: the link is later requested through httpx
        if not is_absolute_url(value):
            raise ValueError("shortLink must be an absolute, well-formed URL")
        return value


class ClickDetail(BaseModel):
    """A single recorded click on a short link."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    source: str
    location: str


class StatEntry(BaseModel):
    """Successful (2xx) body of GET /shorturls/{shortcode}."""
    model_config = ConfigDict(frozen=True)

    shortcode: str
    original_url: str
    creation_date: datetime
    expiry_date: datetime
    total_clicks: NonNegativeInt
    detailed_clicks: List[ClickDetail] = Field(default_factory=list)


class ShortenOutcome(BaseModel):
    """Immutable record of one successful shortening."""
    model_config = ConfigDict(frozen=True)

    original_url: str
    short_link: str
    expiry: datetime
    source_id: int = Field(..., description="Id of the draft that produced this outcome")

    @property
    def shortcode(self) -> str:
        return extract_shortcode(self.short_link)


class DraftStatus(str, Enum):
    """Lifecycle of a draft: EDITING -> SUBMITTING -> SUCCEEDED | FAILED."""
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionDraft(BaseModel):
    """
    One pending input row.

    Fields hold raw user input; validation happens on submit. Assignments
    are type-checked, and numbers given for url or shortcode become strings.
    """
    model_config = ConfigDict(validate_assignment=True, coerce_numbers_to_str=True)

    id: int
    url: str = ""
    validity: Union[int, float, str, None] = ""
    shortcode: str = ""
    status: DraftStatus = DraftStatus.EDITING
