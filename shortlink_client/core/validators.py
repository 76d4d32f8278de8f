"""
Input Validators

This module provides the client-side checks a draft must pass before a
shortening request is sent, plus the small parsers shared with the
request executor and the statistics aggregator.

All functions are pure: no network access and no side effects.
"""

import re
from typing import Optional, Union
from urllib.parse import urlparse

import httpx

from shortlink_client.core.exceptions import ValidationError, ValidationErrorKind

ValidityInput = Union[int, float, str, None]

_INTEGER_PATTERN = re.compile(r"^\+?\d+$")


def is_absolute_url(url: Optional[str]) -> bool:
    """
    Check that a URL parses with both a scheme and a host, and that httpx
    can build a request for it.

    Rejects whitespace in the host, a non-numeric or out-of-range port and
    non-printable characters anywhere in the URL.

    Args:
        url: The URL string to check

    Returns:
        True if the URL is absolute and well formed, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    url = url.strip()
    try:
        result = urlparse(url)
        # A netloc such as ":80" has no hostname
        if not (result.scheme and result.netloc and result.hostname):
            return False
        if any(char.isspace() for char in result.netloc):
            return False
        # Raises ValueError for "host:abc" or a port above 65535
        result.port
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False

    return True


def normalize_validity(value: ValidityInput) -> Optional[int]:
    """
    Convert a raw validity input into minutes.

    Accepts positive ints, integral floats and strings of digits.
    Blank input and anything that is not a positive integer yield None.

    Example:
        normalize_validity("30") -> 30
        normalize_validity("") -> None
        normalize_validity("1.5") -> None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        minutes = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        minutes = int(value)
    elif isinstance(value, str):
        value = value.strip()
        if not _INTEGER_PATTERN.match(value):
            return None
        minutes = int(value)
    else:
        return None

    return minutes if minutes > 0 else None


def is_validity_omitted(value: ValidityInput) -> bool:
    """True when no validity was supplied (None or a blank string)."""
    return value is None or (isinstance(value, str) and not value.strip())


def validate(url: Optional[str], validity_minutes: ValidityInput = None) -> Optional[ValidationError]:
    """
    Validate a single submission.

    Args:
        url: The URL to shorten
        validity_minutes: Optional validity; omitted means the service
            applies its own default

    Returns:
        A ValidationError describing the first problem found, or None
    """
    if url is None or not str(url).strip():
        return ValidationError(ValidationErrorKind.EMPTY_URL)

    if not is_absolute_url(url):
        return ValidationError(ValidationErrorKind.MALFORMED_URL)

    if not is_validity_omitted(validity_minutes) and normalize_validity(validity_minutes) is None:
        return ValidationError(ValidationErrorKind.INVALID_VALIDITY)

    return None


def extract_shortcode(short_link: str) -> str:
    """
    Derive the shortcode from a short link: its last non-empty path segment.

    Example:
        extract_shortcode("http://localhost:5000/abc123") -> "abc123"
    """
    path = urlparse(short_link).path
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else ""
