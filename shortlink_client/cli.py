"""
Command-line interface for the short link client.

Usage:
    shortlink-client https://example.com/a https://example.com/b
    shortlink-client https://example.com/a --validity 60 --shortcode mylink
    shortlink-client https://example.com/a --stats
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from shortlink_client.api.schemas import ShortenOutcome
from shortlink_client.core.exceptions import (
    LimitReachedError,
    ShortenError,
    ShortLinkClientError,
    ValidationError,
)
from shortlink_client.core.logging_config import setup_logging
from shortlink_client.core.setting import settings
from shortlink_client.services.batch_controller import BatchController
from shortlink_client.services.http_client import create_http_client


def describe_error(error: ShortLinkClientError) -> dict:
    """JSON-friendly view of an error returned by the controller."""
    if isinstance(error, ValidationError):
        return {"type": "ValidationError", "kind": error.kind.value, "message": error.message}
    if isinstance(error, ShortenError):
        return {"type": "ShortenError", "kind": error.kind.value, "message": error.detail}
    return {"type": type(error).__name__, "message": str(error)}


def fill_drafts(
    controller: BatchController,
    urls: List[str],
    validity: Optional[str],
    shortcodes: List[str],
) -> List[dict]:
    """
    Create one draft per URL. URLs beyond the batch limit are reported
    and left out.
    """
    rejected = []
    for index, url in enumerate(urls):
        if index > 0:
            draft = controller.add_draft()
            if isinstance(draft, LimitReachedError):
                rejected.append({"url": url, "success": False, "error": describe_error(draft)})
                continue
            draft_id = draft.id
        else:
            draft_id = controller.drafts[0].id

        controller.update_draft(draft_id, "url", url)
        if validity:
            controller.update_draft(draft_id, "validity", validity)
        if index < len(shortcodes):
            controller.update_draft(draft_id, "shortcode", shortcodes[index])
    return rejected


async def run(args: argparse.Namespace) -> int:
    """Shorten the given URLs and optionally print their statistics."""
    async with create_http_client(base_url=args.base_url, timeout=args.timeout) as client:
        controller = BatchController.from_client(client)
        report = fill_drafts(controller, args.urls, args.validity, args.shortcode or [])

        drafts = controller.drafts
        results = await asyncio.gather(*(controller.submit(draft.id) for draft in drafts))

        for draft, result in zip(drafts, results):
            if isinstance(result, ShortenOutcome):
                report.append({"url": draft.url, "success": True, **result.model_dump(mode="json")})
            else:
                report.append({"url": draft.url, "success": False, "error": describe_error(result)})

        output = {"results": report}
        if args.stats:
            entries = await controller.request_stats()
            output["statistics"] = [entry.model_dump(mode="json") for entry in entries]

    print(json.dumps(output, indent=2))
    return 0 if all(item["success"] for item in report) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlink-client",
        description="Shorten a batch of URLs and collect their statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten two URLs
  %(prog)s https://example.com/one https://example.com/two

  # Shorten with validity and a custom shortcode
  %(prog)s https://example.com/one --validity 60 --shortcode mylink

  # Shorten, then fetch statistics for everything created
  %(prog)s https://example.com/one --stats
        """
    )
    parser.add_argument("urls", nargs="+", help=f"URLs to shorten (at most {settings.MAX_DRAFTS})")
    parser.add_argument("--validity", help="Validity in minutes, applied to every URL")
    parser.add_argument(
        "--shortcode",
        action="append",
        help="Custom shortcode; repeat to assign shortcodes to URLs in order"
    )
    parser.add_argument("--stats", action="store_true", help="Fetch statistics after shortening")
    parser.add_argument(
        "--base-url",
        default=settings.BACKEND_BASE_URL,
        help=f"Shortening service base URL (default: {settings.BACKEND_BASE_URL})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.REQUEST_TIMEOUT,
        help="Per-request timeout in seconds"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        level="DEBUG" if args.verbose else settings.LOG_LEVEL,
        json_format=settings.LOG_JSON,
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
