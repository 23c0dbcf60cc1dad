# image_resolver/cli.py
# Defines the command-line interface using argparse.

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import IO, Any, Sequence

from image_resolver import __version__
from image_resolver.api import fetch_best_image, resolve_image_url
from image_resolver.models import FetchOutcome, ResolvedImageUrl
from image_resolver.ui import render_failure, render_outcome, render_resolved

log = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _outcome_as_json(outcome: FetchOutcome) -> dict[str, Any]:
    out: dict[str, Any] = {
        "ok": outcome.ok,
        "failure": outcome.failure,
        "detail": outcome.detail,
        "attempts": outcome.attempts,
        "resolved": None,
        "image": None,
    }
    if outcome.resolved is not None:
        out["resolved"] = {
            "url": outcome.resolved.url,
            "kind": outcome.resolved.kind,
            "strategy": outcome.resolved.strategy,
        }
    if outcome.image is not None:
        img = outcome.image
        out["image"] = {
            "url": img.url,
            "tier": img.tier,
            "content_type": img.content_type,
            "format": img.format,
            "width": img.width,
            "height": img.height,
            "bytes": len(img.data),
        }
    return out


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments common to both 'resolve' and 'fetch' commands."""
    parser.add_argument(
        "url", help="A page, share link, image search result or direct image URL."
    )
    parser.add_argument(
        "--use-browser",
        action="store_true",
        help="Render pages in headless Chromium when a plain HTTP fetch fails.",
    )


async def async_main(
    argv: Sequence[str] | None = None, stdout: IO[str] | None = None
) -> int:
    """Async entry point for the command-line interface."""
    stdout = stdout or sys.stdout

    parser = argparse.ArgumentParser(
        description="Find the best representative image behind a link.",
        prog="image_resolver",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging output to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- resolve ---
    resolve_parser = subparsers.add_parser(
        "resolve", help="Print the URL of the image that best represents a link."
    )
    _add_common_args(resolve_parser)

    # --- fetch ---
    fetch_parser = subparsers.add_parser(
        "fetch", help="Resolve a link and download its image, then print a summary."
    )
    _add_common_args(fetch_parser)
    fetch_parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the outcome as JSON.",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    overrides = {"use_playwright_as_fallback": True} if args.use_browser else {}

    if args.command == "resolve":
        resolved = await resolve_image_url(args.url, **overrides)  # type: ignore[arg-type]
        if isinstance(resolved, ResolvedImageUrl):
            render_resolved(resolved, file=stdout)
            return 0
        render_failure(resolved, file=stdout)
        return 1

    # args.command == "fetch"
    outcome = await fetch_best_image(args.url, **overrides)  # type: ignore[arg-type]
    if args.json_output:
        print(json.dumps(_outcome_as_json(outcome), indent=2), file=stdout)
    else:
        render_outcome(outcome, file=stdout)
    return 0 if outcome.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Synchronous wrapper for the CLI entry point."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
