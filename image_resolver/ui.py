# image_resolver/ui.py
# Presentation-only utilities for CLI output.
from __future__ import annotations

from typing import IO

from image_resolver.models import FetchOutcome, ResolvedImageUrl

FAILURE_MESSAGES = {
    "invalid-input": "Invalid URL",
    "no-image-found": "No image found on this page",
    "forbidden": "The image host refused the download",
    "fetch-failed": "Failed to download image",
    "decode-failed": "Downloaded data is not a valid image",
}


def _writeln(text: str = "", *, file: IO[str]) -> None:
    file.write(text + "\n")


def failure_message(reason: str) -> str:
    return FAILURE_MESSAGES.get(reason, reason)


def render_resolved(resolved: ResolvedImageUrl, *, file: IO[str]) -> None:
    _writeln(resolved.url, file=file)


def render_failure(reason: str, detail: str = "", *, file: IO[str]) -> None:
    _writeln(f"Error: {failure_message(reason)}", file=file)
    if detail:
        _writeln(f"  ({detail})", file=file)


def render_outcome(outcome: FetchOutcome, *, file: IO[str]) -> None:
    if outcome.image is None:
        render_failure(outcome.failure or "fetch-failed", outcome.detail, file=file)
        return
    img = outcome.image
    _writeln(f"Image:    {img.url}", file=file)
    if outcome.resolved is not None:
        _writeln(f"Found by: {outcome.resolved.strategy} ({outcome.resolved.kind})", file=file)
    _writeln(f"Tier:     {img.tier}", file=file)
    _writeln(f"Type:     {img.content_type} ({img.format})", file=file)
    _writeln(f"Size:     {img.width}x{img.height}, {len(img.data)} bytes", file=file)
