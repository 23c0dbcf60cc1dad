# image_resolver/api.py
# The primary, programmer-facing API for the library.

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple, Union

import httpx

from image_resolver.config import load_config
from image_resolver.extractors import (
    ExtractionContext,
    Strategy,
    extract_from_page,
    extract_photo_share,
    extract_search_redirect,
)
from image_resolver.fetcher import fetch_image
from image_resolver.models import (
    FailureReason,
    FetchOutcome,
    ResolvedImageUrl,
    UrlKind,
)
from image_resolver.url_logic import classify_url, is_valid_url

log = logging.getLogger(__name__)

# Strategies tried for each kind of input, in order. The generic page extractor
# closes every list, so a site-specific miss still gets one generic attempt.
STRATEGIES: Dict[UrlKind, Tuple[Strategy, ...]] = {
    "direct-image": (),
    "search-image-redirect": (extract_search_redirect, extract_from_page),
    "photo-share-link": (extract_photo_share, extract_from_page),
    "generic-page": (extract_from_page,),
}

Resolution = Union[ResolvedImageUrl, FailureReason]


def _prepare_config(
    config: Dict[str, Any] | None, use_playwright_as_fallback: bool | None
) -> Dict[str, Any]:
    cfg = dict(config) if config is not None else load_config()
    if use_playwright_as_fallback is not None:
        cfg["use_playwright_as_fallback"] = use_playwright_as_fallback
        log.info(
            "Applied override - use_playwright_as_fallback set to: %s",
            use_playwright_as_fallback,
        )
    return cfg


async def resolve_image_url(
    url: str,
    *,
    config: Dict[str, Any] | None = None,
    use_playwright_as_fallback: bool | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Resolution:
    """
    Decide which single image best represents `url`.

    Args:
        url: A direct image link, a search-engine image redirect, a photo-share
            link, or any web page.
        config: Settings dict; defaults to `load_config()`.
        use_playwright_as_fallback: Override the browser-rendering fallback.
        transport: Optional httpx transport for every request made.

    Returns:
        A ResolvedImageUrl, or "invalid-input" / "no-image-found".
    """
    url = (url or "").strip()
    if not is_valid_url(url):
        log.warning("Rejected input that is not an http(s) URL: %r", url)
        return "invalid-input"

    kind = classify_url(url)
    log.info("Resolving %s (%s)", url, kind)
    if kind == "direct-image":
        return ResolvedImageUrl(url=url, kind=kind, strategy="direct-image")

    ctx = ExtractionContext(
        config=_prepare_config(config, use_playwright_as_fallback),
        transport=transport,
    )
    reasons: List[str] = []
    for strategy in STRATEGIES[kind]:
        result = await strategy(url, ctx)
        if result.ok:
            log.info("Strategy %s resolved %s -> %s", result.strategy, url, result.url)
            return ResolvedImageUrl(url=result.url, kind=kind, strategy=result.strategy)  # type: ignore[arg-type]
        log.info("Strategy %s found nothing: %s", result.strategy, result.reason)
        reasons.append(f"{result.strategy}: {result.reason}")

    log.warning("No image found for %s (%s)", url, "; ".join(reasons))
    return "no-image-found"


async def fetch_best_image(
    url: str,
    *,
    config: Dict[str, Any] | None = None,
    use_playwright_as_fallback: bool | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchOutcome:
    """
    The whole pipeline: resolve `url` to one image URL, then download it.

    Returns:
        A FetchOutcome holding either the decoded image or a single failure reason.
    """
    cfg = _prepare_config(config, use_playwright_as_fallback)

    log.info("Step 1: Resolving image URL for %s", url)
    resolved = await resolve_image_url(url, config=cfg, transport=transport)
    if not isinstance(resolved, ResolvedImageUrl):
        return FetchOutcome(failure=resolved, detail=f"could not resolve {url!r}")

    log.info("Step 2: Downloading %s", resolved.url)
    outcome = await fetch_image(resolved.url, cfg, transport=transport)
    outcome.resolved = resolved
    return outcome
