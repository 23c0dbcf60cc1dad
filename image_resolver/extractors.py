# image_resolver/extractors.py
"""
Extraction strategies.

Each strategy takes the request URL and an ExtractionContext and returns a
StrategyResult: either one image URL, or the reason it found none. Strategies
never raise for network or parsing problems; the orchestrator decides what an
exhausted list of strategies means.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict
from urllib.parse import parse_qs, urlparse

import httpx
from bs4 import BeautifulSoup

from image_resolver.models import StrategyResult
from image_resolver.pages import load_page
from image_resolver.scoring import choose_best_image, extract_candidates
from image_resolver.url_logic import (
    SEARCH_ENGINE_DOMAIN,
    SEARCH_STATIC_DOMAIN,
    _netloc,
    host_matches,
    registrable_name,
    resolve_url,
    rewrite_size_token,
)

log = logging.getLogger(__name__)

# Tags pages use to declare their preview image, in the order they are trusted.
META_IMAGE_SELECTORS = (
    'meta[property="og:image"]',
    'meta[name="twitter:image"]',
    'meta[name="image"]',
    'meta[itemprop="image"]',
)

SEARCH_URL_PARAMS = ("imgurl", "url")
SEARCH_RESULT_ALT = "Image result"


@dataclass
class ExtractionContext:
    """Per-request settings handed to every strategy. Never shared between requests."""

    config: Dict[str, Any]
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)


Strategy = Callable[[str, ExtractionContext], Awaitable[StrategyResult]]


def find_meta_image(soup: BeautifulSoup) -> str | None:
    """First non-empty `content` among the preview-image meta tags, by priority."""
    for selector in META_IMAGE_SELECTORS:
        for tag in soup.select(selector):
            content = str(tag.get("content", "")).strip()
            if content:
                log.debug("Found %s -> %s", selector, content)
                return content
    return None


# ---------- generic pages ----------


async def extract_from_page(url: str, ctx: ExtractionContext) -> StrategyResult:
    """Preview meta tags first; otherwise score every <img> on the page."""
    name = "generic-page"
    soup = await load_page(url, ctx.config, transport=ctx.transport)
    if soup is None:
        return StrategyResult(name, reason=f"could not load page {url}")

    meta = find_meta_image(soup)
    if meta:
        return StrategyResult(name, url=resolve_url(url, meta))

    best = choose_best_image(extract_candidates(soup, url))
    if best:
        return StrategyResult(name, url=best)
    return StrategyResult(name, reason="no usable <img> on page")


# ---------- search-engine image redirects ----------


def image_url_from_query(url: str) -> str | None:
    """The original image location carried in the redirect's query string, if any."""
    params = parse_qs(urlparse(url).query, encoding="utf-8")
    for key in SEARCH_URL_PARAMS:
        values = [v for v in params.get(key, []) if v]
        if values:
            return values[0]
    return None


def _is_off_site_source(src: str) -> bool:
    if not src.startswith("http"):
        return False
    host = _netloc(src)
    if not host:
        return False
    return registrable_name(host) not in (SEARCH_ENGINE_DOMAIN, SEARCH_STATIC_DOMAIN)


async def extract_search_redirect(url: str, ctx: ExtractionContext) -> StrategyResult:
    """
    Query parameters first (no network). Otherwise load the result page and take
    the first embedded image from a well-known image host, then the first one
    served from anywhere but the search engine itself.
    """
    name = "search-image-redirect"
    direct = image_url_from_query(url)
    if direct:
        log.info("Image location taken from query string: %s", direct)
        return StrategyResult(name, url=direct)

    soup = await load_page(
        url, ctx.config, user_agent=ctx.config["share_user_agent"], transport=ctx.transport
    )
    if soup is None:
        return StrategyResult(name, reason=f"could not load result page {url}")

    hosts = ctx.config.get("search_image_hosts", [])
    sources = [
        (str(img.get("src", "")), str(img.get("alt", "")))
        for img in soup.select("img[src]")
    ]
    sources = [(src, alt) for src, alt in sources if src and not src.startswith("data:")]

    for src, alt in sources:
        if host_matches(_netloc(src), hosts) or SEARCH_RESULT_ALT in alt:
            return StrategyResult(name, url=resolve_url(url, src))

    for src, _ in sources:
        if _is_off_site_source(src):
            return StrategyResult(name, url=src)

    return StrategyResult(name, reason="no off-site image on result page")


# ---------- photo-share links ----------


async def extract_photo_share(url: str, ctx: ExtractionContext) -> StrategyResult:
    """
    Preview meta tags first; otherwise the first image served from the photo
    CDN, asking for a large rendition.
    """
    name = "photo-share-link"
    soup = await load_page(
        url, ctx.config, user_agent=ctx.config["share_user_agent"], transport=ctx.transport
    )
    if soup is None:
        return StrategyResult(name, reason=f"could not load share page {url}")

    meta = find_meta_image(soup)
    if meta:
        return StrategyResult(name, url=resolve_url(url, meta))

    cdn_hosts = ctx.config.get("photo_cdn_hosts", [])
    size = int(ctx.config.get("photo_share_size", 2048))
    for img in soup.select("img[src]"):
        src = str(img.get("src", ""))
        if src and host_matches(_netloc(src), cdn_hosts):
            return StrategyResult(name, url=rewrite_size_token(resolve_url(url, src), size))

    return StrategyResult(name, reason="no photo CDN image on share page")
