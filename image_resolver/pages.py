# image_resolver/pages.py
"""
HTML page loading for the extractors.

Responsibilities:
- Fetch a page over HTTP(S) with redirects, a timeout and a browser user agent.
- Turn expected failures (HTTP status, network, non-HTML) into None.
- Optionally retry a failed fetch by rendering the page in a headless browser.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from bs4 import BeautifulSoup

from image_resolver.browser import render_html

log = logging.getLogger(__name__)


async def fetch_html(
    url: str,
    *,
    user_agent: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BeautifulSoup | None:
    """
    GET `url` and parse it, or return None on HTTP/network errors and non-HTML.
    Anything else is a bug and propagates.
    """
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent},
            transport=transport,
        ) as client:
            resp = await client.get(url)
            if resp.status_code != 200:
                log.warning("Non-200 response for %s: %d", url, resp.status_code)
            resp.raise_for_status()

        ctype = resp.headers.get("content-type", "").lower()
        if ctype and "html" not in ctype:
            log.info("Skipping non-HTML content at %s (%s)", url, ctype)
            return None

        return BeautifulSoup(resp.text, "html.parser")

    except httpx.HTTPStatusError as e:
        log.warning("HTTP error for %s: %s", url, e)
        return None
    except httpx.RequestError as e:
        log.warning("Network error fetching %s: %s", url, e)
        return None
    except (httpx.InvalidURL, ValueError) as e:
        log.warning("Cannot request malformed URL %r: %s", url, e)
        return None


async def load_page(
    url: str,
    config: Dict[str, Any],
    *,
    user_agent: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BeautifulSoup | None:
    """
    Fetch a page with httpx; if that yields nothing and the browser fallback is
    enabled, render it with Playwright instead.
    """
    ua = user_agent or config["user_agent"]
    timeout = float(config.get("page_timeout", 15.0))

    soup = await fetch_html(url, user_agent=ua, timeout=timeout, transport=transport)
    if soup is not None:
        return soup

    if not config.get("use_playwright_as_fallback", False):
        return None

    log.warning("Plain fetch of %s failed. Falling back to headless browser.", url)
    html = await render_html(url, user_agent=ua, timeout=timeout)
    if html is None:
        return None
    return BeautifulSoup(html, "html.parser")
