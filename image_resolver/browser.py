# image_resolver/browser.py
"""
Playwright-based page rendering.

Used only when a plain HTTP fetch of a page fails and the
`use_playwright_as_fallback` setting is on. Pages that refuse non-browser
clients, or that inject their preview tags with JavaScript, usually render
fine in headless Chromium.
"""
from __future__ import annotations

import logging

from playwright.async_api import async_playwright

log = logging.getLogger(__name__)


async def render_html(url: str, *, user_agent: str, timeout: float) -> str | None:
    """
    Navigate to `url` in a fresh headless browser and return the rendered HTML,
    or None if navigation fails or the server answers with an error status.
    """
    log.info("Starting headless browser session for %s", url)
    try:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True)
            try:
                page = await browser.new_page(user_agent=user_agent)
                timeout_ms = int(timeout * 1000)
                log.debug("Navigating to %s (timeout=%sms)...", url, timeout_ms)
                response = await page.goto(
                    url, wait_until="domcontentloaded", timeout=timeout_ms
                )
                if response is None:
                    log.error("No response from %s", url)
                    return None
                if response.status >= 400:
                    log.error("HTTP error %d for %s", response.status, url)
                    return None
                return await page.content()
            finally:
                await browser.close()
                log.info("Browser session closed.")
    except Exception as e:
        # Playwright raises its own Error/TimeoutError types for navigation and
        # for a missing browser install; both mean "no page".
        log.error("An exception occurred while rendering %s: %s", url, e, exc_info=True)
        return None
