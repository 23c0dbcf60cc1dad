# image_resolver/fetcher.py
"""
Tiered image download.

Image hosts often refuse clients that do not look like a browser, and a few
refuse clients that look *too much* like one. The fetcher therefore walks an
ordered list of request profiles (tiers). Each profile states where to go next
for each kind of failure:

  full-headers    401/403 -> minimal-headers, other status -> stop,
                  exception or undecodable bytes -> bare
  minimal-headers any failure -> bare
  bare            any failure -> stop

Only an explicit rejection leads to the curl-like retry; a request that
raised goes straight to the plain connection.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from PIL import Image, UnidentifiedImageError

from image_resolver.models import FailureReason, FetchedImage, FetchOutcome, TierName
from image_resolver.url_logic import referer_for

log = logging.getLogger(__name__)

FORBIDDEN_STATUSES = frozenset({401, 403})

BROWSER_IMAGE_HEADERS = {
    "Accept": "image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "image",
    "Sec-Fetch-Mode": "no-cors",
    "Sec-Fetch-Site": "cross-site",
}


@dataclass(frozen=True)
class RequestProfile:
    """One tier: how to shape the request, and which tier each failure leads to."""

    name: TierName
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 20.0
    on_forbidden: Optional[TierName] = None
    on_bad_status: Optional[TierName] = None
    on_error: Optional[TierName] = None


@dataclass
class _Attempt:
    status: int | None = None
    error: str = ""
    got_bytes: bool = False
    image: FetchedImage | None = None


def build_profiles(image_url: str, config: Dict[str, Any]) -> List[RequestProfile]:
    """The tiers for one image URL, in the order they are tried."""
    full_headers = {"User-Agent": config["user_agent"], **BROWSER_IMAGE_HEADERS}
    full_headers["Referer"] = referer_for(image_url)
    return [
        RequestProfile(
            name="full-headers",
            headers=full_headers,
            timeout=float(config.get("image_timeout", 20.0)),
            on_forbidden="minimal-headers",
            on_bad_status=None,
            on_error="bare",
        ),
        RequestProfile(
            name="minimal-headers",
            headers={"User-Agent": config["minimal_user_agent"]},
            timeout=float(config.get("minimal_timeout", 15.0)),
            on_forbidden="bare",
            on_bad_status="bare",
            on_error="bare",
        ),
        RequestProfile(
            name="bare",
            timeout=float(config.get("bare_timeout", 30.0)),
        ),
    ]


def decode_image(data: bytes, url: str, content_type: str, tier: TierName) -> FetchedImage | None:
    """Validate bytes as a raster image with Pillow. None if they do not decode."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            fmt = img.format or ""
            width, height = img.size
    except (
        UnidentifiedImageError,
        OSError,
        EOFError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as e:
        log.debug("Bytes from %s did not decode as an image: %s", url, e)
        return None

    mime = Image.MIME.get(fmt.upper(), "") if fmt else ""
    base_type = content_type.split(";")[0].strip().lower()
    if not base_type.startswith("image/"):
        base_type = mime or "application/octet-stream"

    return FetchedImage(
        data=data,
        content_type=base_type,
        width=width,
        height=height,
        format=fmt,
        url=url,
        tier=tier,
    )


async def _attempt(
    image_url: str,
    profile: RequestProfile,
    transport: httpx.AsyncBaseTransport | None,
) -> _Attempt:
    """One GET with one profile. Never raises for HTTP, network or decode trouble."""
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(profile.timeout),
            headers=profile.headers or None,
            transport=transport,
        ) as client:
            resp = await client.get(image_url)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        # malformed URLs from page metadata surface as InvalidURL or ValueError
        log.warning("[%s] request for %s failed: %s", profile.name, image_url, e)
        return _Attempt(error=str(e) or e.__class__.__name__)

    if resp.status_code != 200:
        log.warning("[%s] %s answered HTTP %d", profile.name, image_url, resp.status_code)
        return _Attempt(status=resp.status_code)

    image = decode_image(
        resp.content, image_url, resp.headers.get("content-type", ""), profile.name
    )
    if image is None:
        log.warning("[%s] %s returned bytes that are not an image", profile.name, image_url)
        return _Attempt(status=200, got_bytes=True, error="undecodable image data")
    return _Attempt(status=200, got_bytes=True, image=image)


async def fetch_image(
    image_url: str,
    config: Dict[str, Any],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchOutcome:
    """
    Download and decode `image_url`, walking the tiers until one succeeds.

    The failure reason, when every reachable tier failed, is:
      - "decode-failed" if the last attempt got bytes that were not an image,
      - "forbidden" if the full-header request was rejected with 401/403,
      - "fetch-failed" otherwise.
    """
    profiles = {p.name: p for p in build_profiles(image_url, config)}
    attempts: list[str] = []
    forbidden = False
    last = _Attempt()

    current: Optional[TierName] = "full-headers"
    while current is not None:
        profile = profiles[current]
        log.info("Fetching image via %s tier: %s", profile.name, image_url)
        last = await _attempt(image_url, profile, transport)

        if last.image is not None:
            attempts.append(f"{profile.name}: ok")
            log.info(
                "Fetched %s (%s, %dx%d) via %s tier",
                image_url,
                last.image.content_type,
                last.image.width,
                last.image.height,
                profile.name,
            )
            return FetchOutcome(image=last.image, attempts=attempts)

        if last.status in FORBIDDEN_STATUSES:
            attempts.append(f"{profile.name}: HTTP {last.status}")
            if profile.name == "full-headers":
                forbidden = True
            current = profile.on_forbidden
        elif last.status is not None and last.status != 200:
            attempts.append(f"{profile.name}: HTTP {last.status}")
            current = profile.on_bad_status
        else:
            attempts.append(f"{profile.name}: {last.error}")
            current = profile.on_error

    reason: FailureReason
    if last.got_bytes:
        reason = "decode-failed"
    elif forbidden:
        reason = "forbidden"
    else:
        reason = "fetch-failed"
    log.warning("All fetch tiers exhausted for %s (%s)", image_url, reason)
    return FetchOutcome(failure=reason, detail="; ".join(attempts), attempts=attempts)
