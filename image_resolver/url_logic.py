# image_resolver/url_logic.py
"""
URL helpers shared by every stage: validation, classification, relative URL
resolution, host matching and the photo-share size rewrite.

Nothing here touches the network.
"""
from __future__ import annotations

import logging
import os
import re
from typing import Iterable
from urllib.parse import parse_qs, urlparse

import tldextract

from image_resolver.models import UrlKind

log = logging.getLogger(__name__)

# Raster formats a URL may point at directly.
DIRECT_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"}

# Looser set used only to pick a fallback image once scoring found nothing.
LIKELY_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg")
LIKELY_IMAGE_KEYWORDS = ("image", "img", "photo")

ALLOWED_SCHEMES = {"http", "https"}

SEARCH_ENGINE_DOMAIN = "google"
SEARCH_STATIC_DOMAIN = "gstatic"
PHOTO_SHARE_HOSTS = ("photos.google.com", "photos.app.goo.gl", "share.google")

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_WIDTH_HEIGHT_TOKEN_RE = re.compile(r"=w\d+-h\d+")
_SIZE_TOKEN_RE = re.compile(r"=s\d+")
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x1f\x7f]")

# Offline extractor: only the bundled public suffix snapshot, never a download.
_tld = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


def _path_ext(u: str) -> str:
    try:
        p = urlparse(u)
        # strip query/fragment; use os.path splitext on the path
        _, ext = os.path.splitext(p.path.lower())
        return ext
    except ValueError:
        return ""


def _netloc(u: str) -> str:
    try:
        return (urlparse(u).hostname or "").lower()
    except ValueError:
        return ""


def registrable_name(host: str) -> str:
    """
    The name part of a host's registrable domain, without the public suffix:
    'www.google.co.uk' -> 'google', 'lh3.googleusercontent.com' -> 'googleusercontent'.
    """
    return _tld(host).domain.lower()


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """True if host equals one of `domains` or is a subdomain of one."""
    host = host.lower()
    for d in domains:
        d = d.lower()
        if host == d or host.endswith("." + d):
            return True
    return False


def is_valid_url(u: str) -> bool:
    """A well-formed http/https URL with a host and no control characters."""
    if not u or not u.strip():
        return False
    u = u.strip()
    # urlparse silently drops tabs and newlines; httpx refuses them
    if _CONTROL_CHAR_RE.search(u):
        return False
    try:
        p = urlparse(u)
    except ValueError:
        return False
    return p.scheme.lower() in ALLOWED_SCHEMES and bool(p.netloc)


def is_direct_image_url(u: str) -> bool:
    """The URL's path ends in a raster image extension."""
    return _path_ext(u) in DIRECT_IMAGE_EXTENSIONS


def is_search_image_redirect(u: str) -> bool:
    try:
        p = urlparse(u)
    except ValueError:
        return False
    host = (p.hostname or "").lower()
    if not host or registrable_name(host) != SEARCH_ENGINE_DOMAIN:
        return False
    params = parse_qs(p.query)
    if "imgurl" in params or params.get("tbm") == ["isch"]:
        return True
    path = p.path.rstrip("/")
    return path in ("/imgres", "/images")


def is_photo_share_link(u: str) -> bool:
    return host_matches(_netloc(u), PHOTO_SHARE_HOSTS)


def classify_url(u: str) -> UrlKind:
    """
    Decide which extraction path a request takes. Checks run in priority order,
    so an image-looking path always wins over host patterns.
    """
    if is_direct_image_url(u):
        kind: UrlKind = "direct-image"
    elif is_search_image_redirect(u):
        kind = "search-image-redirect"
    elif is_photo_share_link(u):
        kind = "photo-share-link"
    else:
        kind = "generic-page"
    log.debug("Classified %s as %s", u, kind)
    return kind


def resolve_url(base_url: str, candidate: str) -> str:
    """
    Turn a possibly-relative image source into an absolute URL.

    Relative sources are always rooted at the domain of `base_url`, never at the
    base page's directory: 'a/b.jpg' on 'https://x.org/blog/post' becomes
    'https://x.org/a/b.jpg'.
    """
    if _SCHEME_RE.match(candidate):
        return candidate
    base = urlparse(base_url)
    if candidate.startswith("//"):
        return f"{base.scheme}:{candidate}"
    path = candidate if candidate.startswith("/") else f"/{candidate}"
    return f"{base.scheme}://{base.netloc}{path}"


def is_likely_image(u: str) -> bool:
    lowered = u.lower()
    return any(ext in lowered for ext in LIKELY_IMAGE_EXTENSIONS) or any(
        kw in u for kw in LIKELY_IMAGE_KEYWORDS
    )


def rewrite_size_token(u: str, size: int) -> str:
    """Ask a photo CDN for a large rendition: '=w200-h200' / '=s96' -> '=s<size>'."""
    target = f"=s{size}"
    return _SIZE_TOKEN_RE.sub(target, _WIDTH_HEIGHT_TOKEN_RE.sub(target, u))


def referer_for(image_url: str) -> str:
    """A referer that claims we came from the image's own site."""
    return f"https://{_netloc(image_url)}/"
