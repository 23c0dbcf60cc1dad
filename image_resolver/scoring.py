# Scores the <img> elements of a page to pick the one most likely to be its main image.

from __future__ import annotations

import logging
from typing import Iterable

from bs4 import BeautifulSoup, Tag

from image_resolver.models import ImageCandidate
from image_resolver.url_logic import is_likely_image, resolve_url

log = logging.getLogger(__name__)

FEATURED_ALT_KEYWORDS = ("main", "hero", "featured", "primary", "banner")
FEATURED_CLASS_KEYWORDS = ("main", "hero", "featured", "primary", "banner", "thumb")
DECORATIVE_KEYWORDS = ("icon", "logo", "avatar")
RASTER_HINTS = (".jpg", ".jpeg", ".png", ".webp")
MIN_DIMENSION = 50


def _dimension(tag: Tag, attr: str) -> int:
    """Declared width/height as an int; anything unparseable ('100%', '') counts as 0."""
    try:
        return int(str(tag.get(attr, "")).strip())
    except ValueError:
        return 0


def _class_string(tag: Tag) -> str:
    cls = tag.get("class", "")
    if isinstance(cls, list):
        cls = " ".join(cls)
    return str(cls).lower()


def _usable_src(src: str) -> bool:
    return bool(src) and not src.startswith("data:")


def extract_candidates(soup: BeautifulSoup, base_url: str) -> list[ImageCandidate]:
    """Every <img> with a real (non-empty, non-inline) source, in document order."""
    candidates: list[ImageCandidate] = []
    for tag in soup.select("img[src]"):
        src = str(tag.get("src", ""))
        if not _usable_src(src):
            continue
        candidates.append(
            ImageCandidate(
                src=src,
                url=resolve_url(base_url, src),
                width=_dimension(tag, "width"),
                height=_dimension(tag, "height"),
                alt=str(tag.get("alt", "")).lower(),
                css_class=_class_string(tag),
            )
        )
    return candidates


def score_candidate(candidate: ImageCandidate) -> int:
    """
    Desirability of one candidate:

        (width + height) // 10
        + 100 if alt names featured content
        +  50 if class names featured content
        -  50 if alt, class or source look decorative (icon, logo, avatar)
        +  20 if the source has a common raster extension
        - 100 if both dimensions are declared and either is under 50px
    """
    alt = candidate.alt.lower()
    classes = candidate.css_class.lower()
    src = candidate.src.lower()

    score = (candidate.width + candidate.height) // 10

    if any(k in alt for k in FEATURED_ALT_KEYWORDS):
        score += 100
    if any(k in classes for k in FEATURED_CLASS_KEYWORDS):
        score += 50
    if any(k in text for text in (alt, classes, src) for k in DECORATIVE_KEYWORDS):
        score -= 50
    if any(ext in src for ext in RASTER_HINTS):
        score += 20
    if (
        candidate.width > 0
        and candidate.height > 0
        and (candidate.width < MIN_DIMENSION or candidate.height < MIN_DIMENSION)
    ):
        score -= 100
    return score


def choose_best_image(candidates: Iterable[ImageCandidate]) -> str | None:
    """
    Returns the URL of the highest-scoring candidate. Only scores above zero
    count, and the first candidate wins a tie. When nothing scores, falls back
    to the first candidate whose URL merely looks like an image.
    """
    candidates = list(candidates)
    best: ImageCandidate | None = None
    best_score = 0
    for c in candidates:
        score = score_candidate(c)
        log.debug("Scored %s: %d", c.url, score)
        if score > best_score:
            best_score = score
            best = c

    if best is not None:
        log.info("Best scored image (%d): %s", best_score, best.url)
        return best.url

    for c in candidates:
        if is_likely_image(c.url):
            log.info("No image scored above zero; using first likely image: %s", c.url)
            return c.url

    return None
