# Defines the data structures passed between the pipeline stages.

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Literal

from PIL import Image

# Type definitions for clarity.
UrlKind = Literal[
    "direct-image", "search-image-redirect", "photo-share-link", "generic-page"
]
FailureReason = Literal[
    "invalid-input", "no-image-found", "forbidden", "fetch-failed", "decode-failed"
]
TierName = Literal["full-headers", "minimal-headers", "bare"]


@dataclass
class ImageCandidate:
    """An embedded <img> under consideration, before the best one is chosen."""

    src: str
    url: str
    width: int = 0
    height: int = 0
    alt: str = ""
    css_class: str = ""


@dataclass(frozen=True)
class ResolvedImageUrl:
    """The single absolute image URL the pipeline committed to downloading."""

    url: str
    kind: UrlKind
    strategy: str


@dataclass
class StrategyResult:
    """
    What one extraction strategy produced: a URL, or the reason it has none.
    Strategies never raise for network or parsing problems; they return this.
    """

    strategy: str
    url: str | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.url)


@dataclass
class FetchedImage:
    """Raw bytes of a downloaded image, plus what decoding told us about it."""

    data: bytes
    content_type: str
    width: int
    height: int
    format: str
    url: str
    tier: TierName

    def to_png(self) -> bytes:
        """Re-encode the decoded pixels as PNG, for hosts that want raw pixels."""
        with Image.open(io.BytesIO(self.data)) as img:
            out = io.BytesIO()
            img.save(out, format="PNG")
            return out.getvalue()


@dataclass
class FetchOutcome:
    """
    Terminal value of the pipeline: exactly one of `image` or `failure` is set.
    """

    image: FetchedImage | None = None
    failure: FailureReason | None = None
    detail: str = ""
    resolved: ResolvedImageUrl | None = None
    attempts: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.image is not None
