# Entrypoint for the image_resolver package.
# This file makes the public API available to programmers.

from __future__ import annotations

from image_resolver.__about__ import __version__
from image_resolver.api import fetch_best_image, resolve_image_url
from image_resolver.fetcher import fetch_image
from image_resolver.models import (
    FetchedImage,
    FetchOutcome,
    ImageCandidate,
    ResolvedImageUrl,
)
from image_resolver.url_logic import classify_url, resolve_url

# The __all__ variable defines the public API of the package.
# When a user writes `from image_resolver import *`, only these names will be imported.
__all__ = [
    "classify_url",
    "resolve_url",
    "resolve_image_url",
    "fetch_best_image",
    "fetch_image",
    "FetchedImage",
    "FetchOutcome",
    "ImageCandidate",
    "ResolvedImageUrl",
    "__version__",
]
