# test/test_url_logic.py
from __future__ import annotations

import pytest

from image_resolver.url_logic import (
    classify_url,
    host_matches,
    is_direct_image_url,
    is_likely_image,
    is_valid_url,
    referer_for,
    registrable_name,
    resolve_url,
    rewrite_size_token,
)


# ---------- classification ----------

@pytest.mark.parametrize(
    "url, kind",
    [
        ("https://example.com/cat.png", "direct-image"),
        ("https://example.com/photos/Cat.JPG", "direct-image"),
        ("https://example.com/a.webp?width=300", "direct-image"),
        ("https://cdn.example.com/pic.jpeg#top", "direct-image"),
        (
            "https://www.google.com/imgres?imgurl=https%3A%2F%2Fx.org%2Fa.jpg&imgrefurl=https%3A%2F%2Fx.org%2F",
            "search-image-redirect",
        ),
        ("https://www.google.co.uk/imgres?imgurl=https://x.org/a.jpg", "search-image-redirect"),
        ("https://www.google.com/search?tbm=isch&q=otters", "search-image-redirect"),
        ("https://images.google.com/images", "search-image-redirect"),
        ("https://photos.app.goo.gl/AbCdEf123", "photo-share-link"),
        ("https://photos.google.com/share/AF1Qip", "photo-share-link"),
        ("https://share.google/xyz", "photo-share-link"),
        ("https://www.google.com/search?q=otters", "generic-page"),
        ("https://example.com/blog/post", "generic-page"),
        ("https://notgoogle.example/imgres?imgurl=x", "generic-page"),
    ],
)
def test_classify_url(url, kind):
    assert classify_url(url) == kind


def test_extension_check_wins_over_host_patterns():
    # a photo-share host serving a path that is itself an image
    assert classify_url("https://photos.google.com/raw/pic.png") == "direct-image"


def test_extension_in_query_is_not_a_direct_image():
    assert is_direct_image_url("https://example.com/view?file=a.jpg") is False


def test_unparseable_url_is_a_generic_page():
    assert classify_url("http://[x") == "generic-page"


# ---------- validation ----------

@pytest.mark.parametrize(
    "u, ok",
    [
        ("https://example.com/x", True),
        ("http://example.com", True),
        ("  https://example.com/padded  ", True),
        ("ftp://example.com/file.png", False),
        ("example.com/page", False),
        ("https://", False),
        ("not a url", False),
        ("", False),
        ("   ", False),
        ("https://ex\tample.com/page", False),
        ("https://example.com/a\nb", False),
    ],
)
def test_is_valid_url(u, ok):
    assert is_valid_url(u) is ok


# ---------- resolve_url ----------

BASE = "https://site.example/blog/2024/post.html?ref=home"


@pytest.mark.parametrize(
    "candidate, expected",
    [
        ("https://cdn.example/a.jpg", "https://cdn.example/a.jpg"),
        ("http://cdn.example/a.jpg", "http://cdn.example/a.jpg"),
        ("/img/a.jpg", "https://site.example/img/a.jpg"),
        # rooted at the domain, not at /blog/2024/
        ("img/a.jpg", "https://site.example/img/a.jpg"),
        ("/img/a.jpg?w=800&h=600", "https://site.example/img/a.jpg?w=800&h=600"),
        ("//cdn.example/b.png", "https://cdn.example/b.png"),
    ],
)
def test_resolve_url(candidate, expected):
    assert resolve_url(BASE, candidate) == expected


def test_resolve_url_keeps_port_of_base():
    assert resolve_url("http://localhost:8000/p/q", "a.png") == "http://localhost:8000/a.png"


@pytest.mark.parametrize(
    "candidate",
    ["/img/a.jpg", "img/a.jpg", "https://other.example/x.png", "//cdn.example/b.png"],
)
def test_resolve_url_is_idempotent(candidate):
    once = resolve_url(BASE, candidate)
    assert resolve_url(BASE, once) == once


# ---------- size token rewrite ----------

@pytest.mark.parametrize(
    "url, expected",
    [
        (
            "https://lh3.googleusercontent.com/pw/AbC=w200-h200",
            "https://lh3.googleusercontent.com/pw/AbC=s2048",
        ),
        (
            "https://lh3.googleusercontent.com/pw/AbC=s96",
            "https://lh3.googleusercontent.com/pw/AbC=s2048",
        ),
        (
            "https://lh3.googleusercontent.com/pw/AbC=w640-h480-no",
            "https://lh3.googleusercontent.com/pw/AbC=s2048-no",
        ),
        (
            "https://lh3.googleusercontent.com/pw/AbC",
            "https://lh3.googleusercontent.com/pw/AbC",
        ),
    ],
)
def test_rewrite_size_token(url, expected):
    assert rewrite_size_token(url, 2048) == expected


def test_rewrite_size_token_uses_given_size():
    assert rewrite_size_token("https://x.ggpht.com/a=s64", 4096) == "https://x.ggpht.com/a=s4096"


# ---------- small helpers ----------

def test_host_matches_exact_and_subdomains_only():
    assert host_matches("i.imgur.com", ["imgur.com"])
    assert host_matches("imgur.com", ["imgur.com"])
    assert not host_matches("notimgur.com", ["imgur.com"])


def test_registrable_name_ignores_country_suffixes():
    assert registrable_name("www.google.co.uk") == "google"
    assert registrable_name("encrypted-tbn0.gstatic.com") == "gstatic"


@pytest.mark.parametrize(
    "u, ok",
    [
        ("https://x.org/a.gif", True),
        ("https://x.org/logo.SVG", True),
        ("https://x.org/media/image/123", True),
        ("https://x.org/photo?id=1", True),
        ("https://x.org/track?id=1", False),
    ],
)
def test_is_likely_image(u, ok):
    assert is_likely_image(u) is ok


def test_referer_is_image_host_root():
    assert referer_for("https://img.example.com:8443/a/b.jpg?x=1") == "https://img.example.com/"
