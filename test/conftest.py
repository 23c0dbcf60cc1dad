from __future__ import annotations

import copy
import io
from typing import Callable, Dict, List

import httpx
import pytest
from PIL import Image

from image_resolver.config import DEFAULT_CONFIG


def make_image_bytes(width: int = 64, height: int = 48, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


class FakeWeb:
    """
    In-memory web for httpx.MockTransport. Routes map an exact URL to a
    callable(request) -> httpx.Response. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def html(self, url: str, body: str, status: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(
            status, text=body, headers={"content-type": "text/html; charset=utf-8"}
        )

    def image(self, url: str, data: bytes, content_type: str = "image/png") -> None:
        self.routes[url] = lambda request: httpx.Response(
            200, content=data, headers={"content-type": content_type}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]


def _no_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected network access: {request.url}")


@pytest.fixture
def config():
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def offline():
    """A transport that fails the test if anything is requested."""
    return httpx.MockTransport(_no_network)


@pytest.fixture
def png_bytes():
    return make_image_bytes()
