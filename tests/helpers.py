"""Fake e621 / comic servers behind httpx.MockTransport."""

from __future__ import annotations

import io
import threading
from typing import Callable

import httpx
from PIL import Image


def make_post(post_id: int, general: list[str] | None = None, url: str | None = "default") -> dict:
    if url == "default":
        url = f"https://static1.e621.net/data/ab/cd/{post_id}.png?download=1"
    return {
        "id": post_id,
        "tags": {"general": general or ["solo"], "species": ["wolf"]},
        "file": {"url": url, "ext": "png"},
    }


def png_bytes(color: str | tuple[int, ...] = "red", size: tuple[int, int] = (40, 60), mode: str = "RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class FakeE621:
    """Serves ``pages`` (list of post-dict lists) from /posts.json, empty afterwards."""

    def __init__(self, pages: list[list[dict]]) -> None:
        self.pages = pages
        self.requested: list[int] = []
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        with self._lock:
            self.requested.append(page)
        posts = self.pages[page - 1] if page <= len(self.pages) else []
        return httpx.Response(200, json={"posts": posts})

