"""e621 API client – paginated post search."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import POSTS_PER_PAGE, E621Config
from .errors import NetworkError
from .models import PostRecord

logger = logging.getLogger("pawgrab.api")


class E621API:
    """Thin wrapper around the e621 posts.json search endpoint."""

    def __init__(self, cfg: E621Config | None = None, client: httpx.Client | None = None) -> None:
        self.cfg = cfg or E621Config()
        self._client = client or httpx.Client(
            timeout=self.cfg.timeout,
            follow_redirects=True,
        )
        self._client.headers["User-Agent"] = self.cfg.user_agent

    def _get_json(self, url: httpx.URL) -> Any:
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(f"{url} returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise NetworkError(f"{url} did not return valid JSON") from exc

    # ── public API ───────────────────────────────────────────────

    def posts_url(self, tags: str, page: int, limit: int = POSTS_PER_PAGE) -> httpx.URL:
        return httpx.URL(
            f"{self.cfg.api_base}/posts.json",
            params={"tags": tags, "limit": limit, "page": page},
        )

    def get_posts(self, tags: str, page: int = 1, limit: int = POSTS_PER_PAGE) -> list[PostRecord]:
        """Fetch one page of search results.  An empty list means no more pages."""
        url = self.posts_url(tags, page, limit)
        logger.debug("Fetching page %d: %s", page, url)
        data = self._get_json(url)
        posts = data.get("posts", []) if isinstance(data, dict) else []
        return [PostRecord.from_api(p) for p in posts]

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> E621API:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
