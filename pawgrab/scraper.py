"""Comic page scraper – metadata and ordered page image URLs."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from .config import YiffgrabConfig
from .errors import NetworkError, StructureError
from .models import ComicMetadata, ImagePage
from .utils import parse_published

logger = logging.getLogger("pawgrab.scraper")

TITLE_SELECTOR = "h1"
AUTHOR_SELECTOR = 'a[href^="/artist/"]'
DATE_SELECTOR = "svg + p"
TAG_SELECTOR = '[role="button"] span'
PAGE_SELECTOR = "img.comicPage[src]"


def parse_comic(html: str, base_url: str) -> tuple[ComicMetadata, list[ImagePage]]:
    """Extract metadata and page images from a comic page's HTML.

    Raises StructureError when the page holds no comic images.
    """
    soup = BeautifulSoup(html, "html.parser")

    title_el = soup.select_one(TITLE_SELECTOR)
    author_el = soup.select_one(AUTHOR_SELECTOR)
    published_text = ""
    for p in soup.select(DATE_SELECTOR):
        text = p.get_text(" ", strip=True)
        if "Published" in text:
            published_text = text.replace("Published", "").strip()
            break
    tags = [el.get_text(strip=True) for el in soup.select(TAG_SELECTOR)]

    pages = [
        ImagePage(index=i, source_url=urljoin(base_url, img["src"]))
        for i, img in enumerate(soup.select(PAGE_SELECTOR), start=1)
    ]
    if not pages:
        raise StructureError("No comic pages found – possibly wrong name or structure changed.")

    metadata = ComicMetadata(
        title=title_el.get_text(strip=True) if title_el else "",
        author=author_el.get_text(strip=True) if author_el else "",
        published_text=published_text,
        tags=[t for t in tags if t],
        published=parse_published(published_text),
    )
    return metadata, pages


class ComicScraper:
    def __init__(self, cfg: YiffgrabConfig, client: httpx.Client | None = None) -> None:
        self.cfg = cfg
        self._client = client or httpx.Client(
            timeout=cfg.download.timeout,
            headers={"User-Agent": cfg.download.user_agent},
            follow_redirects=True,
        )

    def fetch(self, url: str) -> str:
        logger.debug("Fetching comic page: %s", url)
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(f"{url} returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        return resp.text

    def scrape(self, url: str | None = None) -> tuple[ComicMetadata, list[ImagePage]]:
        url = url or self.cfg.comic_url
        metadata, pages = parse_comic(self.fetch(url), url)
        logger.debug("Scraped %r by %r: %d pages, tags=%s", metadata.title, metadata.author, len(pages), metadata.tags)
        return metadata, pages

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ComicScraper:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
