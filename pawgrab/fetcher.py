"""Tag search pipeline – fetch pages → filter → accumulate → download."""

from __future__ import annotations

import logging
import math
from typing import Iterable

from rich.console import Console
from rich.progress import Progress

from .api import E621API
from .config import BluepawConfig, FetchRequest
from .downloader import DownloadPool
from .errors import FilesystemError
from .models import DownloadReport, PostRecord
from .utils import make_progress

logger = logging.getLogger("pawgrab.fetcher")


def filter_posts(posts: Iterable[PostRecord], block_list: Iterable[str]) -> list[PostRecord]:
    """Drop every post whose general tags include a blocked tag.  Order is kept."""
    blocked = frozenset(block_list)
    kept = []
    for post in posts:
        if blocked and not blocked.isdisjoint(post.general_tags):
            logger.debug("Filtered out post %d due to block tags", post.id)
            continue
        kept.append(post)
    return kept


class PostFetcher:
    """Runs the whole search-and-download job for one tag query."""

    def __init__(
        self,
        cfg: BluepawConfig,
        api: E621API | None = None,
        pool: DownloadPool | None = None,
        console: Console | None = None,
    ) -> None:
        self.cfg = cfg
        self.api = api or E621API(cfg.e621)
        self.pool = pool or DownloadPool(cfg.download)
        self.console = console or Console()
        self.stats = {"pages": 0, "posts": 0, "blocked": 0, "downloaded": 0, "skipped": 0, "failed": 0}

    # ── accumulation ─────────────────────────────────────────────

    def accumulate(self, request: FetchRequest, progress: Progress | None = None) -> list[PostRecord]:
        """Collect filtered posts page by page until the target is reached.

        Only an empty page ends the search early; a page that filtering
        shrinks below the page size is not treated as the last one.
        """
        collected: list[PostRecord] = []
        task = None
        if progress is not None:
            task = progress.add_task("Fetching posts", total=math.ceil(request.target_count / request.page_size))

        page = 1
        while len(collected) < request.target_count:
            posts = self.api.get_posts(request.tag_query, page, request.page_size)
            self.stats["pages"] += 1
            if not posts:
                logger.debug("Page %d is empty, search exhausted", page)
                break
            kept = filter_posts(posts, request.block_list)
            self.stats["blocked"] += len(posts) - len(kept)
            collected.extend(kept)
            if progress is not None and task is not None:
                progress.advance(task)
            page += 1

        return collected[: request.target_count]

    # ── full run ─────────────────────────────────────────────────

    def run(self) -> DownloadReport:
        request = self.cfg.request
        self.console.print("Fetching posts from e621...")
        with make_progress(self.console) as progress:
            posts = self.accumulate(request, progress)
        self.stats["posts"] = len(posts)
        self.console.print(f"Found {len(posts)} posts.")

        output_dir = self.cfg.output_dir
        if not output_dir.exists():
            logger.debug("Creating output directory: %s", output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Could not create output directory {output_dir}: {exc}") from exc

        with make_progress(self.console) as progress:
            report = self.pool.download(posts, output_dir, progress)

        self.stats["downloaded"] = len(report.downloaded)
        self.stats["skipped"] = len(report.skipped)
        self.stats["failed"] = len(report.failed)
        self.console.print(f"Download complete. Files saved to: {output_dir.resolve()}")
        return report

    # ── lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        self.api.close()
        self.pool.close()

    def __enter__(self) -> PostFetcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
