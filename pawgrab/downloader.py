"""File downloads – a bounded worker pool for posts, a sequential loop for comic pages."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, Sequence

import httpx
from rich.progress import Progress

from .config import DownloadConfig
from .errors import FilesystemError, NetworkError
from .models import DownloadReport, ImagePage, PostRecord
from .utils import url_extension

logger = logging.getLogger("pawgrab.downloader")


def stream_to_file(client: httpx.Client, url: str, path: Path, chunk_size: int = 64 * 1024) -> Path:
    """Stream ``url`` into ``path``.

    The partial file is removed if anything goes wrong, so a failed download
    never leaves a truncated file behind.
    """
    try:
        try:
            with client.stream("GET", url) as resp:
                resp.raise_for_status()
                with open(path, "wb") as fh:
                    for chunk in resp.iter_bytes(chunk_size):
                        fh.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
    except httpx.HTTPStatusError as exc:
        raise NetworkError(f"{url} returned HTTP {exc.response.status_code}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"Request to {url} failed: {exc}") from exc
    except OSError as exc:
        raise FilesystemError(f"Could not write {path}: {exc}") from exc
    return path


class _Downloader:
    def __init__(self, cfg: DownloadConfig | None = None, client: httpx.Client | None = None) -> None:
        self.cfg = cfg or DownloadConfig()
        self._client = client or httpx.Client(
            timeout=self.cfg.timeout,
            headers={"User-Agent": self.cfg.user_agent},
            follow_redirects=True,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> _Downloader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class DownloadPool(_Downloader):
    """Download post files with at most ``cfg.workers`` requests in flight.

    Every post is queued up front; a worker picks up the next one as soon as
    it finishes its current download.  One failure never cancels the others.
    """

    def _fetch(self, post: PostRecord, output_dir: Path) -> Path | None:
        if not post.file_url:
            logger.debug("No file URL for post %d", post.id)
            return None
        path = output_dir / f"{post.id}{url_extension(post.file_url)}"
        logger.debug("Downloading %s to %s", post.file_url, path)
        return stream_to_file(self._client, post.file_url, path, self.cfg.chunk_size)

    def download(
        self,
        posts: Sequence[PostRecord],
        output_dir: Path,
        progress: Progress | None = None,
    ) -> DownloadReport:
        report = DownloadReport()
        task = progress.add_task("Downloading", total=len(posts)) if progress else None

        with ThreadPoolExecutor(max_workers=self.cfg.workers, thread_name_prefix="pawgrab-dl") as pool:
            futures = {pool.submit(self._fetch, post, output_dir): post for post in posts}
            for future in as_completed(futures):
                post = futures[future]
                try:
                    path = future.result()
                except Exception as exc:
                    logger.error("Failed to download post %d: %s", post.id, exc)
                    report.failed.append(post.id)
                else:
                    if path is None:
                        report.skipped.append(post.id)
                    else:
                        report.downloaded.append(path)
                if progress is not None and task is not None:
                    progress.advance(task)

        logger.info(
            "Downloads finished: %d saved, %d skipped, %d failed",
            len(report.downloaded), len(report.skipped), len(report.failed),
        )
        return report


class SequentialDownloader(_Downloader):
    """Download comic pages one at a time, in reading order."""

    def download(
        self,
        pages: Iterable[ImagePage],
        work_dir: Path,
        progress: Progress | None = None,
    ) -> list[ImagePage]:
        pages = list(pages)
        saved: list[ImagePage] = []
        task = progress.add_task("Pages", total=len(pages)) if progress else None

        for page in pages:
            path = work_dir / f"page_{page.index:04d}{url_extension(page.source_url, '.jpg')}"
            try:
                stream_to_file(self._client, page.source_url, path, self.cfg.chunk_size)
            except (NetworkError, FilesystemError) as exc:
                logger.warning("Failed to download page %d (%s): %s", page.index, page.source_url, exc)
            else:
                page.local_path = path
                saved.append(page)
            if progress is not None and task is not None:
                progress.advance(task)

        return saved
