"""Comic pipeline – scrape → download pages in order → assemble archive."""

from __future__ import annotations

import logging

from rich.console import Console

from .archive import ArchiveAssembler, zip_directory
from .config import YiffgrabConfig
from .downloader import SequentialDownloader
from .errors import FilesystemError, NetworkError
from .models import ArchiveFormat, OutputArtifact
from .scraper import ComicScraper
from .utils import make_progress, safe_title

logger = logging.getLogger("pawgrab.comic")


class ComicGrabber:
    """Downloads one comic and writes its archive(s) next to the page folder."""

    def __init__(
        self,
        cfg: YiffgrabConfig,
        scraper: ComicScraper | None = None,
        downloader: SequentialDownloader | None = None,
        console: Console | None = None,
    ) -> None:
        self.cfg = cfg
        # Validate the format before any network traffic.
        self.assembler = ArchiveAssembler(cfg.format, creator=cfg.creator)
        self.scraper = scraper or ComicScraper(cfg)
        self.downloader = downloader or SequentialDownloader(cfg.download)
        self.console = console or Console()
        self.stats = {"pages": 0, "downloaded": 0, "failed": 0}

    def run(self) -> list[OutputArtifact]:
        metadata, pages = self.scraper.scrape(self.cfg.comic_url)
        self.stats["pages"] = len(pages)
        if metadata.published is None:
            logger.warning(
                "Publish date unknown (%r), using the current time for the PDF creation date",
                metadata.published_text,
            )

        work_dir = self.cfg.work_dir
        try:
            work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Could not create {work_dir}: {exc}") from exc
        logger.debug("Output directory: %s", work_dir)

        self.console.print(f'Downloading "{metadata.title}" by {metadata.author} ({len(pages)} pages)...')
        with make_progress(self.console) as progress:
            saved = self.downloader.download(pages, work_dir, progress)
        self.stats["downloaded"] = len(saved)
        self.stats["failed"] = len(pages) - len(saved)
        if not saved:
            raise NetworkError(f"None of the {len(pages)} pages could be downloaded")

        stem = f"{self.cfg.name}_{safe_title(metadata.title)}"
        artifacts: list[OutputArtifact] = []

        fmt = self.assembler.format
        self.console.print(f"Creating {fmt.value.upper()}...")
        artifact = self.assembler.assemble(saved, work_dir, self.cfg.output_root / (stem + fmt.extension), metadata)
        self.console.print(f"{fmt.value.upper()} saved as {artifact.path}")
        artifacts.append(artifact)

        if self.cfg.zipped:
            self.console.print("Creating ZIP...")
            zip_path = self.cfg.output_root / (stem + ArchiveFormat.ZIP.extension)
            try:
                zip_directory(work_dir, zip_path)
            except OSError as exc:
                raise FilesystemError(f"Could not write {zip_path}: {exc}") from exc
            self.console.print(f"ZIP saved as {zip_path}")
            artifacts.append(OutputArtifact(ArchiveFormat.ZIP, zip_path))

        return artifacts

    def close(self) -> None:
        self.scraper.close()
        self.downloader.close()

    def __enter__(self) -> ComicGrabber:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
