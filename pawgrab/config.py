"""Configuration for the downloaders, built once at the CLI entry point."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError
from .models import ArchiveFormat
from .utils import folder_name

POSTS_PER_PAGE = 75
MAX_WORKERS = 10


@dataclass(frozen=True)
class E621Config:
    """e621 search API settings."""
    api_base: str = "https://e621.net"
    user_agent: str = "bluepaw/1.0 (gmblahaj)"
    timeout: float = 30.0


@dataclass(frozen=True)
class DownloadConfig:
    workers: int = MAX_WORKERS
    chunk_size: int = 64 * 1024
    timeout: float = 60.0
    user_agent: str = "pawgrab/1.0"


@dataclass(frozen=True)
class FetchRequest:
    tag_query: str
    block_list: frozenset[str] = frozenset()
    target_count: int = 100
    page_size: int = POSTS_PER_PAGE

    @classmethod
    def from_cli(cls, tag: str, block: str | None, limit: int) -> FetchRequest:
        if limit < 0:
            raise ConfigError(f"--limit must be zero or positive, got {limit}")
        blocked = {t.strip() for t in (block or "").split(",")}
        blocked.discard("")
        blocked.discard("none")
        return cls(tag_query=tag, block_list=frozenset(blocked), target_count=limit)


@dataclass(frozen=True)
class BluepawConfig:
    request: FetchRequest
    e621: E621Config = field(default_factory=E621Config)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    output_root: Path = Path(".")
    debug: bool = False

    @property
    def output_dir(self) -> Path:
        return self.output_root / folder_name(self.request.tag_query)


@dataclass(frozen=True)
class YiffgrabConfig:
    name: str
    format: ArchiveFormat = ArchiveFormat.PDF
    zipped: bool = False
    site_base: str = "https://yiffer.xyz"
    output_root: Path = Path(".")
    creator: str = "yiffgrab"
    download: DownloadConfig = field(default_factory=DownloadConfig)
    debug: bool = False

    @property
    def comic_url(self) -> str:
        return f"{self.site_base}/c/{self.name}"

    @property
    def work_dir(self) -> Path:
        return self.output_root / self.name
