"""Records passed between pipeline stages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .errors import ConfigError


class ArchiveFormat(str, enum.Enum):
    PDF = "pdf"
    CBZ = "cbz"
    ZIP = "zip"

    @classmethod
    def parse(cls, value: str | ArchiveFormat) -> ArchiveFormat:
        try:
            return cls(str(getattr(value, "value", value)).lower())
        except ValueError:
            raise ConfigError(f'Unsupported format "{value}". Use "pdf" or "cbz".') from None

    @property
    def extension(self) -> str:
        return f".{self.value}"


@dataclass(frozen=True)
class PostRecord:
    """One post returned by the e621 search endpoint."""
    id: int
    general_tags: frozenset[str] = frozenset()
    file_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PostRecord:
        tags = data.get("tags") or {}
        file_info = data.get("file") or {}
        return cls(
            id=int(data["id"]),
            general_tags=frozenset(tags.get("general") or ()),
            file_url=file_info.get("url") or None,
        )


@dataclass
class ComicMetadata:
    title: str
    author: str
    published_text: str = ""
    tags: list[str] = field(default_factory=list)
    published: datetime | None = None


@dataclass
class ImagePage:
    """A comic page; ``index`` is 1-based reading order."""
    index: int
    source_url: str
    local_path: Path | None = None


@dataclass(frozen=True)
class OutputArtifact:
    format: ArchiveFormat
    path: Path


@dataclass
class DownloadReport:
    """Outcome of a bulk download – every input record lands in exactly one list."""
    downloaded: list[Path] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.downloaded) + len(self.skipped) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed
