"""Small naming and parsing helpers."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import PurePosixPath
from urllib.parse import urlparse

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

_UNSAFE_PATH_CHARS = re.compile(r'[<>:"/\\|?*]')
_DATE_FORMATS = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y-%m-%d",
    "%m/%d/%Y",
)


def folder_name(tags: str) -> str:
    """Turn a tag query into a directory name (max 50 chars)."""
    name = re.sub(r"\s+", "_", tags)
    name = _UNSAFE_PATH_CHARS.sub("", name)
    return name[:50]


def safe_title(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title)


def url_extension(url: str, default: str = "") -> str:
    """Extension of the URL path, ignoring any query string or fragment."""
    suffix = PurePosixPath(urlparse(url).path).suffix
    return suffix or default


def parse_published(text: str) -> datetime | None:
    """Parse a scraped publish date, or return None if it is not recognisable."""
    text = " ".join(text.split())
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def make_progress(console: Console | None = None) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    )
