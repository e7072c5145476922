"""Archive builders – PDF and CBZ from downloaded pages, plain ZIP of the page folder."""

from __future__ import annotations

import logging
import time
import zipfile
from pathlib import Path
from typing import Sequence

from PIL import Image

from .errors import ConfigError, FilesystemError, StructureError
from .models import ArchiveFormat, ComicMetadata, ImagePage, OutputArtifact

logger = logging.getLogger("pawgrab.archive")

A4_MM = (210.0, 297.0)
PDF_DPI = 150


def a4_pixels(dpi: int = PDF_DPI) -> tuple[int, int]:
    """Pixel size of an A4 page at ``dpi``."""
    return round(A4_MM[0] / 25.4 * dpi), round(A4_MM[1] / 25.4 * dpi)


def page_image(path: Path, size: tuple[int, int]) -> Image.Image:
    """Load a page, flatten transparency onto white, and stretch it to ``size``.

    Raises StructureError naming the page when the file is not a readable image.
    """
    try:
        with Image.open(path) as img:
            if img.mode in ("RGBA", "LA", "P"):
                rgba = img.convert("RGBA")
                flat = Image.new("RGB", rgba.size, (255, 255, 255))
                flat.paste(rgba, mask=rgba.split()[3])
            else:
                flat = img.convert("RGB")
    except OSError as exc:
        raise StructureError(f"Page {path.name} is not a readable image: {exc}") from exc
    return flat.resize(size, Image.Resampling.LANCZOS)


def build_pdf(
    image_paths: Sequence[Path],
    out_path: Path,
    metadata: ComicMetadata,
    creator: str,
    dpi: int = PDF_DPI,
) -> Path:
    """Render one full A4 page per image, in the order given.

    Pages are written one at a time: the first save creates the document and
    its info dictionary, every later page is appended to it.  A failure
    removes the half-written file.
    """
    if not image_paths:
        raise StructureError("No pages to put in the PDF")
    size = a4_pixels(dpi)
    created = metadata.published.timetuple() if metadata.published else time.gmtime()

    try:
        for i, path in enumerate(image_paths):
            page = page_image(path, size)
            if i == 0:
                page.save(
                    out_path,
                    "PDF",
                    resolution=float(dpi),
                    title=metadata.title,
                    author=metadata.author,
                    keywords=", ".join(metadata.tags),
                    creator=creator,
                    creationDate=created,
                )
            else:
                page.save(out_path, "PDF", resolution=float(dpi), append=True)
            page.close()
    except BaseException:
        out_path.unlink(missing_ok=True)
        raise
    return out_path


def zip_directory(src_dir: Path, out_path: Path) -> Path:
    """Pack every file in ``src_dir`` (flat, sorted by name) into a zip archive."""
    files = sorted(p for p in src_dir.iterdir() if p.is_file())
    with zipfile.ZipFile(out_path, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for path in files:
            zf.write(path, arcname=path.name)
    logger.debug("Packed %d files from %s into %s", len(files), src_dir, out_path)
    return out_path


class ArchiveAssembler:
    """Builds the final comic file in one of the supported formats."""

    SUPPORTED = (ArchiveFormat.PDF, ArchiveFormat.CBZ)

    def __init__(self, fmt: str | ArchiveFormat, creator: str = "yiffgrab") -> None:
        self.format = ArchiveFormat.parse(fmt)
        if self.format not in self.SUPPORTED:
            raise ConfigError(f'Unsupported format "{self.format.value}". Use "pdf" or "cbz".')
        self.creator = creator

    def assemble(
        self,
        pages: Sequence[ImagePage],
        work_dir: Path,
        out_path: Path,
        metadata: ComicMetadata,
    ) -> OutputArtifact:
        try:
            if self.format is ArchiveFormat.PDF:
                paths = [p.local_path for p in pages if p.local_path is not None]
                build_pdf(paths, out_path, metadata, self.creator)
            else:
                if not any(p.is_file() for p in work_dir.iterdir()):
                    raise StructureError(f"No pages in {work_dir} to pack")
                zip_directory(work_dir, out_path)
        except OSError as exc:
            raise FilesystemError(f"Could not write {out_path}: {exc}") from exc
        return OutputArtifact(self.format, out_path)
