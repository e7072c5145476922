from __future__ import annotations

import zipfile
from datetime import datetime

import pytest
from PIL import Image, PdfParser

from pawgrab.archive import ArchiveAssembler, a4_pixels, build_pdf, page_image, zip_directory
from pawgrab.errors import ConfigError, StructureError
from pawgrab.models import ArchiveFormat, ComicMetadata, ImagePage

from tests.helpers import png_bytes


@pytest.fixture
def work_dir(tmp_path):
    """Five scraped pages where page 3 failed to download."""
    d = tmp_path / "Forest"
    d.mkdir()
    for i, color in [(1, "red"), (2, "green"), (4, "blue"), (5, "white")]:
        (d / f"page_{i:04d}.png").write_bytes(png_bytes(color))
    return d


def _pages(work_dir):
    return [ImagePage(i, f"https://x/{i}.png", work_dir / f"page_{i:04d}.png") for i in (1, 2, 4, 5)]


META = ComicMetadata(title="Forest Friends", author="Some Artist", tags=["wolf", "fox"], published=datetime(2024, 1, 2))


def test_cbz_contains_downloaded_pages_with_gap(tmp_path, work_dir) -> None:
    out = tmp_path / "Forest_Forest_Friends.cbz"
    artifact = ArchiveAssembler("cbz").assemble(_pages(work_dir), work_dir, out, META)

    assert artifact.format is ArchiveFormat.CBZ
    assert artifact.path == out
    with zipfile.ZipFile(out) as zf:
        assert zf.namelist() == ["page_0001.png", "page_0002.png", "page_0004.png", "page_0005.png"]
        assert zf.read("page_0004.png") == (work_dir / "page_0004.png").read_bytes()


def test_pdf_has_one_page_per_image_and_metadata(tmp_path, work_dir) -> None:
    out = tmp_path / "Forest_Forest_Friends.pdf"
    ArchiveAssembler("pdf", creator="yiffgrab").assemble(_pages(work_dir), work_dir, out, META)

    pdf = PdfParser.PdfParser(str(out))
    try:
        assert len(pdf.pages) == 4
        assert pdf.info.Title == "Forest Friends"
        assert pdf.info.Author == "Some Artist"
        assert pdf.info.Creator == "yiffgrab"
        assert pdf.info.Keywords == "wolf, fox"
    finally:
        pdf.close()


def test_pdf_without_pages_is_refused(tmp_path) -> None:
    with pytest.raises(StructureError):
        build_pdf([], tmp_path / "empty.pdf", META, "yiffgrab")


def test_page_image_is_stretched_to_a4_and_flattened(tmp_path) -> None:
    src = tmp_path / "alpha.png"
    src.write_bytes(png_bytes((0, 0, 0, 0), size=(30, 10), mode="RGBA"))

    img = page_image(src, a4_pixels(72))

    assert img.size == (595, 842)
    assert img.mode == "RGB"
    assert img.getpixel((10, 10)) == (255, 255, 255)


def test_zip_directory_packs_flat_sorted(tmp_path, work_dir) -> None:
    out = zip_directory(work_dir, tmp_path / "Forest.zip")

    with zipfile.ZipFile(out) as zf:
        assert zf.namelist() == sorted(p.name for p in work_dir.iterdir())
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())


@pytest.mark.parametrize("fmt", ["epub", "zip"])
def test_unsupported_format_is_a_config_error(fmt) -> None:
    with pytest.raises(ConfigError):
        ArchiveAssembler(fmt)


def test_format_parse_is_case_insensitive() -> None:
    assert ArchiveFormat.parse("CBZ") is ArchiveFormat.CBZ
    assert ArchiveFormat.parse(ArchiveFormat.PDF) is ArchiveFormat.PDF


def test_pdf_pages_are_written_one_at_a_time(tmp_path, work_dir, monkeypatch) -> None:
    calls = []
    real_save = Image.Image.save

    def recording_save(self, fp, format=None, **params):
        calls.append((params.get("append", False), "append_images" in params, self.size))
        return real_save(self, fp, format, **params)

    monkeypatch.setattr(Image.Image, "save", recording_save)
    out = tmp_path / "Forest.pdf"

    build_pdf([p.local_path for p in _pages(work_dir)], out, META, "yiffgrab")

    size = a4_pixels()
    assert calls == [(False, False, size)] + [(True, False, size)] * 3
    pdf = PdfParser.PdfParser(str(out))
    try:
        assert len(pdf.pages) == 4
        assert pdf.info.Title == "Forest Friends"
    finally:
        pdf.close()


def test_unreadable_page_is_named_and_partial_pdf_removed(tmp_path, work_dir) -> None:
    (work_dir / "page_0004.png").write_bytes(b"<html>not found</html>")
    out = tmp_path / "Forest.pdf"

    with pytest.raises(StructureError, match="page_0004.png"):
        ArchiveAssembler("pdf").assemble(_pages(work_dir), work_dir, out, META)
    assert not out.exists()
