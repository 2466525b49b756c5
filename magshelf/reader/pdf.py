# magshelf/reader/pdf.py
"""PyMuPDF glue: page counts, page images and generated covers."""

import io
import logging
from pathlib import Path

import fitz  # PyMuPDF
from PIL import Image

logger = logging.getLogger(__name__)

MAX_RENDER_HEIGHT = 2000
COVER_JPEG_QUALITY = 80


class PdfError(Exception):
    """The file is missing, unreadable or the page does not exist."""


def _open(path: Path) -> "fitz.Document":
    try:
        return fitz.open(str(path))
    except (OSError, RuntimeError, ValueError) as exc:
        raise PdfError(f"Cannot open {path}: {exc}") from exc


def _to_image(pix) -> Image.Image:
    return Image.frombytes("RGB", [pix.width, pix.height], pix.samples)


class PdfDocument:
    """An open PDF; use as a context manager so the file handle is released."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._doc = _open(self.path)

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._doc.close()

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def render_page(self, page_number: int, height: int) -> bytes:
        """PNG of 1-based ``page_number`` scaled to ``height`` pixels."""
        if page_number < 1 or page_number > self._doc.page_count:
            raise PdfError(f"{self.path.name} has no page {page_number}")
        height = max(1, min(int(height), MAX_RENDER_HEIGHT))
        try:
            page = self._doc.load_page(page_number - 1)
            zoom = height / page.rect.height
            pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        except (RuntimeError, ValueError, ZeroDivisionError) as exc:
            raise PdfError(f"Cannot render page {page_number}: {exc}") from exc
        buf = io.BytesIO()
        _to_image(pix).save(buf, format="PNG")
        return buf.getvalue()

    def render_cover(self, quality: int = COVER_JPEG_QUALITY) -> bytes:
        """JPEG of page 1 at its natural size, used as a stand-in thumbnail."""
        if self._doc.page_count < 1:
            raise PdfError(f"{self.path.name} has no pages")
        pix = self._doc.load_page(0).get_pixmap(matrix=fitz.Matrix(1, 1), alpha=False)
        buf = io.BytesIO()
        _to_image(pix).save(buf, format="JPEG", quality=quality)
        return buf.getvalue()


def count_pages(path: Path) -> int:
    with PdfDocument(path) as doc:
        return doc.page_count


def render_page(path: Path, page_number: int, height: int) -> bytes:
    with PdfDocument(path) as doc:
        return doc.render_page(page_number, height)


def render_cover(path: Path) -> bytes:
    with PdfDocument(path) as doc:
        return doc.render_cover()
