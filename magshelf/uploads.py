# magshelf/uploads.py
"""Asset directory for uploaded PDFs and cover thumbnails.

Files arrive under a temporary name (``temp-<millis>-<random>-<original name>``) and
are renamed to ``<id>.pdf`` / ``<id>.jpg`` once the owning record's id is
known. Removal is best-effort: failures are logged, never raised.
"""

import logging
import os
import secrets
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
PDF_SUFFIX = ".pdf"
THUMBNAIL_SUFFIX = ".jpg"
# Bytes of the original name kept in a temp name; filesystems cap names at 255.
MAX_STAGED_NAME = 100


class AssetDirectory:
    """Owns every binary asset of the catalog."""

    def __init__(self, root: Path, public_prefix: str = PUBLIC_PREFIX):
        self.root = Path(root)
        self.public_prefix = public_prefix.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    # -- derived paths -------------------------------------------------------

    def pdf_file(self, item_id: str) -> Path:
        return self.root / f"{item_id}{PDF_SUFFIX}"

    def thumbnail_file(self, item_id: str) -> Path:
        return self.root / f"{item_id}{THUMBNAIL_SUFFIX}"

    def pdf_url(self, item_id: str) -> str:
        return f"{self.public_prefix}/{item_id}{PDF_SUFFIX}"

    def thumbnail_url(self, item_id: str) -> Optional[str]:
        """Public URL of the cover, or ``None`` when none was uploaded."""
        if not self.thumbnail_file(item_id).exists():
            return None
        return f"{self.public_prefix}/{item_id}{THUMBNAIL_SUFFIX}"

    # -- staging -------------------------------------------------------------

    def _temp_path(self, name: Optional[str]) -> Path:
        safe = (name or "upload").replace("/", "_").replace("\\", "_")
        # Keep the tail (and so the extension) within filesystem name limits.
        while len(safe.encode("utf-8")) > MAX_STAGED_NAME:
            safe = safe[1:]
        # The random part keeps same-millisecond uploads of one file name apart.
        return self.root / f"temp-{int(time.time() * 1000)}-{secrets.token_hex(4)}-{safe}"

    def stage(self, source: BinaryIO, filename: Optional[str] = None) -> Path:
        """Copy an incoming upload stream to a temporary file and return it."""
        path = self._temp_path(filename)
        with path.open("wb") as f:
            shutil.copyfileobj(source, f)
        return path

    def stage_bytes(self, content: bytes, filename: str) -> Path:
        """Stage generated content (e.g. a rendered cover) like an upload."""
        path = self._temp_path(filename)
        path.write_bytes(content)
        return path

    def install_pdf(self, staged: Path, item_id: str) -> Path:
        target = self.pdf_file(item_id)
        os.replace(staged, target)
        return target

    def install_thumbnail(self, staged: Path, item_id: str) -> Path:
        """Move a staged image into place, replacing any previous cover."""
        target = self.thumbnail_file(item_id)
        if target.exists():
            target.unlink()
        os.replace(staged, target)
        return target

    # -- removal -------------------------------------------------------------

    def discard(self, path: Optional[Path]) -> None:
        """Remove a file if present. Errors are logged, not raised."""
        if path is None:
            return
        try:
            if path.exists():
                path.unlink()
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)

    def remove_assets(self, item_id: str) -> None:
        self.discard(self.pdf_file(item_id))
        self.discard(self.thumbnail_file(item_id))
