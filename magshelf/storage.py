# magshelf/storage.py
"""JSON-file backed catalog store.

Every record of both collections lives in one JSON array on disk. Each
operation loads the whole array, mutates it in memory and writes it back
in full. All of that happens under the store's lock, so requests served by
the threadpool of one process are serialised instead of overwriting each
other's changes. Nothing coordinates separate processes.
"""

import json
import logging
import secrets
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from .catalog.schemas import Item, ItemRecord, ItemType
from .uploads import AssetDirectory

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The data file could not be read or written."""


class ItemNotFoundError(StoreError, LookupError):
    """No record with this id exists in the requested collection."""

    def __init__(self, item_id: str, item_type: ItemType):
        super().__init__(f"Item {item_id!r} not found in {item_type.value}")
        self.item_id = item_id
        self.item_type = item_type


def generate_id() -> str:
    """Short random hex token used as the record id and asset file name."""
    return secrets.token_hex(8)


class CatalogStore:
    def __init__(self, data_file: Path, assets: AssetDirectory):
        self.data_file = Path(data_file)
        self.assets = assets
        self._lock = threading.Lock()

    # -- persistence ---------------------------------------------------------

    def _load(self) -> List[Dict[str, Any]]:
        """Load the full record array, creating an empty file if missing."""
        if not self.data_file.exists():
            self._save([])
            return []
        try:
            with self.data_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read {self.data_file}: {exc}") from exc
        if not isinstance(data, list):
            raise StoreError(f"{self.data_file} does not hold a JSON array")
        return data

    def _save(self, data: List[Dict[str, Any]]) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.data_file.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as exc:
            raise StoreError(f"Cannot write {self.data_file}: {exc}") from exc

    @staticmethod
    def _find(data: List[Dict[str, Any]], item_id: str, item_type: ItemType) -> int:
        for index, entry in enumerate(data):
            if entry.get("id") == item_id and entry.get("type") == item_type.value:
                return index
        raise ItemNotFoundError(item_id, item_type)

    def _to_item(self, entry: Dict[str, Any]) -> Item:
        try:
            record = ItemRecord.model_validate(entry)
        except ValidationError as exc:
            raise StoreError(f"Malformed record in {self.data_file}: {exc}") from exc
        return Item(
            **record.model_dump(),
            pdf_path=self.assets.pdf_url(record.id),
            thumbnail_path=self.assets.thumbnail_url(record.id),
        )

    # -- operations ----------------------------------------------------------

    def list(self, item_type: ItemType) -> List[Item]:
        """Items of one collection, newest first."""
        with self._lock:
            data = self._load()
        return [self._to_item(e) for e in data if e.get("type") == item_type.value]

    def get(self, item_id: str, item_type: ItemType) -> Item:
        with self._lock:
            data = self._load()
        return self._to_item(data[self._find(data, item_id, item_type)])

    def create(
        self,
        item_type: ItemType,
        title: str,
        publish_date: str,
        authors: List[str],
        staged_pdf: Path,
        staged_thumbnail: Optional[Path] = None,
    ) -> Item:
        """Install the staged assets under a fresh id and insert the record first.

        If the data file cannot be written after the files were renamed the
        files stay behind; nothing reconciles them.
        """
        with self._lock:
            item_id = generate_id()
            self.assets.install_pdf(staged_pdf, item_id)
            if staged_thumbnail is not None:
                self.assets.install_thumbnail(staged_thumbnail, item_id)

            record = ItemRecord(
                id=item_id,
                title=title,
                publish_date=publish_date,
                authors=authors,
                type=item_type,
            )
            data = self._load()
            data.insert(0, record.model_dump(by_alias=True, mode="json"))
            self._save(data)

        logger.info("Created %s item id=%s title=%r", item_type.value, item_id, title)
        return self._to_item(data[0])

    def update_metadata(
        self, item_id: str, item_type: ItemType, patch: Dict[str, Any]
    ) -> Item:
        """Apply ``patch`` (snake_case keys) to one record.

        Keys other than ``title``, ``publish_date`` and ``authors`` are ignored.
        """
        with self._lock:
            data = self._load()
            index = self._find(data, item_id, item_type)
            record = ItemRecord.model_validate(data[index])
            changes = {
                k: v
                for k, v in patch.items()
                if k in ("title", "publish_date", "authors") and v is not None
            }
            updated = record.model_copy(update=changes)
            data[index] = updated.model_dump(by_alias=True, mode="json")
            self._save(data)

        logger.info(
            "Updated %s item id=%s fields=%s", item_type.value, item_id, sorted(changes)
        )
        return self._to_item(data[index])

    def replace_thumbnail(
        self, item_id: str, item_type: ItemType, staged_thumbnail: Path
    ) -> str:
        """Swap in a new cover image; returns its public URL."""
        with self._lock:
            data = self._load()
            try:
                self._find(data, item_id, item_type)
            except ItemNotFoundError:
                self.assets.discard(staged_thumbnail)
                raise
            self.assets.install_thumbnail(staged_thumbnail, item_id)

        logger.info("Replaced thumbnail of %s item id=%s", item_type.value, item_id)
        return self.assets.thumbnail_url(item_id)

    def delete(self, item_id: str, item_type: ItemType) -> None:
        """Remove the record and its asset files."""
        with self._lock:
            data = self._load()
            self._find(data, item_id, item_type)
            self.assets.remove_assets(item_id)
            data = [e for e in data if e.get("id") != item_id]
            self._save(data)

        logger.info("Deleted %s item id=%s", item_type.value, item_id)

    def backfill_thumbnails(
        self, item_type: ItemType, cover_renderer: Callable[[Path], bytes]
    ) -> List[str]:
        """Generate covers for items created without one.

        ``cover_renderer`` turns a PDF file into JPEG bytes. Items whose PDF
        cannot be rendered are logged and skipped.
        """
        updated: List[str] = []
        for item in self.list(item_type):
            if item.thumbnail_path is not None:
                continue
            try:
                self.generate_thumbnail(item.id, item_type, cover_renderer)
            except ItemNotFoundError:
                # Deleted while its cover was being rendered.
                continue
            except StoreError:
                raise
            except Exception:
                logger.exception("Could not render a cover for %s", item.id)
                continue
            updated.append(item.id)
        return updated

    def generate_thumbnail(
        self,
        item_id: str,
        item_type: ItemType,
        cover_renderer: Callable[[Path], bytes],
    ) -> str:
        """Render the cover from the item's PDF, replacing any existing one.

        Renderer errors propagate; nothing is written when rendering fails.
        """
        self.get(item_id, item_type)
        cover = cover_renderer(self.assets.pdf_file(item_id))
        staged = self.assets.stage_bytes(cover, f"{item_id}-cover.jpg")
        return self.replace_thumbnail(item_id, item_type, staged)
