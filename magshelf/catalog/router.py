"""
Route definitions for one collection.

``build_collection_router(item_type)`` returns the endpoints below under
``/api/<collection>``; ``magshelf.main`` mounts one router per ``ItemType``.

- GET    ""                        : list items, newest first
- POST   ""                        : create an item (multipart, admin)
- POST   /{id}/thumbnail           : replace the cover image (multipart, admin)
- POST   /{id}/thumbnail/generate  : render the cover from page 1 (admin)
- PUT    /{id}                     : update title / publishDate / authors (admin)
- DELETE /{id}                     : delete the item and its files (admin)
- POST   /thumbnails/backfill      : render covers for items without one (admin)
- GET    /{id}/reader              : windowed flipbook state for a viewport
- GET    /{id}/pages/{n}           : PNG of one page
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Path,
    Query,
    Request,
    UploadFile,
)
from fastapi.responses import Response

from ..auth import require_admin
from ..models import MessageResponse, ReaderState
from ..reader import pdf
from ..reader.state import describe, open_reader
from ..storage import CatalogStore, ItemNotFoundError, StoreError
from .schemas import BackfillResponse, Item, ItemType, ItemUpdate, ThumbnailResponse

logger = logging.getLogger(__name__)

NOT_FOUND = "Item not found"
LOAD_FAILED = "Failed to load item"


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def parse_authors(raw: Optional[str]) -> List[str]:
    """Decode the ``authors`` form field, a JSON-encoded list of names."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="authors must be a JSON list")
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail="authors must be a JSON list")
    return [str(a) for a in value]


def page_image_url(item_type: ItemType, item_id: str, page: int, height: int) -> str:
    return f"/api/{item_type.value}/{item_id}/pages/{page}?height={height}"


def build_collection_router(item_type: ItemType) -> APIRouter:
    router = APIRouter(prefix=f"/api/{item_type.value}", tags=[item_type.value])
    admin = [Depends(require_admin)]

    @router.get("", response_model=List[Item])
    def list_items(store: CatalogStore = Depends(get_store)):
        try:
            return store.list(item_type)
        except StoreError:
            logger.exception("Error listing %s", item_type.value)
            raise HTTPException(status_code=500, detail="Failed to load items")

    @router.post("", response_model=Item, status_code=201, dependencies=admin)
    def create_item(
        title: str = Form(""),
        publish_date: str = Form("", alias="publishDate"),
        authors: str = Form("[]"),
        pdf_file: Optional[UploadFile] = File(None, alias="pdf"),
        thumbnail: Optional[UploadFile] = File(None),
        store: CatalogStore = Depends(get_store),
    ):
        if pdf_file is None:
            raise HTTPException(status_code=400, detail="No PDF file uploaded")
        author_list = parse_authors(authors)

        staged_pdf = staged_thumbnail = None
        try:
            staged_pdf = store.assets.stage(pdf_file.file, pdf_file.filename)
            if thumbnail is not None:
                staged_thumbnail = store.assets.stage(thumbnail.file, thumbnail.filename)
            return store.create(
                item_type, title, publish_date, author_list, staged_pdf, staged_thumbnail
            )
        except Exception:
            logger.exception("Error adding %s item", item_type.value)
            # Only files still under their temporary name; installed ones stay.
            store.assets.discard(staged_pdf)
            store.assets.discard(staged_thumbnail)
            raise HTTPException(status_code=500, detail="Failed to add item")

    @router.post("/thumbnails/backfill", response_model=BackfillResponse, dependencies=admin)
    def backfill_thumbnails(store: CatalogStore = Depends(get_store)):
        try:
            updated = store.backfill_thumbnails(item_type, pdf.render_cover)
        except StoreError:
            logger.exception("Error backfilling %s thumbnails", item_type.value)
            raise HTTPException(status_code=500, detail="Failed to generate thumbnails")
        return BackfillResponse(updated=updated)

    @router.post("/{item_id}/thumbnail", response_model=ThumbnailResponse, dependencies=admin)
    def replace_thumbnail(
        item_id: str,
        thumbnail: Optional[UploadFile] = File(None),
        store: CatalogStore = Depends(get_store),
    ):
        if thumbnail is None:
            raise HTTPException(status_code=400, detail="No thumbnail file uploaded")
        staged = None
        try:
            staged = store.assets.stage(thumbnail.file, thumbnail.filename)
            url = store.replace_thumbnail(item_id, item_type, staged)
        except ItemNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        except Exception:
            logger.exception("Error updating thumbnail of %s", item_id)
            store.assets.discard(staged)
            raise HTTPException(status_code=500, detail="Failed to update thumbnail")
        return ThumbnailResponse(thumbnail_path=url)

    @router.post(
        "/{item_id}/thumbnail/generate", response_model=ThumbnailResponse, dependencies=admin
    )
    def generate_thumbnail(item_id: str, store: CatalogStore = Depends(get_store)):
        try:
            url = store.generate_thumbnail(item_id, item_type, pdf.render_cover)
        except ItemNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        except (StoreError, pdf.PdfError):
            logger.exception("Error generating thumbnail of %s", item_id)
            raise HTTPException(status_code=500, detail="Failed to generate thumbnail")
        return ThumbnailResponse(thumbnail_path=url)

    @router.put("/{item_id}", response_model=Item, dependencies=admin)
    def update_item(
        item_id: str,
        update: ItemUpdate,
        store: CatalogStore = Depends(get_store),
    ):
        try:
            return store.update_metadata(
                item_id, item_type, update.model_dump(exclude_unset=True)
            )
        except ItemNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        except StoreError:
            logger.exception("Error updating %s", item_id)
            raise HTTPException(status_code=500, detail="Failed to update item")

    @router.delete("/{item_id}", response_model=MessageResponse, dependencies=admin)
    def delete_item(item_id: str, store: CatalogStore = Depends(get_store)):
        try:
            store.delete(item_id, item_type)
        except ItemNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        except StoreError:
            logger.exception("Error deleting %s", item_id)
            raise HTTPException(status_code=500, detail="Failed to delete item")
        return MessageResponse(message="Item deleted successfully")

    @router.get("/{item_id}/reader", response_model=ReaderState)
    def reader_state(
        item_id: str,
        page: int = Query(default=1, ge=0, description="PDF page to open at"),
        viewport_width: int = Query(default=1280, ge=1, alias="viewportWidth"),
        viewport_height: int = Query(default=800, ge=1, alias="viewportHeight"),
        store: CatalogStore = Depends(get_store),
    ):
        try:
            item = store.get(item_id, item_type)
        except ItemNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        except StoreError:
            logger.exception("Error loading %s", item_id)
            raise HTTPException(status_code=500, detail=LOAD_FAILED)
        book = open_reader(
            store.assets.pdf_file(item.id), page, viewport_width, viewport_height
        )
        return describe(
            book, lambda n, h: page_image_url(item_type, item.id, n, h)
        )

    @router.get("/{item_id}/pages/{page_number}")
    def page_image(
        item_id: str,
        page_number: int = Path(..., ge=1),
        height: int = Query(default=848, ge=1, le=pdf.MAX_RENDER_HEIGHT),
        store: CatalogStore = Depends(get_store),
    ):
        try:
            item = store.get(item_id, item_type)
        except ItemNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        except StoreError:
            logger.exception("Error loading %s", item_id)
            raise HTTPException(status_code=500, detail=LOAD_FAILED)
        try:
            with pdf.PdfDocument(store.assets.pdf_file(item.id)) as doc:
                if page_number > doc.page_count:
                    raise HTTPException(status_code=404, detail="Page not found")
                content = doc.render_page(page_number, height)
        except pdf.PdfError:
            logger.exception("Error rendering page %s of %s", page_number, item_id)
            raise HTTPException(status_code=500, detail="Failed to render page")
        return Response(
            content=content,
            media_type="image/png",
            headers={"Cache-Control": "public, max-age=3600"},
        )

    return router
