# magshelf/pages.py
"""Server-rendered HTML: landing page, catalog grid, flipbook reader and admin panel."""

import json
import logging
import os

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .auth import ADMIN_HEADER
from .catalog.router import get_store, page_image_url
from .catalog.schemas import ItemType
from .reader import KEY_BINDINGS, MAGAZINE_RATIO, SWIPE_DISTANCE, cover_height
from .reader.state import describe, open_reader
from .storage import ItemNotFoundError, StoreError

logger = logging.getLogger(__name__)

COLLECTIONS = {
    ItemType.MAGAZINES: {
        "title": "Magazines",
        "tagline": "Culture, art and stories written by our students.",
    },
    ItemType.EWC: {
        "title": "English Writing Contest",
        "tagline": "Winning entries from the English Writing Contest.",
    },
}

# Nominal card width used to size the page-1 fallback cover.
CARD_WIDTH = 280

base_dir = os.path.dirname(__file__)
templates = Jinja2Templates(directory=os.path.join(base_dir, "templates"))

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
def landing(request: Request):
    return templates.TemplateResponse(
        request, "landing.html", {"collections": COLLECTIONS}
    )


# Registered before "/{collection}", which would otherwise claim "/admin".
@router.get("/admin", response_class=HTMLResponse)
def admin_panel(request: Request, collection: ItemType = ItemType.MAGAZINES):
    """Upload form and item list; every change goes through the admin API."""
    store = get_store(request)
    try:
        items = store.list(collection)
    except StoreError:
        logger.exception("Error loading %s for the admin panel", collection.value)
        raise HTTPException(status_code=500, detail="Failed to load items")
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "collections": COLLECTIONS,
            "collection": collection,
            "info": COLLECTIONS[collection],
            "items": items,
            "api_base": f"/api/{collection.value}",
            "admin_header": ADMIN_HEADER,
        },
    )


@router.get("/{collection}", response_class=HTMLResponse)
def catalog_grid(request: Request, collection: ItemType):
    store = get_store(request)
    try:
        items = store.list(collection)
    except StoreError:
        logger.exception("Error loading %s for the catalog page", collection.value)
        raise HTTPException(status_code=500, detail="Failed to load items")

    fallback_height = cover_height(CARD_WIDTH)
    cards = [
        {
            "item": item,
            "cover": item.thumbnail_path
            or page_image_url(collection, item.id, 1, fallback_height),
            "reader_url": f"/{collection.value}/{item.id}/read",
        }
        for item in items
    ]
    return templates.TemplateResponse(
        request,
        "catalog.html",
        {
            "collection": collection,
            "info": COLLECTIONS[collection],
            "cards": cards,
            "ratio": MAGAZINE_RATIO,
        },
    )


@router.get("/{collection}/{item_id}/read", response_class=HTMLResponse)
def reader_page(
    request: Request,
    collection: ItemType,
    item_id: str,
    page: int = Query(default=1, ge=0),
    vw: int = Query(default=1280, ge=1),
    vh: int = Query(default=800, ge=1),
):
    store = get_store(request)
    try:
        item = store.get(item_id, collection)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")
    except StoreError:
        logger.exception("Error loading %s for the reader page", item_id)
        raise HTTPException(status_code=500, detail="Failed to load item")

    book = open_reader(store.assets.pdf_file(item.id), page, vw, vh)
    state = describe(book, lambda n, h: page_image_url(collection, item.id, n, h))
    step = book.layout.pages_per_view
    return templates.TemplateResponse(
        request,
        "reader.html",
        {
            "item": item,
            "collection": collection,
            "state": state,
            "prev_page": max(0, book.current - step),
            "next_page": min(book.num_pages, book.current + step),
            "at_start": book.current == 0 or (book.layout.single and book.current <= 1),
            "at_end": book.current + step > book.num_pages,
            "vw": vw,
            "vh": vh,
            "key_bindings": json.dumps(KEY_BINDINGS),
            "swipe_distance": SWIPE_DISTANCE,
            "close_url": f"/{collection.value}",
        },
    )
