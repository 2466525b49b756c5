# magshelf/main.py
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from . import auth, pages
from .catalog.router import build_collection_router
from .catalog.schemas import ItemType
from .config import Settings, get_settings, setup_logging
from .storage import CatalogStore
from .uploads import PUBLIC_PREFIX, AssetDirectory


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Publications",
        description=(
            "Publishing site for PDF magazine issues and contest entries: "
            "a JSON-file catalog, an admin-gated upload API and a "
            "page-flip reader."
        ),
        version="1.0.0",
    )

    assets = AssetDirectory(settings.uploads_dir, PUBLIC_PREFIX)
    app.state.settings = settings
    app.state.store = CatalogStore(settings.data_file, assets)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(auth.router)
    for item_type in ItemType:
        app.include_router(build_collection_router(item_type))
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(settings.uploads_dir)), name="uploads")
    # Last: its "/{collection}" route would otherwise shadow the ones above.
    app.include_router(pages.router)
    return app

