"""
Catalog package for the publications API.

This package contains the item schemas and the route factory that exposes
the same CRUD API for each collection (``/api/magazines`` and
``/api/ewc``). Listing and reading are public; every mutation requires
the admin password header. Records are persisted by
``magshelf.storage.CatalogStore``; the route module is imported by
``magshelf.main`` directly.
"""

from .schemas import Item, ItemType  # noqa: F401
