"""
Reader package: flipbook pagination, page layout and PDF rasterisation.

``layout`` sizes pages for a viewport, ``flipbook`` holds the windowed
pagination state and input handling, ``pdf`` wraps PyMuPDF and ``state``
ties them to stored items for the HTTP layer.
"""

from .flipbook import (  # noqa: F401
    KEY_BINDINGS,
    RENDER_RADIUS,
    SWIPE_DISTANCE,
    Flipbook,
    ReaderStatus,
)
from .layout import MAGAZINE_RATIO, compute_layout, cover_height  # noqa: F401
