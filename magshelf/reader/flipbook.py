"""
Windowed pagination and flip coordination for the document reader.

A document of ``N`` pages is laid out as ``N + 1`` slots: slot 0 is a blank
spacer so that page 1 lands on the right-hand side of the first spread,
then slot ``k`` holds PDF page ``k``. Only the pages whose slot lies within
``radius`` of the current slot are rasterised; everything else is shown as a
placeholder. The window moves with every flip and pages that leave it are
dropped from the cache, so a document with hundreds of pages never has more
than ``2 * radius + 1`` rendered pages in memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .layout import PageLayout, compute_layout

logger = logging.getLogger(__name__)

RENDER_RADIUS = 5
SWIPE_DISTANCE = 30

# Key names as reported by browser KeyboardEvent.key.
KEY_BINDINGS = {
    "ArrowLeft": "prev",
    "ArrowUp": "prev",
    "ArrowRight": "next",
    "ArrowDown": "next",
    "Escape": "close",
}

# renderer(page_number, height) -> image bytes
PageRenderer = Callable[[int, int], bytes]
FlipListener = Callable[[int], None]


class ReaderStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    CLOSED = "closed"


@dataclass(frozen=True)
class PageSlot:
    index: int
    page_number: Optional[int]
    is_cover: bool = False

    @property
    def blank(self) -> bool:
        return self.page_number is None


@dataclass(frozen=True)
class KeyResult:
    action: Optional[str]
    # True when the browser's own handling (scrolling, history) must be suppressed.
    prevent_default: bool


def build_page_sequence(num_pages: int) -> List[PageSlot]:
    """Blank spacer followed by one slot per PDF page."""
    if num_pages <= 0:
        return []
    slots = [PageSlot(0, None)]
    slots.extend(PageSlot(n, n, is_cover=(n == 1)) for n in range(1, num_pages + 1))
    return slots


def render_window(current: int, num_pages: int, radius: int = RENDER_RADIUS) -> range:
    """Page numbers eligible for rendering around ``current``, clamped to the document."""
    if num_pages <= 0:
        return range(0)
    first = max(1, current - radius)
    last = min(num_pages, current + radius)
    if first > last:
        return range(0)
    return range(first, last + 1)


class Flipbook:
    """State of one open reader.

    The object is UI-agnostic: the caller feeds it the page count, viewport
    sizes, key presses and swipes, and asks it which pages to draw.
    """

    def __init__(
        self,
        layout: Optional[PageLayout] = None,
        radius: int = RENDER_RADIUS,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.layout = layout or compute_layout(1280, 800)
        self.radius = radius
        self.status = ReaderStatus.LOADING
        self.error: Optional[str] = None
        self.num_pages = 0
        self.current = 0
        self._slots: List[PageSlot] = []
        self._cache: Dict[int, bytes] = {}
        self._listeners: List[FlipListener] = []
        self._on_close = on_close

    # -- loading -------------------------------------------------------------

    def load(self, count_pages: Callable[[], int]) -> ReaderStatus:
        """Ask ``count_pages`` for the page count; failures end in ``ERROR``."""
        try:
            count = count_pages()
        except Exception as exc:
            logger.warning("Could not load document: %s", exc)
            self.fail(str(exc))
            return self.status
        self.set_page_count(count)
        return self.status

    def set_page_count(self, num_pages: int) -> None:
        if self.closed:
            return
        if num_pages <= 0:
            self.fail("Document has no pages")
            return
        self.num_pages = num_pages
        self._slots = build_page_sequence(num_pages)
        self.status = ReaderStatus.READY
        self.error = None
        self.current = self._normalise(self.current)

    def fail(self, message: str) -> None:
        self.status = ReaderStatus.ERROR
        self.error = message
        self.num_pages = 0
        self._slots = []
        self._cache.clear()

    @property
    def ready(self) -> bool:
        return self.status is ReaderStatus.READY

    @property
    def closed(self) -> bool:
        return self.status is ReaderStatus.CLOSED

    # -- pages & window ------------------------------------------------------

    @property
    def slots(self) -> List[PageSlot]:
        return list(self._slots)

    def window(self) -> range:
        if not self.ready:
            return range(0)
        return render_window(self.current, self.num_pages, self.radius)

    def should_render(self, slot: int) -> bool:
        return slot in self.window()

    def visible_slots(self) -> List[int]:
        """Slots on screen: the current page, or both halves of the spread."""
        if not self.ready:
            return []
        if self.layout.single:
            return [self.current]
        left = self.current - self.current % 2
        return [s for s in (left, left + 1) if s < len(self._slots)]

    def rendered_pages(self) -> List[int]:
        return sorted(self._cache)

    def page_image(self, slot: int) -> Optional[bytes]:
        """Rendered bytes for ``slot``, or ``None`` for a placeholder."""
        return self._cache.get(slot)

    def sync(self, renderer: PageRenderer) -> List[int]:
        """Render newly windowed pages and evict those that left the window.

        Returns the page numbers that were rendered by this call. A page
        that fails to render keeps its placeholder.
        """
        window = self.window()
        for page in [p for p in self._cache if p not in window]:
            del self._cache[page]

        rendered = []
        for page in window:
            if page in self._cache:
                continue
            try:
                self._cache[page] = renderer(page, self.layout.height)
            except Exception as exc:
                logger.warning("Could not render page %s: %s", page, exc)
                continue
            rendered.append(page)
        return rendered

    # -- navigation ----------------------------------------------------------

    def _normalise(self, slot: int) -> int:
        if not self._slots:
            return 0
        slot = max(0, min(slot, len(self._slots) - 1))
        if not self.layout.single:
            slot -= slot % 2
        return slot

    def add_flip_listener(self, listener: FlipListener) -> None:
        self._listeners.append(listener)

    def remove_flip_listener(self, listener: FlipListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def flip_to(self, slot: int) -> int:
        if not self.ready:
            return self.current
        target = self._normalise(slot)
        if target != self.current:
            self.current = target
            for listener in list(self._listeners):
                listener(target)
        return self.current

    def flip_next(self) -> int:
        return self.flip_to(self.current + self.layout.pages_per_view)

    def flip_prev(self) -> int:
        return self.flip_to(self.current - self.layout.pages_per_view)

    def resize(self, viewport_width: float, viewport_height: float) -> PageLayout:
        """Recompute the layout; a switch to spreads realigns the current slot."""
        self.layout = compute_layout(viewport_width, viewport_height)
        self.current = self._normalise(self.current)
        return self.layout

    def handle_key(self, key: str) -> KeyResult:
        action = KEY_BINDINGS.get(key)
        if action is None or self.closed:
            return KeyResult(None, False)
        if action == "prev":
            self.flip_prev()
        elif action == "next":
            self.flip_next()
        else:
            self.close()
        return KeyResult(action, True)

    def handle_swipe(self, delta_x: float) -> Optional[str]:
        """Horizontal swipe in either layout; negative ``delta_x`` is leftwards.

        A spread swipe moves a whole spread, like the arrow keys.
        """
        if self.closed or abs(delta_x) < SWIPE_DISTANCE:
            return None
        if delta_x < 0:
            self.flip_next()
            return "next"
        self.flip_prev()
        return "prev"

    def close(self) -> None:
        """Drop listeners and rendered pages. Later input is ignored."""
        if self.closed:
            return
        self._listeners.clear()
        self._cache.clear()
        self.status = ReaderStatus.CLOSED
        if self._on_close is not None:
            self._on_close()
