# magshelf/reader/state.py
"""Build a ``Flipbook`` for a stored item and describe it for the API and views."""

from pathlib import Path
from typing import Callable, Optional

from ..models import PageLayoutOut, PageSlotOut, ReaderState
from .flipbook import Flipbook
from .layout import compute_layout
from .pdf import count_pages


def open_reader(
    pdf_file: Path,
    page: int = 1,
    viewport_width: float = 1280,
    viewport_height: float = 800,
    counter: Callable[[Path], int] = count_pages,
) -> Flipbook:
    """Load ``pdf_file`` and position the reader on PDF page ``page``."""
    book = Flipbook(layout=compute_layout(viewport_width, viewport_height))
    book.load(lambda: counter(pdf_file))
    # Slot k holds page k; the blank spacer is slot 0.
    book.flip_to(page)
    return book


def describe(book: Flipbook, image_url: Callable[[int, int], Optional[str]]) -> ReaderState:
    """Serialisable snapshot; ``image_url(page, height)`` points at a page image."""
    layout = book.layout
    window = book.window()
    slots = []
    for slot in book.slots:
        rendered = not slot.blank and slot.index in window
        slots.append(
            PageSlotOut(
                slot=slot.index,
                page_number=slot.page_number,
                is_cover=slot.is_cover,
                rendered=rendered,
                image_url=image_url(slot.page_number, layout.height) if rendered else None,
            )
        )
    return ReaderState(
        status=book.status.value,
        num_pages=book.num_pages,
        current_slot=book.current,
        visible_slots=book.visible_slots(),
        layout=PageLayoutOut(
            width=layout.width,
            height=layout.height,
            mode=layout.mode,
            min_width=layout.min_width,
            max_width=layout.max_width,
            min_height=layout.min_height,
            max_height=layout.max_height,
        ),
        slots=slots,
    )
