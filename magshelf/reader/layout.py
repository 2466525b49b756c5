"""
Page sizing for the flipbook reader and the catalog cards.

Every page is drawn with the same magazine aspect ratio
(``height = width * MAGAZINE_RATIO``) whatever the viewport. Narrow
viewports show one page at a time; wider ones show a two-page spread, so a
single page may only take about half of the width.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from typing_extensions import Literal

MAGAZINE_RATIO = 1.3407
# Viewports narrower than this get the single-page (portrait) layout.
SINGLE_PAGE_BREAKPOINT = 768

LayoutMode = Literal["single", "spread"]


@dataclass(frozen=True)
class PageLayout:
    """Size of one page plus the bounds handed to the flip widget."""

    width: int
    height: int
    mode: LayoutMode
    min_width: int
    max_width: int
    min_height: int
    max_height: int

    @property
    def single(self) -> bool:
        return self.mode == "single"

    @property
    def pages_per_view(self) -> int:
        return 1 if self.single else 2


def _fit(max_width: float, max_height: float, ratio: float) -> tuple:
    """Largest ``(width, height)`` with ``height == width * ratio`` inside the box."""
    width = max_width
    height = width * ratio
    if height > max_height:
        height = max_height
        width = height / ratio
    # Never zero: page images are requested at this height.
    return max(1, math.floor(width)), max(1, math.floor(height))


def compute_layout(
    viewport_width: float,
    viewport_height: float,
    ratio: float = MAGAZINE_RATIO,
) -> PageLayout:
    """Derive the page size for a viewport.

    Parameters
    ----------
    viewport_width, viewport_height : float
        Inner size of the browser window in CSS pixels.
    ratio : float
        Target height/width ratio of a page.

    Returns
    -------
    PageLayout
        Page width/height (floored to whole pixels, at least 1) and the
        layout mode.
    """
    viewport_width = max(0.0, float(viewport_width))
    viewport_height = max(0.0, float(viewport_height))
    max_height = viewport_height * 0.9

    if viewport_width < SINGLE_PAGE_BREAKPOINT:
        width, height = _fit(min(viewport_width * 0.95, 500), max_height, ratio)
        return PageLayout(width, height, "single", 300, 500, 424, 700)

    width, height = _fit(min(viewport_width * 0.48, 700), max_height, ratio)
    return PageLayout(width, height, "spread", 400, 700, 565, 990)


def cover_height(card_width: float, ratio: float = MAGAZINE_RATIO) -> int:
    """Height of a catalog card cover so it matches the reader's page shape."""
    return math.floor(max(0.0, card_width) * ratio)
