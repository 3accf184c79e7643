"""Pane geometry derived from the terminal size."""

from __future__ import annotations

from dataclasses import dataclass

MIN_WIDTH = 60
MIN_HEIGHT = 20

# Rows taken by the header (title + breadcrumb) and footer (separator + key hints)
HEADER_HEIGHT = 3
FOOTER_HEIGHT = 2

MIN_LIST_WIDTH = 25


def too_small_message(
    width: int,
    height: int,
    min_width: int = MIN_WIDTH,
    min_height: int = MIN_HEIGHT,
) -> str:
    return (
        f"Terminal too small ({width}x{height}), "
        f"please resize to at least {min_width}x{min_height}"
    )


@dataclass(frozen=True)
class PaneLayout:
    """Sizes of the two explorer panes for one terminal size.

    Attributes:
        width: Terminal columns
        height: Terminal rows
        too_small: Terminal is below the minimum; nothing but the
            warning should be drawn
        list_width: Columns for the topic list
        detail_width: Columns for the detail viewport
        body_height: Rows between header and footer
    """

    width: int
    height: int
    too_small: bool
    list_width: int
    detail_width: int
    body_height: int
    min_width: int = MIN_WIDTH
    min_height: int = MIN_HEIGHT

    @property
    def message(self) -> str:
        """The too-small warning for this size, or an empty string."""
        if not self.too_small:
            return ""
        return too_small_message(self.width, self.height, self.min_width, self.min_height)


def compute_layout(
    width: int,
    height: int,
    min_width: int = MIN_WIDTH,
    min_height: int = MIN_HEIGHT,
) -> PaneLayout:
    """Split the terminal into list and detail panes.

    The list takes a quarter of the width (never under 25 columns) and the
    detail pane the rest, minus a gutter of two.
    """
    list_width = max(MIN_LIST_WIDTH, width // 4)
    return PaneLayout(
        width=width,
        height=height,
        too_small=width < min_width or height < min_height,
        list_width=list_width,
        detail_width=max(0, width - list_width - 2),
        body_height=max(0, height - HEADER_HEIGHT - FOOTER_HEIGHT),
        min_width=min_width,
        min_height=min_height,
    )
