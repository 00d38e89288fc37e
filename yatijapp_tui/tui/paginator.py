"""Page arithmetic for fixed-size record lists."""

from __future__ import annotations

from typing import Tuple

from rich.style import Style
from rich.text import Text

from yatijapp_tui.tui.style import HELPER_DIM, TEXT


class Paginator:
    """Tracks the current page over a list of ``per_page``-sized pages.

    ``total_pages`` is at least 1 so that an empty list still has a
    (blank) first page to sit on.
    """

    def __init__(self, per_page: int) -> None:
        if per_page < 1:
            raise ValueError("per_page must be positive")
        self.per_page = per_page
        self.page = 0
        self.total_pages = 1

    def set_total_pages(self, items: int) -> int:
        """Recompute ``total_pages`` for *items* records and return it."""
        if items < 1:
            self.total_pages = 1
        else:
            self.total_pages = (items + self.per_page - 1) // self.per_page
        return self.total_pages

    def slice_bounds(self, length: int) -> Tuple[int, int]:
        """``(start, end)`` indices of the current page within *length* items."""
        start = self.page * self.per_page
        end = min(start + self.per_page, length)
        return start, end

    def items_on_page(self, length: int) -> int:
        start, end = self.slice_bounds(length)
        return max(end - start, 0)

    @property
    def on_first_page(self) -> bool:
        return self.page == 0

    @property
    def on_last_page(self) -> bool:
        return self.page >= self.total_pages - 1

    def next_page(self) -> None:
        if not self.on_last_page:
            self.page += 1

    def prev_page(self) -> None:
        if self.page > 0:
            self.page -= 1

    def render(self) -> Text:
        """One dot per page, the current one bright."""
        dots = Text(justify="center")
        for i in range(self.total_pages):
            dots.append("•", style=Style(color=TEXT if i == self.page else HELPER_DIM))
        return dots
