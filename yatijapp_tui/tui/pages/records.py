"""Record selection state behind the list, search-list and selector pages.

:class:`RecordsSelection` keeps the loaded records, the paginator and
the highlighted index, plus the query that produced them (parent
records, filter and free-text search).  Other pages change the query
through the ``selection_*`` methods before the list is shown again.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from yatijapp_tui.api.models import ListResult, Metadata, Record, RecordParent, RecordParents, RecordType
from yatijapp_tui.api.preferences import Filter
from yatijapp_tui.constants import LIST_PAGE_SIZE
from yatijapp_tui.tui.paginator import Paginator

logger = logging.getLogger(__name__)


class RecordsSelection:
    """Loaded records of one kind and the cursor over them.

    Parameters
    ----------
    record_type:
        Kind listed; ``RecordType.ALL`` for search results.
    src:
        Parent records narrowing the list (target for actions, target and
        action for sessions).
    filter:
        Sort and status filter sent with every request.
    """

    def __init__(
        self,
        record_type: RecordType,
        src: Optional[RecordParents] = None,
        filter: Optional[Filter] = None,
        search: str = "",
        per_page: int = LIST_PAGE_SIZE,
    ) -> None:
        self.record_type = record_type
        self.src = src.copy() if src is not None else RecordParents()
        self.filter = filter
        self.search = search
        self.records: List[Record] = []
        self.metadata = Metadata()
        self.paginator = Paginator(per_page)
        self.selected = 0
        self.changed = False

    # ── Query ───────────────────────────────────────────────────

    @property
    def src_uuid(self) -> str:
        """uuid of the direct parent the list is narrowed to, if any."""
        parent = self.record_type.parent if self.record_type is not RecordType.ALL else None
        return self.src.uuid(parent) if parent is not None else ""

    @property
    def has_more(self) -> bool:
        return self.metadata.current_page < self.metadata.last_page

    @property
    def next_server_page(self) -> int:
        return self.metadata.current_page + 1

    def selection_src(self, record_type: RecordType, parent: RecordParent) -> None:
        """Replace the *record_type* parent the list is narrowed to."""
        logger.info(
            "List parent %s changed: %s -> %s",
            record_type.value,
            self.src.uuid(record_type),
            parent.uuid,
            extra={"type": self.record_type.value, "occurrence": "selection src"},
        )
        self.src[record_type] = parent.model_copy()
        self.changed = True

    def selection_filter_query(self, filter: Filter) -> None:
        self.filter = filter.model_copy(deep=True)
        self.changed = True

    def selection_search_query(self, query: str) -> None:
        self.search = query
        self.changed = True

    def selection_search_clear(self) -> None:
        if self.search:
            self.search = ""
            self.changed = True

    # ── Loading ─────────────────────────────────────────────────

    def set_records(self, result: ListResult) -> None:
        """Replace the records, keeping the cursor as close as possible.

        The page is clamped to the new page count, and a selection past
        the end of the page moves onto the last record of the page.
        """
        self.records = list(result.records)
        self.metadata = result.metadata
        self.changed = False

        total = self.paginator.set_total_pages(len(self.records))
        if self.paginator.page > total - 1:
            self.paginator.page = total - 1
        _, end = self.paginator.slice_bounds(len(self.records))
        if self.selected >= end and self.selected > 0:
            self.selected = max(end - 1, 0)

    def append_records(self, result: ListResult) -> None:
        """Add the next server page after the records already loaded."""
        self.records.extend(result.records)
        self.metadata = result.metadata
        self.paginator.set_total_pages(len(self.records))

    def reset_cursor(self) -> None:
        self.paginator.page = 0
        self.selected = 0

    # ── Cursor ──────────────────────────────────────────────────

    @property
    def current(self) -> Optional[Record]:
        if not self.records:
            return None
        return self.records[self.selected]

    def page_bounds(self) -> Tuple[int, int]:
        return self.paginator.slice_bounds(len(self.records))

    def page_records(self) -> List[Record]:
        start, end = self.page_bounds()
        return self.records[start:end]

    def prev(self) -> None:
        if self.selected > 0:
            self.selected -= 1
            start, _ = self.page_bounds()
            if self.selected < start:
                self.paginator.prev_page()

    def next(self) -> bool:
        """Move down one record; ``True`` when more must be fetched first."""
        if self.selected < len(self.records) - 1:
            self.selected += 1
            _, end = self.page_bounds()
            if self.selected >= end:
                self.paginator.next_page()
            return False
        return self.has_more

    def next_page(self) -> bool:
        """Flip forward; ``True`` when the server has more to fetch first."""
        if self.paginator.on_last_page:
            return self.has_more
        self.paginator.next_page()
        self.selected, _ = self.page_bounds()
        return False

    def prev_page(self) -> None:
        if self.paginator.on_first_page:
            return
        self.paginator.prev_page()
        self.selected, _ = self.page_bounds()


def delete_prompt(record: Record) -> Tuple[str, str]:
    """Confirmation prompt and cascade warning for deleting *record*."""
    record_type = record.actual_type
    prompt = f'Proceed to delete {record_type.label} "{record.title}"?'
    if record_type is RecordType.TARGET:
        return prompt, "All actions and sessions under this target will be deleted as well."
    if record_type is RecordType.ACTION:
        return prompt, "All sessions under this action will be deleted as well."
    return prompt, ""


def deleted_message(record_type: RecordType) -> str:
    return f"{record_type.value} deleted successfully."


def list_title(record_type: RecordType, src: RecordParents) -> List[str]:
    """Title bar segments: ``Targets``, ``<target>, Actions``..."""
    if record_type is RecordType.ACTION and src.uuid(RecordType.TARGET):
        return [f"{src.title(RecordType.TARGET)}, Actions"]
    if record_type is RecordType.SESSION and src.uuid(RecordType.ACTION):
        return [f"{src.title(RecordType.TARGET)}, {src.title(RecordType.ACTION)}, Sessions"]
    return [f"{record_type.value}s"]


def sync_prev_src(selection: RecordsSelection, record_parents: RecordParents) -> bool:
    """Point *selection* at the parents *record_parents* now has.

    Only parents the list is already narrowed to are touched; returns
    ``True`` when something changed.
    """
    changed = False
    chain = []
    walk = selection.record_type.parent
    while walk is not None:
        chain.append(walk)
        walk = walk.parent
    for parent_type in chain:
        current = selection.src.uuid(parent_type)
        fresh = record_parents.uuid(parent_type)
        if current and fresh and current != fresh:
            selection.selection_src(
                parent_type,
                RecordParent(uuid=fresh, title=record_parents.title(parent_type)),
            )
            changed = True
    return changed
