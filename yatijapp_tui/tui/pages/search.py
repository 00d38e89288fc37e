"""Search box state."""

from __future__ import annotations

from typing import Optional

from yatijapp_tui import validator as v
from yatijapp_tui.api.models import RecordType
from yatijapp_tui.constants import FORM_WIDTH
from yatijapp_tui.errors import ValidationError
from yatijapp_tui.tui.events import SwitchToSearchList
from yatijapp_tui.tui.fields import TextField
from yatijapp_tui.tui.pages.form import FormState
from yatijapp_tui.tui.pages.records import RecordsSelection


class SearchForm(FormState):
    """One required query field, scoped to a kind or to everything."""

    def __init__(self, scope: RecordType, selection: Optional[RecordsSelection] = None) -> None:
        self.scope = scope
        self.selection = selection
        width = FORM_WIDTH - 2
        query = TextField(
            "Search",
            char_limit=width - 1,
            placeholder="Search...",
            validator=v.multiple(v.required("search query is required"), v.max_length(width - 1)),
            width=width,
        )
        super().__init__([query])

    @property
    def title(self) -> str:
        if self.scope is RecordType.ALL:
            return "Search All"
        return f"Search {self.scope.value}s"

    def submit(self) -> Optional[SwitchToSearchList]:
        """Validate and dispatch the query.

        Searching everything asks for the search-list page; a scoped
        search rewrites the list's query and returns ``None``.
        """
        query = self.fields[0]
        if query.validate():
            raise ValidationError("input validation failed")
        if self.scope is RecordType.ALL:
            return SwitchToSearchList(query.value)
        if self.selection is None:
            raise ValidationError("nothing to search in")
        self.selection.selection_search_query(query.value)
        return None
