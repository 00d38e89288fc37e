"""Sort/status filter form."""

from __future__ import annotations

from typing import Optional

from yatijapp_tui.api.models import RecordType
from yatijapp_tui.api.preferences import (
    SORT_ORDER_OPTIONS,
    Filter,
    Preferences,
    sort_options,
    status_options,
)
from yatijapp_tui.errors import InternalError
from yatijapp_tui.tui.fields import CheckboxField, RadioField
from yatijapp_tui.tui.pages.form import FormState
from yatijapp_tui.tui.pages.records import RecordsSelection


class FilterForm(FormState):
    """Sort column, sort order and status choices seeded from *current*."""

    def __init__(self, record_type: RecordType, current: Filter) -> None:
        self.record_type = record_type
        sort_by = RadioField("Sort By", sort_options(record_type))
        sort_order = RadioField("Sort Order", SORT_ORDER_OPTIONS)
        status = CheckboxField("Status", status_options(record_type))
        try:
            sort_by.set_value(current.sort_by)
            sort_order.set_value(current.sort_order)
            status.set_values(*current.status)
        except ValueError as exc:
            raise InternalError(f"failed to load {record_type.label} filter data", exc) from exc
        super().__init__([sort_by, sort_order, status])

    def submit(self) -> Filter:
        sort_by, sort_order, status = self.fields
        return Filter(sort_by=sort_by.value, sort_order=sort_order.value, status=status.values)

    def apply(self, selection: Optional[RecordsSelection], preferences: Preferences) -> Filter:
        """Hand the chosen filter to the list that opened the form.

        Without a list (opened from the menu) the user's preferences are
        updated instead; persisting them is up to the caller.
        """
        chosen = self.submit()
        if selection is not None:
            selection.selection_filter_query(chosen)
        else:
            preferences.set_filter(self.record_type, chosen)
        return chosen
