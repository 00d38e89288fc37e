"""User preferences and the sort-key vocabulary shared with the server.

The server stores each list's sort column in *wire* form
(``"-last_active"``: column name, ``-`` prefix for descending order).
The filter page works in *human* form (``("last active", "descending")``).
:func:`to_human` and :func:`to_wire` convert between the two and are
exact inverses over the known keys.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from yatijapp_tui.api.models import RecordType
from yatijapp_tui.constants import PREFERENCES_VERSION

ASCENDING = "ascending"
DESCENDING = "descending"

SORT_KEYS: Dict[str, str] = {
    "serial_id": "id",
    "due_date": "due date",
    "created_at": "created at",
    "starts_at": "starts at",
    "updated_at": "updated at",
    "last_active": "last active",
}
_WIRE_KEYS = {human: wire for wire, human in SORT_KEYS.items()}

STATUS_OPTIONS = ("queued", "in progress", "completed", "canceled")
SORT_BY_OPTIONS = ("id", "due date", "created at", "last active")
SESSION_STATUS_OPTIONS = ("in progress", "completed")
SESSION_SORT_BY_OPTIONS = ("starts at", "updated at")
SORT_ORDER_OPTIONS = (ASCENDING, DESCENDING)


def to_human(wire: str) -> Tuple[str, str]:
    """``"-last_active"`` -> ``("last active", "descending")``."""
    order = ASCENDING
    column = wire
    if column.startswith("-"):
        column = column[1:]
        order = DESCENDING
    try:
        return SORT_KEYS[column], order
    except KeyError:
        raise ValueError(f"unknown sort key: {wire!r}") from None


def to_wire(sort_by: str, sort_order: str) -> str:
    """``("last active", "descending")`` -> ``"-last_active"``."""
    try:
        column = _WIRE_KEYS[sort_by]
    except KeyError:
        raise ValueError(f"unknown sort option: {sort_by!r}") from None
    if sort_order == DESCENDING:
        return f"-{column}"
    if sort_order != ASCENDING:
        raise ValueError(f"unknown sort order: {sort_order!r}")
    return column


def sort_options(record_type: RecordType) -> Tuple[str, ...]:
    if record_type is RecordType.SESSION:
        return SESSION_SORT_BY_OPTIONS
    return SORT_BY_OPTIONS


def status_options(record_type: RecordType) -> Tuple[str, ...]:
    if record_type is RecordType.SESSION:
        return SESSION_STATUS_OPTIONS
    return STATUS_OPTIONS


class Filter(BaseModel):
    """List filter in human form, as edited on the filter page."""

    sort_by: str
    sort_order: str = DESCENDING
    status: List[str] = Field(default_factory=list)

    @classmethod
    def from_wire(cls, payload: Dict[str, Any]) -> "Filter":
        sort_by, sort_order = to_human(str(payload.get("sortBy", "")))
        return cls(sort_by=sort_by, sort_order=sort_order, status=list(payload.get("status") or []))

    def to_wire(self) -> Dict[str, Any]:
        return {"sortBy": to_wire(self.sort_by, self.sort_order), "status": list(self.status)}

    def query(self) -> Dict[str, str]:
        """Query-string parameters for a list request."""
        params = {"sort_by": to_wire(self.sort_by, self.sort_order)}
        if self.status:
            params["status"] = ",".join(self.status)
        return params


class Preferences(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    target: Filter
    action: Filter
    session: Filter
    version: str = PREFERENCES_VERSION

    def get_filter(self, record_type: RecordType) -> Filter:
        if record_type is RecordType.TARGET:
            return self.target
        if record_type is RecordType.ACTION:
            return self.action
        if record_type is RecordType.SESSION:
            return self.session
        raise ValueError(f"no filter for record type {record_type.value}")

    def set_filter(self, record_type: RecordType, value: Filter) -> None:
        if record_type is RecordType.TARGET:
            self.target = value
        elif record_type is RecordType.ACTION:
            self.action = value
        elif record_type is RecordType.SESSION:
            self.session = value
        else:
            raise ValueError(f"no filter for record type {record_type.value}")

    @classmethod
    def from_wire(cls, payload: Dict[str, Any]) -> "Preferences":
        filters = payload.get("filters") or {}
        return cls(
            target=Filter.from_wire(filters.get("target") or {}),
            action=Filter.from_wire(filters.get("action") or {}),
            session=Filter.from_wire(filters.get("session") or {}),
            version=payload.get("version") or PREFERENCES_VERSION,
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "filters": {
                "target": self.target.to_wire(),
                "action": self.action.to_wire(),
                "session": self.session.to_wire(),
            },
            "version": self.version,
        }


def default_preferences() -> Preferences:
    """A fresh copy of the built-in defaults, used when none are stored."""
    return Preferences(
        target=Filter(sort_by="last active", sort_order=DESCENDING, status=["queued", "in progress"]),
        action=Filter(sort_by="last active", sort_order=DESCENDING, status=["queued", "in progress"]),
        session=Filter(sort_by="starts at", sort_order=DESCENDING, status=["in progress", "completed"]),
    )
