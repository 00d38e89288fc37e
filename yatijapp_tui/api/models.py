"""Pydantic models for yatijapp API payloads.

Records come in three kinds (targets, actions and sessions) that share
a capability set: every record knows its uuid, title, status, notes,
timestamps and parents, and can render itself as a list row.  Timestamps
are converted to the local time zone as they are decoded.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

if TYPE_CHECKING:
    from rich.text import Text

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


# ── Record kinds ─────────────────────────────────────────────────────


class RecordType(str, Enum):
    """Closed set of record kinds; ``ALL`` is only a search scope."""

    TARGET = "Target"
    ACTION = "Action"
    SESSION = "Session"
    ALL = "All"

    @property
    def parent(self) -> Optional["RecordType"]:
        return _PARENTS.get(self)

    @property
    def child(self) -> Optional["RecordType"]:
        return _CHILDREN.get(self)

    @property
    def path(self) -> str:
        """Collection segment used in API URLs (``targets``, ``records``...)."""
        if self is RecordType.ALL:
            return "records"
        return f"{self.value.lower()}s"

    @property
    def label(self) -> str:
        return self.value.lower()

    @classmethod
    def from_wire(cls, value: str) -> "RecordType":
        """Parse a kind as sent by the server (``"target"``, ``"Action"``...).

        ``activity`` is accepted as a synonym of ``action``.
        """
        normalized = value.strip().lower()
        if normalized == "activity":
            normalized = "action"
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"unknown record type: {value!r}")


_PARENTS = {
    RecordType.ACTION: RecordType.TARGET,
    RecordType.SESSION: RecordType.ACTION,
}
_CHILDREN = {
    RecordType.TARGET: RecordType.ACTION,
    RecordType.ACTION: RecordType.SESSION,
}

TARGET_STATUSES = ("queued", "in progress", "completed", "canceled")
SESSION_STATUSES = ("in progress", "completed")


class RecordParent(BaseModel):
    uuid: str = ""
    title: str = ""


class RecordParents(Dict[RecordType, RecordParent]):
    """Mapping from parent kind to ``{uuid, title}``.

    Keys always form a prefix of the parent chain: a session carries
    both its action and its target, an action only its target.
    """

    def uuid(self, record_type: RecordType) -> str:
        parent = self.get(record_type)
        return parent.uuid if parent else ""

    def title(self, record_type: RecordType) -> str:
        parent = self.get(record_type)
        return parent.title if parent else ""

    def is_empty(self) -> bool:
        return not any(p.uuid for p in self.values())

    def copy(self) -> "RecordParents":
        return RecordParents({k: v.model_copy() for k, v in self.items()})


# ── Shared behaviour ─────────────────────────────────────────────────


def _blank_to_none(value: Any) -> Any:
    if value == "":
        return None
    return value


def _to_local(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone()


class _RecordBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uuid: str
    created_at: datetime
    updated_at: datetime
    notes: str = ""
    version: int = 0
    has_notes: bool = False

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _localize(cls, value: datetime) -> datetime:
        return _to_local(value)  # type: ignore[return-value]

    @model_validator(mode="after")
    def _check_timestamps(self) -> "_RecordBase":
        if self.updated_at < self.created_at:
            logger.warning(
                "Record %s has updated_at before created_at",
                self.uuid,
                extra={"uuid": self.uuid, "occurrence": "record decode"},
            )
        # Sessions derive last_active from updated_at, which is checked above.
        last_active = getattr(self, "last_active", None) if "last_active" in type(self).model_fields else None
        if last_active is not None and last_active < self.created_at:
            logger.warning(
                "Record %s has last_active before created_at",
                self.uuid,
                extra={"uuid": self.uuid, "occurrence": "record decode"},
            )
        return self

    # Overridden per kind.
    @property
    def actual_type(self) -> RecordType:
        raise NotImplementedError

    @property
    def parents(self) -> RecordParents:
        return RecordParents()

    @property
    def children_count(self) -> int:
        return 0

    @property
    def note(self) -> str:
        return self.notes

    def list_item_view(self, show_parent: bool, selected: bool, width: int) -> "Text":
        """One-line row: status marker, title and (unselected) status text."""
        from yatijapp_tui.tui.style import render_list_item

        parents = self.parents if show_parent else RecordParents()
        return render_list_item(self.title, self.status, parents, selected, width)  # type: ignore[attr-defined]

    def list_item_detail_view(self, show_parent: bool, width: int) -> "Text":
        """Multi-line detail block shown under the list for the selected row."""
        from yatijapp_tui.tui.style import render_list_item_detail

        return render_list_item_detail(
            record_type=self.actual_type,
            description=getattr(self, "description", ""),
            status=self.status,  # type: ignore[attr-defined]
            due_date=getattr(self, "due_date", None),
            parents=self.parents if show_parent else RecordParents(),
            has_notes=self.has_notes,
            children_count=self.children_count,
            width=width,
        )


class Target(_RecordBase):
    title: str
    description: str = ""
    status: str = "queued"
    due_date: Optional[date] = None
    last_active: Optional[datetime] = None
    actions_count: int = 0

    @field_validator("due_date", "last_active", mode="before")
    @classmethod
    def _blank_due(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("last_active", mode="after")
    @classmethod
    def _localize_last_active(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_local(value)

    @property
    def actual_type(self) -> RecordType:
        return RecordType.TARGET

    @property
    def children_count(self) -> int:
        return self.actions_count


class Action(_RecordBase):
    title: str
    description: str = ""
    status: str = "queued"
    due_date: Optional[date] = None
    last_active: Optional[datetime] = None
    target_uuid: str = ""
    target_title: str = ""
    sessions_count: int = 0

    @field_validator("due_date", "last_active", mode="before")
    @classmethod
    def _blank_due(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("last_active", mode="after")
    @classmethod
    def _localize_last_active(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_local(value)

    @property
    def actual_type(self) -> RecordType:
        return RecordType.ACTION

    @property
    def parents(self) -> RecordParents:
        return RecordParents(
            {RecordType.TARGET: RecordParent(uuid=self.target_uuid, title=self.target_title)}
        )

    @property
    def children_count(self) -> int:
        return self.sessions_count


class Session(_RecordBase):
    starts_at: datetime
    ends_at: Optional[datetime] = None
    action_uuid: str = ""
    action_title: str = ""
    target_uuid: str = ""
    target_title: str = ""

    @field_validator("ends_at", mode="before")
    @classmethod
    def _blank_ends(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("starts_at", "ends_at", mode="after")
    @classmethod
    def _localize_span(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_local(value)

    @property
    def actual_type(self) -> RecordType:
        return RecordType.SESSION

    @property
    def title(self) -> str:
        start = self.starts_at.strftime(TIMESTAMP_FORMAT)
        end = self.ends_at.strftime(TIMESTAMP_FORMAT) if self.ends_at else "--"
        return f"{start} → {end}"

    @property
    def description(self) -> str:
        return ""

    @property
    def status(self) -> str:
        return "completed" if self.ends_at is not None else "in progress"

    @property
    def due_date(self) -> Optional[date]:
        return None

    @property
    def last_active(self) -> datetime:
        return self.updated_at

    @property
    def parents(self) -> RecordParents:
        return RecordParents(
            {
                RecordType.TARGET: RecordParent(uuid=self.target_uuid, title=self.target_title),
                RecordType.ACTION: RecordParent(uuid=self.action_uuid, title=self.action_title),
            }
        )


Record = Union[Target, Action, Session]

RECORD_MODELS: Dict[RecordType, type] = {
    RecordType.TARGET: Target,
    RecordType.ACTION: Action,
    RecordType.SESSION: Session,
}


def decode_record(record_type: RecordType, payload: Dict[str, Any]) -> Record:
    """Validate *payload* as a record of *record_type*.

    For search results (``ALL``) the kind is read from the payload's
    ``record_type`` key.
    """
    if record_type is RecordType.ALL:
        record_type = RecordType.from_wire(str(payload.get("record_type", "")))
    model = RECORD_MODELS[record_type]
    return model.model_validate(payload)


# ── Responses ────────────────────────────────────────────────────────


class Metadata(BaseModel):
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


class ListResult(BaseModel):
    """A page of records plus the server's paging metadata."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    metadata: Metadata = Field(default_factory=Metadata)
    records: List[Any] = Field(default_factory=list)


class User(BaseModel):
    uuid: str = ""
    name: str = ""
    email: str = ""


class MessageResponse(BaseModel):
    message: str = ""


# ── Requests ─────────────────────────────────────────────────────────


class RecordRequest(BaseModel):
    """Form data collected by the record config page.

    :meth:`to_body` shapes it into the JSON body the endpoint for a
    given record kind expects.
    """

    uuid: str = ""
    title: str = ""
    description: str = ""
    status: str = ""
    notes: str = ""
    due_date: Optional[date] = None
    target_uuid: str = ""
    target_title: str = ""
    action_uuid: str = ""
    action_title: str = ""
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    def to_body(self, record_type: RecordType) -> Dict[str, Any]:
        if record_type is RecordType.SESSION:
            body: Dict[str, Any] = {"action_uuid": self.action_uuid, "notes": self.notes}
            if self.starts_at is not None:
                body["starts_at"] = self.starts_at.astimezone().isoformat()
            if self.ends_at is not None:
                body["ends_at"] = self.ends_at.astimezone().isoformat()
            return body

        body = {
            "title": self.title,
            "description": self.description,
            "notes": self.notes,
            "status": self.status,
        }
        if self.due_date is not None:
            body["due_date"] = self.due_date.strftime(DATE_FORMAT)
        if record_type is RecordType.ACTION:
            body["target_uuid"] = self.target_uuid
        return body
