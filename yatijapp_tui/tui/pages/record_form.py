"""Create/edit form for targets, actions and sessions.

The field layout depends on the record kind and on whether an existing
record is being edited:

* target: name, due date, description, status, note
* action: the target fields plus a parent target selector
* new session: target, action, note
* existing session: target, action, starts at, ends at, note

Parent uuids/titles chosen through selectors are kept in hidden values
alongside the visible selector text.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from yatijapp_tui.api.models import (
    TARGET_STATUSES,
    Record,
    RecordParent,
    RecordParents,
    RecordRequest,
    RecordType,
)
from yatijapp_tui.errors import InternalError, ValidationError
from yatijapp_tui.tui import fields as f
from yatijapp_tui.tui.fields import Focusable, NoteField
from yatijapp_tui.tui.pages.form import FormState
from yatijapp_tui.tui.pages.records import RecordsSelection, sync_prev_src
from yatijapp_tui.validator import DATETIME_FORMATS, parse_date, parse_datetime

logger = logging.getLogger(__name__)

_HIDDEN_KEYS = {
    RecordType.TARGET: ("parent_target_uuid", "parent_target_title"),
    RecordType.ACTION: ("parent_action_uuid", "parent_action_title"),
}

_CREATED = {
    RecordType.TARGET: "Target created successfully",
    RecordType.ACTION: "Action created successfully",
    RecordType.SESSION: "New session started",
}
_UPDATED = {
    RecordType.TARGET: "Target updated successfully",
    RecordType.ACTION: "Action updated successfully",
    RecordType.SESSION: "Session updated successfully",
}


class RecordForm(FormState):
    """Field state of the record config page.

    Parameters
    ----------
    record_type:
        Kind being created or edited.
    record:
        Existing record when editing; ``None`` when creating.
    src:
        Parents known from the page that opened the form; used to
        pre-fill the selectors of a new record.
    today:
        Reference day for the due-date lower bound.

    Raises :class:`InternalError` when *record* carries a status the
    status field does not know.
    """

    def __init__(
        self,
        record_type: RecordType,
        record: Optional[Record] = None,
        src: Optional[RecordParents] = None,
        today: Optional[date] = None,
    ) -> None:
        if record_type is RecordType.ALL:
            raise InternalError("cannot configure a record of type All")
        self.record_type = record_type
        self.record = record
        self.hidden: Dict[str, str] = {key: "" for pair in _HIDDEN_KEYS.values() for key in pair}
        self.selector_fields: Dict[RecordType, int] = {}

        parents = record.parents if record is not None else (src or RecordParents())
        for parent_type, (uuid_key, title_key) in _HIDDEN_KEYS.items():
            self.hidden[uuid_key] = parents.uuid(parent_type)
            self.hidden[title_key] = parents.title(parent_type)

        if record_type is RecordType.SESSION:
            items, focused = self._session_fields()
        else:
            items, focused = self._record_fields(today)
        super().__init__(items, focused)

    # ── Layout ──────────────────────────────────────────────────

    @property
    def editing(self) -> bool:
        return self.record is not None

    def _note_context(self) -> Dict[str, str]:
        name = ""
        if self.record_type is not RecordType.SESSION:
            name = self.fields[0].value
        return {
            "name": name,
            "target": self.hidden["parent_target_title"],
            "action": self.hidden["parent_action_title"],
        }

    def _record_fields(self, today: Optional[date]) -> Tuple[List[Focusable], int]:
        record = self.record
        name = f.name_field(self.record_type)
        due = f.due_field(record is not None, today)
        description = f.description_field()
        status = f.status_field(TARGET_STATUSES)
        note = NoteField("Note", self.record_type, self._note_context)

        if record is not None:
            name.set_value(record.title)
            due_date = getattr(record, "due_date", None)
            due.set_value(due_date.strftime("%Y-%m-%d") if due_date else "")
            description.set_value(getattr(record, "description", ""))
            try:
                status.set_value(record.status)
            except ValueError as exc:
                raise InternalError(f"failed to load {self.record_type.label} status data", exc) from exc
            note.set_value(record.notes)

        items: List[Focusable] = [name, due, description, status, note]
        focused = 0
        if self.record_type is RecordType.ACTION:
            target = f.selector_field(RecordType.TARGET)
            target.set_value(self.hidden["parent_target_title"])
            items.append(target)
            self.selector_fields[RecordType.TARGET] = 5
            if record is None:
                focused = 5
        return items, focused

    def _session_fields(self) -> Tuple[List[Focusable], int]:
        record = self.record
        target = f.selector_field(RecordType.TARGET)
        target.set_value(self.hidden["parent_target_title"])
        action = f.selector_field(RecordType.ACTION)
        action.set_value(self.hidden["parent_action_title"])
        note = NoteField("Note", RecordType.SESSION, self._note_context)
        self.selector_fields = {RecordType.TARGET: 0, RecordType.ACTION: 1}

        if record is None:
            return [target, action, note], 0

        starts = f.time_field("Starts At")
        ends = f.time_field("Ends At")
        starts.set_value(record.starts_at.strftime(DATETIME_FORMATS[0]))  # type: ignore[union-attr]
        ends_at = getattr(record, "ends_at", None)
        ends.set_value(ends_at.strftime(DATETIME_FORMATS[0]) if ends_at else "")
        note.set_value(record.notes)
        return [target, action, starts, ends, note], 2

    def field(self, label: str) -> Focusable:
        for item in self.fields:
            if item.label == label:
                return item
        raise KeyError(label)

    @property
    def note(self) -> NoteField:
        return next(item for item in self.fields if isinstance(item, NoteField))

    # ── Selectors ───────────────────────────────────────────────

    def selector_parent_uuid(self, record_type: RecordType) -> str:
        """uuid narrowing the candidates of a *record_type* selector.

        Actions are offered only under the chosen target; an empty
        result means there is nothing to choose from yet.
        """
        if record_type is RecordType.ACTION:
            return self.hidden["parent_target_uuid"]
        return ""

    def apply_selection(self, record_type: RecordType, title: str, uuid: str) -> None:
        """Store a record picked in the selector.

        Choosing a different target resets the chosen action.
        """
        uuid_key, title_key = _HIDDEN_KEYS[record_type]
        if self.hidden[title_key] == title and self.hidden[uuid_key] == uuid:
            return
        self.hidden[uuid_key] = uuid
        self.hidden[title_key] = title
        index = self.selector_fields.get(record_type)
        if index is not None:
            self.fields[index].set_value(title)

        if record_type is RecordType.TARGET and RecordType.ACTION in self.selector_fields:
            self.hidden["parent_action_uuid"] = ""
            self.hidden["parent_action_title"] = ""
            self.fields[self.selector_fields[RecordType.ACTION]].set_value("")

    # ── Submit ──────────────────────────────────────────────────

    def submit(self) -> RecordRequest:
        """Validate every field and build the request body.

        Raises :class:`ValidationError` when any field is rejected.
        """
        failed = [item for item in self.fields if item.validate()]
        if self.record_type is RecordType.SESSION:
            failed += self._check_session()
        if failed:
            raise ValidationError("input validation failed")

        request = RecordRequest(
            uuid=self.record.uuid if self.record is not None else "",
            notes=self.note.value,
            target_uuid=self.hidden["parent_target_uuid"],
            target_title=self.hidden["parent_target_title"],
            action_uuid=self.hidden["parent_action_uuid"],
            action_title=self.hidden["parent_action_title"],
        )
        if self.record_type is RecordType.SESSION:
            if self.editing:
                request.starts_at = parse_datetime(self.field("Starts At").value).astimezone()
                ends = self.field("Ends At").value
                request.ends_at = parse_datetime(ends).astimezone() if ends else None
            return request

        request.title = self.field("Name").value
        request.description = self.field("Description").value
        request.status = self.field("Status").value
        due = self.field("Due Date").value
        request.due_date = parse_date(due) if due else None
        return request

    def _check_session(self) -> List[Focusable]:
        failed: List[Focusable] = []
        target = self.fields[self.selector_fields[RecordType.TARGET]]
        action = self.fields[self.selector_fields[RecordType.ACTION]]
        if not self.hidden["parent_target_uuid"]:
            target.set_error("target is required")
            failed.append(target)
        if not self.hidden["parent_action_uuid"]:
            action.set_error("action is required")
            failed.append(action)
        if not self.editing:
            return failed

        checks = (("Starts At", "invalid starts at value", False), ("Ends At", "invalid ends at value", True))
        for label, msg, optional in checks:
            item = self.field(label)
            if optional and item.value == "":
                continue
            try:
                parse_datetime(item.value)
            except ValueError:
                item.set_error(msg)
                failed.append(item)
        return failed

    @property
    def success_message(self) -> str:
        return (_UPDATED if self.editing else _CREATED)[self.record_type]

    def sync_prev(self, selection: RecordsSelection) -> bool:
        """Point the list this form came from at the record's new parents."""
        parents = RecordParents()
        for parent_type, (uuid_key, title_key) in _HIDDEN_KEYS.items():
            if self.hidden[uuid_key]:
                parents[parent_type] = RecordParent(uuid=self.hidden[uuid_key], title=self.hidden[title_key])
        return sync_prev_src(selection, parents)
