"""Composable field validators.

A validator is a callable taking the raw field text and raising
:class:`ValueError` with a user-facing message when the text is
rejected.  Fields run their chain through :func:`run_validator`, which
turns the exception into the error string shown under the field.

Example::

    name = multiple(required("title is required"), max_length(80))
    run_validator(name, "")      # -> "title is required"
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

Validator = Callable[[str], None]

DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")
DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")

_EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def run_validator(validator: Optional[Validator], value: str) -> str:
    """Run *validator* against *value* and return the error text ("" if valid)."""
    if validator is None:
        return ""
    try:
        validator(value)
    except ValueError as exc:
        return str(exc)
    return ""


def multiple(*validators: Validator) -> Validator:
    """Chain *validators*; the first rejection wins."""

    def _validate(value: str) -> None:
        for validate in validators:
            validate(value)

    return _validate


def required(msg: str = "required") -> Validator:
    def _validate(value: str) -> None:
        if value == "":
            raise ValueError(msg)

    return _validate


def max_length(length: int) -> Validator:
    def _validate(value: str) -> None:
        if len(value) > length:
            raise ValueError(f"exceeds max length: {length}")

    return _validate


def reach_max_length(length: int) -> Validator:
    """Warn once the text sits exactly at the character limit."""

    def _validate(value: str) -> None:
        if len(value) == length:
            raise ValueError(f"reached max length: {length}")

    return _validate


def min_length(length: int) -> Validator:
    def _validate(value: str) -> None:
        if len(value) < length:
            raise ValueError("too short")

    return _validate


def parse_date(value: str, formats: Iterable[str] = DATE_FORMATS) -> date:
    """Parse *value* with the first matching format; raise ``ValueError`` otherwise."""
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError("invalid date format")


def parse_datetime(value: str, formats: Iterable[str] = DATETIME_FORMATS) -> datetime:
    """Parse *value* as a naive local timestamp."""
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError("invalid datetime format")


def date_format(formats: Sequence[str] = DATE_FORMATS) -> Validator:
    """Accept empty input or text matching one of *formats*."""

    def _validate(value: str) -> None:
        if value == "":
            return
        for fmt in formats:
            try:
                datetime.strptime(value, fmt)
                return
            except ValueError:
                continue
        raise ValueError("invalid format")

    return _validate


def date_after(bound: date) -> Validator:
    """Reject dates earlier than *bound*; empty input is accepted."""

    def _validate(value: str) -> None:
        if value == "":
            return
        parsed = parse_date(value)
        if parsed < bound:
            raise ValueError(f"must be after {bound.isoformat()}")

    return _validate


def email() -> Validator:
    def _validate(value: str) -> None:
        if not _EMAIL_RX.match(value):
            raise ValueError("invalid email format")

    return _validate


def password_length(minimum: int, maximum: int) -> Validator:
    """Length check on the NFKC-normalised password."""
    check = multiple(min_length(minimum), max_length(maximum))

    def _validate(value: str) -> None:
        check(unicodedata.normalize("NFKC", value))

    return _validate


def match(peer: Callable[[], str], msg: str) -> Validator:
    """Require the value to equal *peer()* at validation time.

    *peer* is usually the bound ``value`` getter of another field, which
    makes the check follow later edits of that field.
    """

    def _validate(value: str) -> None:
        if value != peer():
            raise ValueError(msg)

    return _validate
