"""Tests for the composable field validators."""

from __future__ import annotations

from datetime import date

import pytest

from yatijapp_tui import validator as v


class TestBasicValidators:
    def test_required(self) -> None:
        check = v.required("title is required")
        assert v.run_validator(check, "") == "title is required"
        assert v.run_validator(check, "x") == ""

    def test_length_checks(self) -> None:
        assert v.run_validator(v.max_length(3), "abcd") == "exceeds max length: 3"
        assert v.run_validator(v.max_length(3), "abc") == ""
        assert v.run_validator(v.min_length(2), "a") == "too short"
        assert v.run_validator(v.reach_max_length(3), "abc") == "reached max length: 3"
        assert v.run_validator(v.reach_max_length(3), "ab") == ""

    def test_first_rejection_wins(self) -> None:
        check = v.multiple(v.required("name is required"), v.min_length(5))
        assert v.run_validator(check, "") == "name is required"
        assert v.run_validator(check, "abc") == "too short"

    def test_no_validator(self) -> None:
        assert v.run_validator(None, "") == ""

    @pytest.mark.parametrize("value", ["ann@example.com", "a.b+c@sub.example.org"])
    def test_email_accepts(self, value: str) -> None:
        assert v.run_validator(v.email(), value) == ""

    @pytest.mark.parametrize("value", ["", "ann", "ann@", "@example.com", "a b@example.com"])
    def test_email_rejects(self, value: str) -> None:
        assert v.run_validator(v.email(), value) == "invalid email format"

    def test_password_length_normalizes(self) -> None:
        check = v.password_length(8, 72)
        assert v.run_validator(check, "short") == "too short"
        assert v.run_validator(check, "long enough") == ""
        assert v.run_validator(check, "x" * 73) == "exceeds max length: 72"

    def test_match_follows_peer(self) -> None:
        peer = {"value": "one"}
        check = v.match(lambda: peer["value"], "password not match")
        assert v.run_validator(check, "one") == ""
        peer["value"] = "two"
        assert v.run_validator(check, "one") == "password not match"


class TestDates:
    def test_date_format(self) -> None:
        check = v.date_format()
        assert v.run_validator(check, "") == ""
        assert v.run_validator(check, "2025-06-01") == ""
        assert v.run_validator(check, "2025/06/01") == ""
        assert v.run_validator(check, "06-01-2025") == "invalid format"

    def test_datetime_format(self) -> None:
        check = v.date_format(v.DATETIME_FORMATS)
        assert v.run_validator(check, "2025-06-01 10:30:00") == ""
        assert v.run_validator(check, "2025-06-01") == "invalid format"

    def test_date_after(self) -> None:
        check = v.date_after(date(2025, 6, 9))
        assert v.run_validator(check, "2025-06-09") == ""
        assert v.run_validator(check, "2025-06-08") == "must be after 2025-06-09"
        assert v.run_validator(check, "") == ""

    def test_parse_helpers(self) -> None:
        assert v.parse_date("2025/06/01") == date(2025, 6, 1)
        assert v.parse_datetime("2025-06-01 10:30").hour == 10
        with pytest.raises(ValueError):
            v.parse_date("yesterday")
        with pytest.raises(ValueError):
            v.parse_datetime("noon")
