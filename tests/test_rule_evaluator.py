"""Tests for the Validation Rule Evaluator."""

from __future__ import annotations

import pytest

from formsmith.rules.evaluator import evaluate_field, is_valid_email, is_valid_password
from formsmith.schemas.field import FieldDefinition, ValidationRules


# -- helpers -------------------------------------------------------------


def _text(label: str = "Name", required: bool = False, **rules) -> FieldDefinition:
    return FieldDefinition(
        id="1",
        type="text",
        label=label,
        required=required,
        validations=ValidationRules(**rules) if rules else None,
    )


# -- required ----------------------------------------------------------------


class TestRequired:
    @pytest.mark.parametrize("value", ["", "   ", "\t\n", None])
    def test_empty_values_fail(self, value):
        assert evaluate_field(_text(required=True), value) == "Name is required"

    def test_populated_value_passes(self):
        assert evaluate_field(_text(required=True), "Ann") is None

    def test_label_fallback(self):
        assert evaluate_field(_text(label="", required=True), "") == "Field is required"

    @pytest.mark.parametrize("value", ["false", "", "yes", "TRUE"])
    def test_checkbox_requires_true(self, value):
        f = FieldDefinition(id="c", type="checkbox", label="Agree", required=True)
        assert evaluate_field(f, value) == "Agree is required"

    def test_checkbox_checked_passes(self):
        f = FieldDefinition(id="c", type="checkbox", label="Agree", required=True)
        assert evaluate_field(f, "true") is None

    def test_not_required_empty_passes(self):
        assert evaluate_field(_text(), "") is None

    def test_required_failure_ends_evaluation(self):
        f = _text(required=True, min_length=3, email=True)
        assert evaluate_field(f, "") == "Name is required"

    def test_derived_field_always_passes(self):
        f = FieldDefinition(
            id="d", type="text", label="Total", required=True, is_derived=True,
            validations=ValidationRules(min_length=50),
        )
        assert evaluate_field(f, "") is None


# -- length ------------------------------------------------------------------


class TestLength:
    def test_too_short(self):
        assert evaluate_field(_text(min_length=3, max_length=5), "ab") == (
            "Name must be at least 3 characters"
        )

    def test_too_long(self):
        assert evaluate_field(_text(min_length=3, max_length=5), "abcdef") == (
            "Name must be at most 5 characters"
        )

    @pytest.mark.parametrize("value", ["abc", "abcd", "abcde"])
    def test_within_bounds(self, value):
        assert evaluate_field(_text(min_length=3, max_length=5), value) is None

    def test_textarea_lengths_apply(self):
        f = FieldDefinition(
            id="t", type="textarea", label="Bio", validations=ValidationRules(max_length=4)
        )
        assert evaluate_field(f, "too long") == "Bio must be at most 4 characters"

    def test_optional_empty_value_still_checked_for_min_length(self):
        assert evaluate_field(_text(min_length=2), "") == "Name must be at least 2 characters"

    def test_length_rules_ignored_on_number(self):
        f = FieldDefinition(
            id="n", type="number", label="Age", validations=ValidationRules(min_length=3)
        )
        assert evaluate_field(f, "7") is None


# -- email / password --------------------------------------------------------


class TestEmail:
    def test_valid(self):
        assert evaluate_field(_text(label="Email", email=True), "a@b.com") is None

    def test_invalid(self):
        assert evaluate_field(_text(label="Email", email=True), "abc") == "Email must be a valid email"

    def test_empty_passes(self):
        assert evaluate_field(_text(label="Email", email=True), "") is None

    @pytest.mark.parametrize("value", ["a b@c.com", "a@b", "@b.com", "a@@b.com"])
    def test_shape_check(self, value):
        assert not is_valid_email(value)

    def test_email_ignored_on_textarea(self):
        f = FieldDefinition(id="t", type="textarea", label="Notes", validations=ValidationRules(email=True))
        assert evaluate_field(f, "not an email") is None


class TestPassword:
    def test_valid(self):
        assert evaluate_field(_text(label="Password", password=True), "abcdefg1") is None

    def test_no_digit(self):
        assert evaluate_field(_text(label="Password", password=True), "abcdefgh") == (
            "Password must be at least 8 characters and contain a number"
        )

    def test_too_short(self):
        assert evaluate_field(_text(label="Password", password=True), "ab1") == (
            "Password must be at least 8 characters and contain a number"
        )

    def test_helper(self):
        assert is_valid_password("12345678")
        assert not is_valid_password("1234567")


# -- fold order --------------------------------------------------------------


class TestFold:
    def test_last_failing_rule_wins(self):
        f = _text(label="Email", min_length=10, email=True)
        # fails min length, then email; email is checked later
        assert evaluate_field(f, "a@b") == "Email must be a valid email"

    def test_password_overrides_max_length(self):
        f = _text(label="Pin", max_length=4, password=True)
        assert evaluate_field(f, "abcdef") == (
            "Pin must be at least 8 characters and contain a number"
        )

    def test_earlier_failure_kept_when_later_pass(self):
        f = _text(label="Email", min_length=10, email=True)
        assert evaluate_field(f, "a@b.co") == "Email must be at least 10 characters"


# -- ranges ------------------------------------------------------------------


class TestNumberRange:
    def _age(self) -> FieldDefinition:
        return FieldDefinition(
            id="n", type="number", label="Age",
            validations=ValidationRules(min_number=18, max_number=65.5),
        )

    def test_below_min(self):
        assert evaluate_field(self._age(), "17") == "Age must be at least 18"

    def test_above_max(self):
        assert evaluate_field(self._age(), "70") == "Age must be at most 65.5"

    def test_in_range(self):
        assert evaluate_field(self._age(), "30") is None

    def test_non_numeric_passes_through(self):
        assert evaluate_field(self._age(), "abc") is None

    def test_empty_passes(self):
        assert evaluate_field(self._age(), "") is None

    def test_enforcement_can_be_disabled(self):
        assert evaluate_field(self._age(), "17", enforce_ranges=False) is None


class TestDateRange:
    def _date(self) -> FieldDefinition:
        return FieldDefinition(
            id="d", type="date", label="Start",
            validations=ValidationRules(min_date="2024-01-01", max_date="2024-12-31"),
        )

    def test_before_min(self):
        assert evaluate_field(self._date(), "2023-12-31") == "Start must be on or after 2024-01-01"

    def test_after_max(self):
        assert evaluate_field(self._date(), "2025-01-01") == "Start must be on or before 2024-12-31"

    def test_bounds_inclusive(self):
        assert evaluate_field(self._date(), "2024-01-01") is None
        assert evaluate_field(self._date(), "2024-12-31") is None

    def test_unparseable_passes(self):
        assert evaluate_field(self._date(), "next tuesday") is None
