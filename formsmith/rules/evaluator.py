"""Validation Rule Evaluator: one field's rules against one value.

Checks run in a fixed order.  ``required`` is checked first and, when it
fails, ends evaluation for the field.  The remaining checks fold: each
failing check overwrites the message of the previous one, so the last
failing rule wins.

This module is pure: no logging, no I/O, no exceptions for odd input.
Values that do not parse as numbers or dates simply skip range checks.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Callable, Optional

from ..schemas.field import (
    DateRules,
    FieldDefinition,
    NumberRules,
    TextareaRules,
    TextRules,
    TypedRules,
    rules_for,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DIGIT_PATTERN = re.compile(r"\d")
PASSWORD_MIN_LENGTH = 8

RuleCheck = Callable[[FieldDefinition, TypedRules, str], Optional[str]]


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def is_valid_password(value: str) -> bool:
    return len(value) >= PASSWORD_MIN_LENGTH and DIGIT_PATTERN.search(value) is not None


def _format_number(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    return str(number)


def _parse_number(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


# -- required ------------------------------------------------------------


def check_required(field: FieldDefinition, value: str) -> Optional[str]:
    """Required-field message, or ``None`` when satisfied or not required."""
    if not field.is_required:
        return None
    if field.type == "checkbox" and value != "true":
        return f"{field.message_label} is required"
    if not value.strip():
        return f"{field.message_label} is required"
    return None


# -- length (text, textarea) ---------------------------------------------


def _check_min_length(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if isinstance(rules, (TextRules, TextareaRules)) and rules.min_length is not None:
        if len(value) < rules.min_length:
            return f"{field.label} must be at least {rules.min_length} characters"
    return None


def _check_max_length(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if isinstance(rules, (TextRules, TextareaRules)) and rules.max_length is not None:
        if len(value) > rules.max_length:
            return f"{field.label} must be at most {rules.max_length} characters"
    return None


# -- format (text) ---------------------------------------------------------


def _check_email(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if isinstance(rules, TextRules) and rules.email and value and not is_valid_email(value):
        return f"{field.label} must be a valid email"
    return None


def _check_password(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if isinstance(rules, TextRules) and rules.password and value and not is_valid_password(value):
        return f"{field.label} must be at least {PASSWORD_MIN_LENGTH} characters and contain a number"
    return None


# -- ranges (number, date) -------------------------------------------------


def _check_min_number(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if not isinstance(rules, NumberRules) or rules.min_number is None or not value.strip():
        return None
    number = _parse_number(value)
    if number is not None and number < rules.min_number:
        return f"{field.label} must be at least {_format_number(rules.min_number)}"
    return None


def _check_max_number(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if not isinstance(rules, NumberRules) or rules.max_number is None or not value.strip():
        return None
    number = _parse_number(value)
    if number is not None and number > rules.max_number:
        return f"{field.label} must be at most {_format_number(rules.max_number)}"
    return None


def _check_min_date(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if not isinstance(rules, DateRules) or not rules.min_date or not value:
        return None
    entered, bound = _parse_date(value), _parse_date(rules.min_date)
    if entered is not None and bound is not None and entered < bound:
        return f"{field.label} must be on or after {rules.min_date}"
    return None


def _check_max_date(field: FieldDefinition, rules: TypedRules, value: str) -> Optional[str]:
    if not isinstance(rules, DateRules) or not rules.max_date or not value:
        return None
    entered, bound = _parse_date(value), _parse_date(rules.max_date)
    if entered is not None and bound is not None and entered > bound:
        return f"{field.label} must be on or before {rules.max_date}"
    return None


FORMAT_CHECKS: tuple[RuleCheck, ...] = (
    _check_min_length,
    _check_max_length,
    _check_email,
    _check_password,
)

RANGE_CHECKS: tuple[RuleCheck, ...] = (
    _check_min_number,
    _check_max_number,
    _check_min_date,
    _check_max_date,
)


def evaluate_field(
    field: FieldDefinition,
    value: Optional[str],
    enforce_ranges: bool = True,
) -> Optional[str]:
    """Evaluate every applicable rule of *field* against *value*.

    Args:
        field: A non-derived field definition.  Derived fields always pass.
        value: The current value; ``None`` is treated as ``""``.
        enforce_ranges: Also apply number and date bounds.

    Returns:
        The error message of the last failing rule, or ``None``.
    """
    if field.is_derived:
        return None

    value = value or ""

    required_error = check_required(field, value)
    if required_error is not None:
        return required_error

    rules = rules_for(field)
    checks = FORMAT_CHECKS + RANGE_CHECKS if enforce_ranges else FORMAT_CHECKS

    error: Optional[str] = None
    for check in checks:
        message = check(field, rules, value)
        if message is not None:
            error = message
    return error
