"""Per-field validation rules."""

from .evaluator import (
    check_required,
    evaluate_field,
    is_valid_email,
    is_valid_password,
)

__all__ = [
    "check_required",
    "evaluate_field",
    "is_valid_email",
    "is_valid_password",
]
