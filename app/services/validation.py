"""Form field validation for the account endpoints."""

from __future__ import annotations

import re
from dataclasses import dataclass

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NAME_RE = re.compile(r"^[a-zA-Z\s\-']+$")

MAX_EMAIL_LENGTH = 254
MAX_NAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    error: str | None = None


_OK = ValidationResult(valid=True)


def validate_email(email: str | None) -> ValidationResult:
    trimmed = (email or "").strip()
    if not trimmed:
        return ValidationResult(False, "Email is required")
    if len(trimmed) > MAX_EMAIL_LENGTH:
        return ValidationResult(False, "Email is too long")
    if not _EMAIL_RE.match(trimmed):
        return ValidationResult(False, "Please enter a valid email address")
    return _OK


def validate_name(name: str | None, field_name: str = "Name") -> ValidationResult:
    trimmed = (name or "").strip()
    if not trimmed:
        return ValidationResult(False, f"{field_name} is required")
    if len(trimmed) > MAX_NAME_LENGTH:
        return ValidationResult(False, f"{field_name} must be {MAX_NAME_LENGTH} characters or less")
    if not _NAME_RE.match(trimmed):
        return ValidationResult(
            False,
            f"{field_name} can only contain letters, spaces, hyphens, and apostrophes",
        )
    return _OK


def validate_password(password: str | None) -> ValidationResult:
    if not password:
        return ValidationResult(False, "Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        return ValidationResult(False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return _OK


def sanitize_input(value: str, max_length: int = MAX_EMAIL_LENGTH) -> str:
    """Trim, drop angle brackets and cap the length."""

    return re.sub(r"[<>]", "", value.strip())[:max_length]


def collect_field_errors(**results: ValidationResult) -> dict[str, str]:
    """Map field names to messages for every failed result."""

    return {name: result.error or "Invalid value" for name, result in results.items() if not result.valid}
