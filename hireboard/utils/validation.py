"""
Validation utilities for input validation.

Every helper raises ``ValidationError`` so the same rules apply whether the
caller is an HTTP route or a repository method.
"""
import re
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .error_handlers import ValidationError, get_error_message

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise ValidationError("Email too long (max 255 characters)")

    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError("Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required")

    if len(password) < 6:
        raise ValidationError(get_error_message("weak_password"))

    if len(password) > 128:
        raise ValidationError("Password too long (max 128 characters)")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required", details={"field": field_name})
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", details={"field": field_name})

    value = value.strip()

    if not value:
        if required:
            raise ValidationError(f"{field_name} cannot be empty", details={"field": field_name})
        return None

    if len(value) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} characters",
            details={"field": field_name},
        )

    if len(value) > max_length:
        raise ValidationError(
            f"{field_name} must not exceed {max_length} characters",
            details={"field": field_name},
        )

    if pattern and not re.match(pattern, value):
        raise ValidationError(f"{field_name} format is invalid", details={"field": field_name})

    return value


def validate_role(role: str) -> str:
    """Validate user role."""
    if not role or not isinstance(role, str):
        raise ValidationError("Role is required")

    role = role.strip().lower()
    valid_roles = ("candidate", "recruiter")

    if role not in valid_roles:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(valid_roles)}")

    return role


def validate_job_status(status: str | None) -> str:
    """Validate job status; accepts any casing and defaults to Open."""
    if not status:
        return "Open"

    normalized = status.strip().capitalize()
    valid_statuses = ("Open", "Closed")

    if normalized not in valid_statuses:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(valid_statuses)}")

    return normalized


def parse_scheduled_at(value: Any, tz: str | None = None) -> datetime:
    """
    Parse an interview date into an aware UTC datetime.

    Accepts datetimes or ISO 8601 strings ("2025-01-10T10:00", "...Z", "...+05:30").
    Naive values are interpreted in ``tz`` when given, otherwise UTC.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        raw = (value or "").strip() if isinstance(value, str) else ""
        if not raw:
            raise ValidationError(get_error_message("schedule_required"))
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(get_error_message("invalid_schedule")) from None

    if dt.tzinfo is None:
        if tz:
            try:
                dt = dt.replace(tzinfo=ZoneInfo(tz))
            except (ZoneInfoNotFoundError, ValueError):
                raise ValidationError(f"Unknown timezone: {tz}") from None
        else:
            dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def file_extension(filename: str) -> str:
    return PurePath(filename or "").suffix.lower()


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent directory traversal and other attacks."""
    if not filename:
        raise ValidationError("Filename is required")

    # Remove any path separators
    filename = filename.replace("/", "_").replace("\\", "_")

    # Remove any null bytes
    filename = filename.replace("\x00", "")

    # Remove directory traversal sequences
    filename = filename.replace("..", "_")

    # Remove leading dots to prevent hidden files
    filename = filename.lstrip(".")

    # Ensure it's not too long
    if len(filename) > 255:
        raise ValidationError("Filename too long")

    # Ensure it has some content
    if not filename or filename == "_":
        raise ValidationError("Invalid filename")

    return filename
