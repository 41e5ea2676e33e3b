"""
Validation utilities for file uploads and inputs.
"""
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from werkzeug.utils import secure_filename as werkzeug_secure_filename

EMPLOYEE_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_.\-]+$')
MIN_PASSWORD_LENGTH = 6


class ValidationError(Exception):
    """Validation error exception carrying the offending field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {'field': self.field, 'msg': str(self)}


def error_response_body(errors: Iterable[ValidationError]) -> Dict[str, List[Dict[str, Any]]]:
    """Shape a list of validation errors for a 400 response."""
    return {'errors': [e.to_dict() for e in errors]}


def require_text(data: Dict[str, Any], field: str, message: Optional[str] = None) -> str:
    """
    Return the trimmed value of a required text field.

    Raises:
        ValidationError if missing or blank
    """
    value = data.get(field)
    if value is None or not str(value).strip():
        raise ValidationError(message or f"{field} is required", field)
    return str(value).strip()


def validate_choice(value: str, allowed: Iterable[str], field: str) -> str:
    """
    Validate that value is one of the allowed choices.

    Raises:
        ValidationError if invalid
    """
    allowed = list(allowed)
    if value not in allowed:
        raise ValidationError(
            f"Invalid value '{value}'. Allowed: {', '.join(allowed)}", field
        )
    return value


def validate_date(value: str, field: str = 'fileDate') -> str:
    """
    Validate a YYYY-MM-DD date string.

    Raises:
        ValidationError if not a real calendar date
    """
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", field)
    return value


def validate_mimetype(mimetype: Optional[str], allowed_mimetypes: Set[str]) -> bool:
    """
    Validate an uploaded file's mimetype.

    Raises:
        ValidationError if not an Excel mimetype
    """
    if (mimetype or '').split(';')[0].strip() not in allowed_mimetypes:
        raise ValidationError("Only Excel files are allowed", 'file')
    return True


def validate_file_size(size_bytes: int, max_size_mb: int) -> bool:
    """
    Validate file size.

    Raises:
        ValidationError if too large
    """
    max_bytes = max_size_mb * 1024 * 1024
    if size_bytes > max_bytes:
        raise ValidationError(f"File too large. Maximum size is {max_size_mb}MB.", 'file')
    return True


def validate_employee_code(employee_code: str) -> str:
    """
    Validate an employee code. ':' is reserved as the token separator.

    Raises:
        ValidationError if invalid
    """
    if not EMPLOYEE_CODE_PATTERN.match(employee_code or ''):
        raise ValidationError(
            "Employee code can only contain letters, digits, '.', '_' and '-'",
            'employeeCode'
        )
    return employee_code


def validate_password(password: Optional[str], field: str = 'password') -> str:
    """
    Validate password length.

    Raises:
        ValidationError if too short
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field
        )
    return password


def parse_int_arg(value: Optional[str], field: str, default: int,
                  minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    """
    Parse an integer query argument within bounds.

    Raises:
        ValidationError if not an integer or out of range
    """
    if value is None or value == '':
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", field)
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} must be at most {maximum}", field)
    return number


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for use inside a storage key.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename, never empty
    """
    safe_name = werkzeug_secure_filename(filename or '')
    if not safe_name or safe_name == '.':
        suffix = Path(filename or '').suffix.lower()
        if not re.match(r'^\.[a-z0-9]+$', suffix):
            suffix = ''
        safe_name = f"upload{suffix}"
    return safe_name
