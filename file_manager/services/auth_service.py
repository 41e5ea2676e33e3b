"""
Bearer token and password handling.

Tokens have the form ``<employeeCode>:<milliseconds since epoch>``. They are
not signed: possession of a well-formed, unexpired token for an active user
is what authenticates a request.
"""
import time
from typing import Optional, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

HASH_PREFIXES = ('pbkdf2:', 'scrypt:')


class AuthError(Exception):
    """Authentication failure carrying the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(message)
        self.status_code = status_code


def _now_ms() -> int:
    return int(time.time() * 1000)


def issue_token(employee_code: str, now_ms: Optional[int] = None) -> str:
    """Create a bearer token for an employee."""
    return f"{employee_code}:{now_ms if now_ms is not None else _now_ms()}"


def extract_bearer_token(authorization_header: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        AuthError(401) if the header or token is missing
    """
    parts = (authorization_header or '').split(' ')
    token = parts[1] if len(parts) > 1 else ''
    if not token:
        raise AuthError('Access token required', 401)
    return token


def parse_token(token: str, ttl_hours: int, now_ms: Optional[int] = None) -> str:
    """
    Validate a token's shape and age.

    Args:
        token: Raw token string
        ttl_hours: Token lifetime in hours
        now_ms: Current time override

    Returns:
        The employee code the token was issued for

    Raises:
        AuthError(403) if malformed or expired
    """
    parts = token.split(':')
    if len(parts) != 2 or not parts[0]:
        raise AuthError('Invalid token format')
    try:
        issued_at = int(parts[1])
    except ValueError:
        raise AuthError('Invalid token format')

    current = now_ms if now_ms is not None else _now_ms()
    if current - issued_at > ttl_hours * 60 * 60 * 1000:
        raise AuthError('Token expired')
    return parts[0]


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def is_password_hash(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(HASH_PREFIXES)


def verify_password(stored: Optional[str], candidate: str) -> Tuple[bool, bool]:
    """
    Check a password against the stored value.

    Accounts created before hashing was introduced hold plaintext; those
    match by equality and are flagged for re-hashing.

    Returns:
        (matches, needs_rehash)
    """
    if not stored:
        return False, False
    if is_password_hash(stored):
        try:
            return check_password_hash(stored, candidate or ''), False
        except ValueError:
            # Malformed hash string
            return False, False
    matches = stored == candidate
    return matches, matches
