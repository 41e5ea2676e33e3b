"""
Data models for the application.
"""
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


class Roles:
    ADMIN = 'admin'
    USER = 'user'

    ALL = (ADMIN, USER)


class UserStatus:
    PENDING = 'pending'
    ACTIVE = 'active'
    REJECTED = 'rejected'
    TERMINATED = 'terminated'

    ALL = (PENDING, ACTIVE, REJECTED, TERMINATED)


# Fields that hold the binary payload and never leave the server in listings
PAYLOAD_FIELDS = ('file_buffer', 'blob_key')


@dataclass
class FileRecord:
    """Metadata for one uploaded spreadsheet."""
    id: str = ''
    filename: str = ''
    file_type: str = ''
    asset_type: str = ''
    client_code: str = ''
    file_date: str = ''
    file_size: int = 0
    content_type: str = ''
    uploaded_at: Optional[str] = None
    uploaded_by: str = ''
    blob_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class User:
    """Application user keyed by employee code."""
    employeeCode: str = ''
    name: str = ''
    mobile: str = ''
    password: str = ''
    role: str = Roles.USER
    status: str = UserStatus.PENDING
    createdAt: Optional[str] = None
    lastLogin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def public_file(record: Dict[str, Any]) -> Dict[str, Any]:
    """Strip payload fields from a stored file record."""
    return {k: v for k, v in record.items() if k not in PAYLOAD_FIELDS}


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the password from a stored user."""
    return {k: v for k, v in user.items() if k != 'password'}
