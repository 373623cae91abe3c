"""File token lifecycle primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from hashlib import blake2b

GUEST_USER = "XWiki.XWikiGuest"


class AccessRight(str, Enum):
    """Rights cached on a file token."""

    VIEW = "view"
    EDIT = "edit"


def derive_token_identity(user: str, file_id: str, issued_at: datetime, timeout_seconds: int) -> str:
    """Return the opaque identity for a token issued to ``user`` on ``file_id``."""
    material = f"{user}\x1f{file_id}\x1f{issued_at.isoformat()}\x1f{timeout_seconds}"
    digest = blake2b(material.encode("utf-8"), digest_size=32)
    return digest.hexdigest()


@dataclass(slots=True)
class FileToken:
    """Editing session of one user on one file."""

    user: str
    file_id: str
    issued_at: datetime
    timeout_seconds: int
    has_view: bool
    has_edit: bool
    usage: int = 1
    identity: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.user:
            raise ValueError("user must be non-empty")
        if not self.file_id:
            raise ValueError("file_id must be non-empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.issued_at.tzinfo is None:
            raise ValueError("issued_at must be timezone aware")
        if self.usage < 1:
            raise ValueError("usage must be at least 1")
        self.identity = derive_token_identity(self.user, self.file_id, self.issued_at, self.timeout_seconds)

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + timedelta(seconds=self.timeout_seconds)

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` once ``now`` is past the expiry instant."""
        return now > self.expires_at

    def owned_by(self, user: str, file_id: str) -> bool:
        return self.user == user and self.file_id == file_id

    def grants(self, right: AccessRight) -> bool:
        match right:
            case AccessRight.VIEW:
                return self.has_view
            case AccessRight.EDIT:
                return self.has_edit

    def __str__(self) -> str:
        return self.identity


__all__ = [
    "AccessRight",
    "FileToken",
    "GUEST_USER",
    "derive_token_identity",
]
