"""DTOs returned by the file token registry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from collabora_tokens.domain.file_token import FileToken


@dataclass(frozen=True)
class FileTokenGrant:
    """Point-in-time view of a file token handed to callers."""

    identity: str
    user: str
    file_id: str
    issued_at: datetime
    expires_at: datetime
    usage: int
    has_view: bool
    has_edit: bool

    @classmethod
    def from_token(cls, token: FileToken) -> FileTokenGrant:
        return cls(
            identity=token.identity,
            user=token.user,
            file_id=token.file_id,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
            usage=token.usage,
            has_view=token.has_view,
            has_edit=token.has_edit,
        )

    @property
    def can_write(self) -> bool:
        return self.has_edit

    @property
    def can_access(self) -> bool:
        return self.has_view or self.has_edit


__all__ = ["FileTokenGrant"]
