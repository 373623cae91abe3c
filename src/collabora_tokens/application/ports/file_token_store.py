"""Port describing file token storage."""

from __future__ import annotations

from typing import Protocol

from collabora_tokens.domain.file_token import FileToken


class FileTokenStorePort(Protocol):
    """Keeps issued file tokens addressable by identity and by owner."""

    def get(self, identity: str) -> FileToken | None:
        """Return the token stored under ``identity``."""

    def find(self, user: str, file_id: str) -> FileToken | None:
        """Return the token issued to ``user`` for ``file_id``, expired or not."""

    def add(self, token: FileToken) -> None:
        """Store ``token``, replacing any token held for the same owner."""

    def remove(self, identity: str) -> None:
        """Drop the token stored under ``identity``, if present."""

    def __len__(self) -> int:
        """Return the number of stored tokens."""


__all__ = ["FileTokenStorePort"]
