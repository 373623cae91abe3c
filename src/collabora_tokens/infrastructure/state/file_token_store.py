"""In-memory implementation of the file token store port."""

from __future__ import annotations

from threading import Lock

from collabora_tokens.application.ports.file_token_store import FileTokenStorePort
from collabora_tokens.domain.file_token import FileToken


class InMemoryFileTokenStore(FileTokenStorePort):
    """Stores file tokens in memory for the lifetime of the process."""

    def __init__(self) -> None:
        self._tokens: dict[str, FileToken] = {}
        self._by_owner: dict[tuple[str, str], str] = {}
        self._lock = Lock()

    def get(self, identity: str) -> FileToken | None:
        with self._lock:
            return self._tokens.get(identity)

    def find(self, user: str, file_id: str) -> FileToken | None:
        with self._lock:
            identity = self._by_owner.get((user, file_id))
            if identity is None:
                return None
            return self._tokens.get(identity)

    def add(self, token: FileToken) -> None:
        owner = (token.user, token.file_id)
        with self._lock:
            previous = self._by_owner.get(owner)
            if previous is not None and previous != token.identity:
                self._tokens.pop(previous, None)
            self._tokens[token.identity] = token
            self._by_owner[owner] = token.identity

    def remove(self, identity: str) -> None:
        with self._lock:
            token = self._tokens.pop(identity, None)
            if token is None:
                return
            owner = (token.user, token.file_id)
            if self._by_owner.get(owner) == identity:
                del self._by_owner[owner]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


__all__ = ["InMemoryFileTokenStore"]
