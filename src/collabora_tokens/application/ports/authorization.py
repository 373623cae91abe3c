"""Port describing the authorization oracle."""

from __future__ import annotations

from typing import Protocol

from collabora_tokens.domain.file_token import AccessRight


class AuthorizationPort(Protocol):
    """Answers whether a user holds a right on a document."""

    def has_access(self, right: AccessRight, user: object, document: object) -> bool:
        """Return ``True`` when ``user`` currently holds ``right`` on ``document``."""


__all__ = ["AuthorizationPort"]
