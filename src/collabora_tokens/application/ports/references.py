"""Ports for resolving and serializing entity references."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

UserSerializer = Callable[[object], str]


class ReferenceResolverPort(Protocol):
    """Maps opaque identifiers to the handles the authorization oracle expects."""

    def resolve_attachment(self, file_id: str) -> object:
        """Return the document owning the attachment identified by ``file_id``."""

    def resolve_user(self, user: str) -> object:
        """Return the user handle for a serialized user identity."""


__all__ = ["ReferenceResolverPort", "UserSerializer"]
