"""Wiring helpers for hosts that embed the file token registry."""

from __future__ import annotations

from datetime import UTC, datetime

from collabora_tokens.application.file_token_manager import FileTokenManager
from collabora_tokens.application.ports.authorization import AuthorizationPort
from collabora_tokens.application.ports.references import ReferenceResolverPort, UserSerializer
from collabora_tokens.config.collabora import CollaboraSettings, load_collabora_settings
from collabora_tokens.infrastructure.state.file_token_store import InMemoryFileTokenStore


def build_file_token_manager(
    authorization: AuthorizationPort,
    references: ReferenceResolverPort,
    *,
    settings: CollaboraSettings | None = None,
    serialize_user: UserSerializer | None = None,
) -> FileTokenManager:
    """Build the process-wide token registry backed by in-memory storage."""
    return FileTokenManager(
        InMemoryFileTokenStore(),
        authorization,
        references,
        settings=settings or load_collabora_settings(),
        clock=_clock,
        serialize_user=serialize_user,
    )


def _clock() -> datetime:
    return datetime.now(UTC)


__all__ = ["build_file_token_manager"]
