"""File token registry use case shared by the editor endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import datetime, timedelta
from threading import Lock

from opentelemetry import trace

from collabora_tokens.application.dto.file_token import FileTokenGrant
from collabora_tokens.application.ports.authorization import AuthorizationPort
from collabora_tokens.application.ports.file_token_store import FileTokenStorePort
from collabora_tokens.application.ports.references import ReferenceResolverPort, UserSerializer
from collabora_tokens.config.collabora import CollaboraSettings
from collabora_tokens.domain.file_token import AccessRight, FileToken
from collabora_tokens.errors import FileTokenNotFoundError

logger = logging.getLogger("collabora_tokens.file_tokens")


class FileTokenManager:
    """Issues, reuses and releases file tokens for (user, file) pairs.

    Every public operation holds the manager lock for its whole duration, so a
    usage update or a token creation is never interleaved with another request.
    Existing tokens have their cached rights re-checked against the
    authorization oracle each time they are looked up by owner.
    """

    def __init__(
        self,
        store: FileTokenStorePort,
        authorization: AuthorizationPort,
        references: ReferenceResolverPort,
        *,
        settings: CollaboraSettings,
        clock: Callable[[], datetime],
        serialize_user: UserSerializer | None = None,
        lock: AbstractContextManager[object] | None = None,
    ) -> None:
        self._store = store
        self._authorization = authorization
        self._references = references
        self._settings = settings
        self._clock = clock
        self._serialize_user = serialize_user or str
        self._lock = lock if lock is not None else Lock()
        self._tracer = trace.get_tracer("collabora_tokens.file_tokens")
        self._last_issued_at: datetime | None = None

    def user_key(self, user: object | None) -> str:
        """Return the serialized identity used to own tokens for ``user``."""
        if user is None:
            return self._settings.guest_user
        return self._serialize_user(user)

    def acquire(
        self,
        user: object | None,
        file_id: str,
        timeout_seconds: int | None = None,
    ) -> FileTokenGrant:
        """Return the live token for ``user`` on ``file_id``, creating one when needed."""
        user_key = self.user_key(user)
        timeout = self._settings.token_timeout_seconds if timeout_seconds is None else timeout_seconds
        with self._tracer.start_as_current_span(
            "file_token.acquire",
            attributes={"file_token.file_id": file_id},
        ) as span, self._lock:
            token = self._find_existing(user_key, file_id)
            if token is not None:
                if token.is_expired(self._clock()):
                    self._store.remove(token.identity)
                    logger.debug(
                        "expired token removed",
                        extra={"data": {"file_id": file_id, "user": user_key}},
                    )
                else:
                    token.usage += 1
                    logger.debug(
                        "existing token reused",
                        extra={"data": {"file_id": file_id, "user": user_key, "usage": token.usage}},
                    )
                    span.set_attribute("file_token.action", "reused")
                    return FileTokenGrant.from_token(token)

            token = self._create(user_key, file_id, timeout)
            span.set_attribute("file_token.action", "created")
            return FileTokenGrant.from_token(token)

    def is_invalid(self, identity: str) -> bool:
        """Return ``True`` when ``identity`` is unknown or its token has expired."""
        with self._lock:
            token = self._store.get(identity)
            return token is None or token.is_expired(self._clock())

    def release(self, user: object | None, file_id: str) -> int:
        """Drop one usage of the token for ``user`` on ``file_id``; return the remaining usages."""
        user_key = self.user_key(user)
        with self._tracer.start_as_current_span(
            "file_token.release",
            attributes={"file_token.file_id": file_id},
        ) as span, self._lock:
            token = self._find_existing(user_key, file_id)
            if token is None:
                span.set_attribute("file_token.action", "missing")
                return 0

            if token.usage > 1:
                token.usage -= 1
                logger.debug(
                    "token usage released",
                    extra={"data": {"file_id": file_id, "user": user_key, "usage": token.usage}},
                )
                span.set_attribute("file_token.action", "decremented")
                return token.usage

            self._store.remove(token.identity)
            logger.debug("token deleted", extra={"data": {"file_id": file_id, "user": user_key}})
            span.set_attribute("file_token.action", "deleted")
            return 0

    def get_user(self, identity: str) -> str:
        """Return the serialized user owning ``identity``.

        Raises:
            FileTokenNotFoundError: ``identity`` is not registered. Call
                :meth:`is_invalid` first.
        """
        with self._lock:
            return self._require(identity).user

    def get_user_reference(self, identity: str) -> object:
        """Return the resolved user handle owning ``identity``.

        Raises:
            FileTokenNotFoundError: ``identity`` is not registered. Call
                :meth:`is_invalid` first.
        """
        with self._lock:
            user = self._require(identity).user
        return self._references.resolve_user(user)

    def has_write_access(self, identity: str) -> bool:
        """Return the cached edit right of ``identity``.

        Raises:
            FileTokenNotFoundError: ``identity`` is not registered. Call
                :meth:`is_invalid` first.
        """
        with self._lock:
            return self._require(identity).grants(AccessRight.EDIT)

    def has_any_access(self, identity: str) -> bool:
        """Return ``True`` when ``identity`` caches either the view or the edit right.

        Raises:
            FileTokenNotFoundError: ``identity`` is not registered. Call
                :meth:`is_invalid` first.
        """
        with self._lock:
            token = self._require(identity)
            return token.grants(AccessRight.VIEW) or token.grants(AccessRight.EDIT)

    def _require(self, identity: str) -> FileToken:
        token = self._store.get(identity)
        if token is None:
            raise FileTokenNotFoundError(identity)
        return token

    def _find_existing(self, user: str, file_id: str) -> FileToken | None:
        token = self._store.find(user, file_id)
        if token is not None:
            self._refresh_rights(token)
        return token

    def _refresh_rights(self, token: FileToken) -> None:
        document = self._references.resolve_attachment(token.file_id)
        user_handle = self._references.resolve_user(token.user)

        has_view = self._authorization.has_access(AccessRight.VIEW, user_handle, document)
        if has_view != token.has_view:
            token.has_view = has_view
            logger.debug(
                "view right changed for existing token",
                extra={"data": {"file_id": token.file_id, "has_view": has_view}},
            )

        has_edit = self._authorization.has_access(AccessRight.EDIT, user_handle, document)
        if has_edit != token.has_edit:
            token.has_edit = has_edit
            logger.debug(
                "edit right changed for existing token",
                extra={"data": {"file_id": token.file_id, "has_edit": has_edit}},
            )

    def _next_issued_at(self) -> datetime:
        # Issue times strictly increase so a pair never gets a previous identity back.
        issued_at = self._clock()
        if self._last_issued_at is not None and issued_at <= self._last_issued_at:
            issued_at = self._last_issued_at + timedelta(microseconds=1)
        self._last_issued_at = issued_at
        return issued_at

    def _create(self, user: str, file_id: str, timeout_seconds: int) -> FileToken:
        document = self._references.resolve_attachment(file_id)
        user_handle = self._references.resolve_user(user)
        token = FileToken(
            user=user,
            file_id=file_id,
            issued_at=self._next_issued_at(),
            timeout_seconds=timeout_seconds,
            has_view=self._authorization.has_access(AccessRight.VIEW, user_handle, document),
            has_edit=self._authorization.has_access(AccessRight.EDIT, user_handle, document),
        )
        self._store.add(token)
        logger.debug(
            "new token created",
            extra={"data": {"file_id": file_id, "user": user, "timeout_seconds": timeout_seconds}},
        )
        return token


__all__ = ["FileTokenManager"]
