"""Bearer-token cache and the login/signup/logout/restore flow.

The token returned by login or signup is written to a small JSON file
(``~/.closetcare/session.json`` by default) and kept for
``token_ttl_days``.  Restoring a session reads the file and confirms the
token with ``GET /auth/me``; a token the server rejects is removed from
the cache, while network failures propagate and leave the cache intact.

Sessions hold the current token and pass it to every request explicitly;
nothing is installed as a process-wide default header.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from closetcare.api.auth import AsyncAuthAPI, AuthAPI
from closetcare.errors import ClosetcareAuthError, ClosetcareSessionError
from closetcare.models import AuthResult, SavedToken, User, parse_timestamp
from closetcare.observability import get_logger

log = get_logger("closetcare.session")


# ---------------------------------------------------------------------------
# Token cache
# ---------------------------------------------------------------------------

class TokenStore:
    """A JSON file holding one bearer token and its expiry.

    Parameters
    ----------
    path:
        Location of the cache file.  Parent directories are created on
        save.
    ttl_days:
        How long a saved token stays valid.
    """

    def __init__(self, path: str | Path, ttl_days: int = 7) -> None:
        self.path = Path(path).expanduser()
        self.ttl = timedelta(days=ttl_days)

    def load(self, now: datetime | None = None) -> SavedToken | None:
        """Return the saved token, or ``None`` if absent or expired.

        An expired token is deleted from disk.

        Raises
        ------
        ClosetcareSessionError
            If the file exists but cannot be read or is malformed.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise ClosetcareSessionError(
                message=f"Cannot read session file: {exc}",
                context={"path": str(self.path)},
                cause=exc,
            ) from exc

        saved = self._parse(raw)
        if saved.is_expired(now):
            log.info(
                "saved token expired",
                extra={"extra_fields": {"path": str(self.path)}},
            )
            self.clear()
            return None
        return saved

    def save(self, token: str, now: datetime | None = None) -> SavedToken:
        """Persist *token* with a fresh expiry and return the stored record."""
        now = now or datetime.now(timezone.utc)
        saved = SavedToken(token=token, saved_at=now, expires_at=now + self.ttl)
        body = {
            "token": saved.token,
            "saved_at": saved.saved_at.isoformat(),
            "expires_at": saved.expires_at.isoformat(),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(body), encoding="utf-8")
            os.chmod(self.path, 0o600)
        except OSError as exc:
            raise ClosetcareSessionError(
                message=f"Cannot write session file: {exc}",
                context={"path": str(self.path)},
                cause=exc,
            ) from exc
        return saved

    def clear(self) -> None:
        """Delete the cache file if it exists."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise ClosetcareSessionError(
                message=f"Cannot remove session file: {exc}",
                context={"path": str(self.path)},
                cause=exc,
            ) from exc

    def _parse(self, raw: str) -> SavedToken:
        try:
            data: Any = json.loads(raw)
        except ValueError as exc:
            raise ClosetcareSessionError(
                message="Session file is not valid JSON",
                context={"path": str(self.path)},
                cause=exc,
            ) from exc

        token = data.get("token") if isinstance(data, dict) else None
        saved_at = parse_timestamp(data.get("saved_at")) if isinstance(data, dict) else None
        expires_at = parse_timestamp(data.get("expires_at")) if isinstance(data, dict) else None
        if not isinstance(token, str) or not token or saved_at is None or expires_at is None:
            raise ClosetcareSessionError(
                message="Session file is missing token or timestamps",
                context={"path": str(self.path)},
            )
        return SavedToken(token=token, saved_at=saved_at, expires_at=expires_at)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class _SessionState:
    """Current token and user shared by the sync and async sessions."""

    def __init__(self, store: TokenStore) -> None:
        self.store = store
        self.token: str | None = None
        self.user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def require_token(self) -> str:
        """Return the current token.

        Raises
        ------
        ClosetcareAuthError
            If no user is logged in.
        """
        if self.token is None:
            raise ClosetcareAuthError(
                message="Not logged in",
                context={"operation": "require_token"},
            )
        return self.token

    def _accept(self, result: AuthResult) -> User:
        if not result.access_token:
            raise ClosetcareAuthError(
                message="Server did not return an access token",
                context={"operation": "login", "user_id": result.user.id},
            )
        self.store.save(result.access_token)
        self.token = result.access_token
        self.user = result.user
        log.info(
            "logged in",
            extra={"extra_fields": {"user_id": result.user.id}},
        )
        return result.user

    def _reset(self) -> None:
        self.token = None
        self.user = None

    def logout(self) -> None:
        """Forget the current user and delete the cached token."""
        self._reset()
        self.store.clear()
        log.info("logged out")

    def _rejected(self, exc: ClosetcareAuthError) -> None:
        log.warning(
            "saved token rejected, clearing session",
            extra={"extra_fields": {"error": exc.message}},
        )
        self._reset()
        self.store.clear()


class AuthSession(_SessionState):
    """Synchronous session bound to an :class:`AuthAPI`."""

    def __init__(self, auth: AuthAPI, store: TokenStore) -> None:
        super().__init__(store)
        self._auth = auth

    def login(self, email: str, password: str) -> User:
        return self._accept(self._auth.login(email, password))

    def signup(self, name: str, email: str, password: str) -> User:
        return self._accept(self._auth.signup(name, email, password))

    def restore(self) -> User | None:
        """Reload a cached token and confirm it with the server.

        Returns the user on success, ``None`` if there is no usable token.
        """
        saved = self.store.load()
        if saved is None:
            return None
        try:
            user = self._auth.me(saved.token)
        except ClosetcareAuthError as exc:
            self._rejected(exc)
            return None
        self.token = saved.token
        self.user = user
        return user


class AsyncAuthSession(_SessionState):
    """Asynchronous session bound to an :class:`AsyncAuthAPI`."""

    def __init__(self, auth: AsyncAuthAPI, store: TokenStore) -> None:
        super().__init__(store)
        self._auth = auth

    async def login(self, email: str, password: str) -> User:
        return self._accept(await self._auth.login(email, password))

    async def signup(self, name: str, email: str, password: str) -> User:
        return self._accept(await self._auth.signup(name, email, password))

    async def restore(self) -> User | None:
        saved = self.store.load()
        if saved is None:
            return None
        try:
            user = await self._auth.me(saved.token)
        except ClosetcareAuthError as exc:
            self._rejected(exc)
            return None
        self.token = saved.token
        self.user = user
        return user
