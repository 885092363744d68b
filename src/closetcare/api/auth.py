"""Authentication API wrappers.

Login and signup are anonymous requests that return a bearer token and
the user record; ``/auth/me`` validates a token by fetching its user.
"""

from __future__ import annotations

from closetcare.models import AuthResult, User

from .transport import ApiTransport, AsyncApiTransport


class AuthAPI:
    """Synchronous wrapper for the ``/auth`` endpoints."""

    def __init__(self, transport: ApiTransport) -> None:
        self._transport = transport

    def login(self, email: str, password: str) -> AuthResult:
        data = self._transport.request(
            "POST", "/auth/login", json={"email": email, "password": password},
        )
        return AuthResult.from_api(data or {})

    def signup(self, name: str, email: str, password: str) -> AuthResult:
        data = self._transport.request(
            "POST",
            "/auth/signup",
            json={"name": name, "email": email, "password": password},
        )
        return AuthResult.from_api(data or {})

    def me(self, token: str) -> User:
        """Return the user owning *token*."""
        data = self._transport.request("GET", "/auth/me", token=token)
        return User.from_api(data or {})


class AsyncAuthAPI:
    """Asynchronous wrapper for the ``/auth`` endpoints."""

    def __init__(self, transport: AsyncApiTransport) -> None:
        self._transport = transport

    async def login(self, email: str, password: str) -> AuthResult:
        data = await self._transport.request(
            "POST", "/auth/login", json={"email": email, "password": password},
        )
        return AuthResult.from_api(data or {})

    async def signup(self, name: str, email: str, password: str) -> AuthResult:
        data = await self._transport.request(
            "POST",
            "/auth/signup",
            json={"name": name, "email": email, "password": password},
        )
        return AuthResult.from_api(data or {})

    async def me(self, token: str) -> User:
        data = await self._transport.request("GET", "/auth/me", token=token)
        return User.from_api(data or {})
