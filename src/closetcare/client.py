"""Synchronous closetcare client.

:class:`ClosetcareClient` wires together the transport, the endpoint
wrappers, the token session and the image pipeline.  Every item call
sends the session's current token; calling one before logging in (or
restoring a saved session) raises :class:`ClosetcareAuthError`.

Usage::

    from closetcare import ClosetcareClient

    with ClosetcareClient() as client:
        client.login("me@example.com", "password")
        item = client.add_item("Blue jeans", "Pants", interval_days=14,
                               image="~/photos/jeans.jpg")
        print(item.id)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from closetcare.api.auth import AuthAPI
from closetcare.api.items import ItemAPI
from closetcare.api.transport import ApiTransport
from closetcare.config import ClosetcareConfig
from closetcare.image import prepare_upload
from closetcare.models import (
    CleaningIntervalUpdate,
    ClothingItem,
    ClothingItemCreate,
    ItemsByType,
    ProcessedImage,
    SourceImage,
    User,
)
from closetcare.schedule import DEFAULT_INTERVAL_DAYS, days_to_seconds
from closetcare.session import AuthSession, TokenStore

ImageInput = SourceImage | ProcessedImage | bytes | str | Path


class ClosetcareClient:
    """Synchronous closetcare client.

    Parameters
    ----------
    config:
        A ready :class:`ClosetcareConfig`.  When omitted one is built from
        the keyword arguments.
    **kwargs:
        Forwarded to :class:`ClosetcareConfig` when *config* is ``None``.
    """

    def __init__(self, config: ClosetcareConfig | None = None, **kwargs: Any) -> None:
        self._config = config if config is not None else ClosetcareConfig(**kwargs)
        self._transport = ApiTransport(self._config)
        self._auth = AuthAPI(self._transport)
        self._items = ItemAPI(self._transport)
        self.session = AuthSession(
            self._auth,
            TokenStore(self._config.session_path, self._config.token_ttl_days),
        )

    @property
    def config(self) -> ClosetcareConfig:
        return self._config

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> User:
        """Log in and cache the returned token."""
        return self.session.login(email, password)

    def signup(self, name: str, email: str, password: str) -> User:
        """Create an account, then behave as if logged in."""
        return self.session.signup(name, email, password)

    def logout(self) -> None:
        self.session.logout()

    def restore_session(self) -> User | None:
        """Reuse a cached token if the server still accepts it."""
        return self.session.restore()

    def me(self) -> User:
        """Fetch the logged-in user from the server."""
        return self._auth.me(self.session.require_token())

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(self, archived: bool = False) -> ItemsByType:
        """Return items grouped by type; archived ones when *archived*."""
        token = self.session.require_token()
        if archived:
            return self._items.list_archived(token)
        return self._items.list_grouped(token)

    def list_by_type(self, item_type: str) -> list[ClothingItem]:
        return self._items.list_by_type(item_type, self.session.require_token())

    def get_item(self, item_id: str) -> ClothingItem:
        return self._items.get(item_id, self.session.require_token())

    def add_item(
        self,
        name: str,
        item_type: str,
        interval_days: int = DEFAULT_INTERVAL_DAYS,
        image: ImageInput | None = None,
    ) -> ClothingItem:
        """Create an item, uploading a photo when *image* is given.

        Parameters
        ----------
        name, item_type:
            Display name and clothing type (e.g. ``"Shirts"``).
        interval_days:
            Days between cleanings.
        image:
            A photo as a path, raw bytes, a ``data:`` URI or a
            :class:`SourceImage`, which is prepared with
            :meth:`prepare_image` first; or an already prepared
            :class:`ProcessedImage`.  Without a photo the item is created
            from JSON fields.

        Raises
        ------
        ValueError
            If *interval_days* is not a positive integer.
        ClosetcareImageError
            If the photo cannot be prepared; nothing is sent.
        """
        interval_seconds = days_to_seconds(interval_days)
        token = self.session.require_token()
        if image is None:
            return self._items.create(
                ClothingItemCreate(
                    name=name,
                    clothing_item_type=item_type,
                    cleaning_interval_seconds=interval_seconds,
                ),
                token,
            )
        processed = image if isinstance(image, ProcessedImage) else self.prepare_image(image)
        return self._items.create_with_image(
            name, item_type, interval_seconds, processed, token,
        )

    def set_interval(self, item_id: str, interval_days: int) -> ClothingItem:
        """Change the cleaning interval of one item."""
        return self._items.update_interval(
            item_id, days_to_seconds(interval_days), self.session.require_token(),
        )

    def set_type_interval(self, item_type: str, interval_days: int) -> CleaningIntervalUpdate:
        """Change the cleaning interval of every active item of *item_type*."""
        return self._items.update_type_interval(
            item_type, days_to_seconds(interval_days), self.session.require_token(),
        )

    def archive_item(self, item_id: str) -> ClothingItem:
        return self._items.archive(item_id, self.session.require_token())

    def unarchive_item(self, item_id: str) -> ClothingItem:
        return self._items.unarchive(item_id, self.session.require_token())

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def prepare_image(self, image: SourceImage | bytes | str | Path) -> ProcessedImage:
        """Validate a selected photo and run it through the upload pipeline."""
        return prepare_upload(image, self._config.image, metrics=self._config.metrics)

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP transport."""
        self._transport.close()

    def __enter__(self) -> ClosetcareClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
