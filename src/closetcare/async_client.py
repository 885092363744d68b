"""Asynchronous closetcare client.

:class:`AsyncClosetcareClient` mirrors :class:`ClosetcareClient` but every
I/O method is an ``async def`` coroutine.  Image preparation (reading the
file, validating it and running the CPU-bound pipeline) happens in a worker
thread, so several photos can be prepared concurrently without blocking
the event loop.

Usage::

    import asyncio
    from closetcare import AsyncClosetcareClient

    async def main():
        async with AsyncClosetcareClient() as client:
            if await client.restore_session() is None:
                await client.login("me@example.com", "password")
            grouped = await client.list_items()
            print(sorted(grouped))

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from closetcare.api.auth import AsyncAuthAPI
from closetcare.api.items import AsyncItemAPI
from closetcare.api.transport import AsyncApiTransport
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
from closetcare.session import AsyncAuthSession, TokenStore

ImageInput = SourceImage | ProcessedImage | bytes | str | Path


class AsyncClosetcareClient:
    """Asynchronous closetcare client.

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
        self._transport = AsyncApiTransport(self._config)
        self._auth = AsyncAuthAPI(self._transport)
        self._items = AsyncItemAPI(self._transport)
        self.session = AsyncAuthSession(
            self._auth,
            TokenStore(self._config.session_path, self._config.token_ttl_days),
        )

    @property
    def config(self) -> ClosetcareConfig:
        return self._config

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> User:
        return await self.session.login(email, password)

    async def signup(self, name: str, email: str, password: str) -> User:
        return await self.session.signup(name, email, password)

    def logout(self) -> None:
        self.session.logout()

    async def restore_session(self) -> User | None:
        return await self.session.restore()

    async def me(self) -> User:
        return await self._auth.me(self.session.require_token())

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def list_items(self, archived: bool = False) -> ItemsByType:
        token = self.session.require_token()
        if archived:
            return await self._items.list_archived(token)
        return await self._items.list_grouped(token)

    async def list_by_type(self, item_type: str) -> list[ClothingItem]:
        return await self._items.list_by_type(item_type, self.session.require_token())

    async def get_item(self, item_id: str) -> ClothingItem:
        return await self._items.get(item_id, self.session.require_token())

    async def add_item(
        self,
        name: str,
        item_type: str,
        interval_days: int = DEFAULT_INTERVAL_DAYS,
        image: ImageInput | None = None,
    ) -> ClothingItem:
        """Create an item; see :meth:`ClosetcareClient.add_item`."""
        interval_seconds = days_to_seconds(interval_days)
        token = self.session.require_token()
        if image is None:
            return await self._items.create(
                ClothingItemCreate(
                    name=name,
                    clothing_item_type=item_type,
                    cleaning_interval_seconds=interval_seconds,
                ),
                token,
            )
        if isinstance(image, ProcessedImage):
            processed = image
        else:
            processed = await self.prepare_image(image)
        return await self._items.create_with_image(
            name, item_type, interval_seconds, processed, token,
        )

    async def set_interval(self, item_id: str, interval_days: int) -> ClothingItem:
        return await self._items.update_interval(
            item_id, days_to_seconds(interval_days), self.session.require_token(),
        )

    async def set_type_interval(self, item_type: str, interval_days: int) -> CleaningIntervalUpdate:
        return await self._items.update_type_interval(
            item_type, days_to_seconds(interval_days), self.session.require_token(),
        )

    async def archive_item(self, item_id: str) -> ClothingItem:
        return await self._items.archive(item_id, self.session.require_token())

    async def unarchive_item(self, item_id: str) -> ClothingItem:
        return await self._items.unarchive(item_id, self.session.require_token())

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def prepare_image(self, image: SourceImage | bytes | str | Path) -> ProcessedImage:
        """Load, validate and process a photo in a worker thread."""
        return await asyncio.to_thread(
            prepare_upload,
            image,
            self._config.image,
            metrics=self._config.metrics,
        )

    async def prepare_images(
        self, images: list[SourceImage | bytes | str | Path],
    ) -> list[ProcessedImage]:
        """Prepare several photos concurrently, preserving order."""
        return list(await asyncio.gather(*(self.prepare_image(img) for img in images)))

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncClosetcareClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
