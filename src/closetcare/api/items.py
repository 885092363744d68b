"""Clothing-item API wrappers.

Provides :class:`ItemAPI` (sync) and :class:`AsyncItemAPI` (async) thin
wrappers around the ``/clothing-items`` endpoints.  Both delegate all HTTP
concerns (errors, retries) to the underlying transport and convert the
backend's JSON into :mod:`closetcare.models` records.

Every method takes the bearer *token* to send with that request.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from closetcare.models import (
    CleaningIntervalUpdate,
    ClothingItem,
    ClothingItemCreate,
    ItemsByType,
    ProcessedImage,
    items_by_type_from_api,
)

from .transport import ApiTransport, AsyncApiTransport

ITEMS_PATH = "/clothing-items"


def _segment(value: str) -> str:
    """Percent-encode a single path segment (ids and free-text types)."""
    return quote(str(value), safe="")


def item_path(item_id: str, *suffix: str) -> str:
    return "/".join([ITEMS_PATH, _segment(item_id), *suffix])


def type_path(item_type: str, *suffix: str) -> str:
    return "/".join([ITEMS_PATH, "type", _segment(item_type), *suffix])


def build_multipart(
    name: str,
    clothing_item_type: str,
    cleaning_interval_seconds: int,
    image: ProcessedImage,
) -> dict[str, Any]:
    """Return the ``data`` / ``files`` keyword arguments for a photo upload."""
    return {
        "data": {
            "name": name,
            "clothingItemType": clothing_item_type,
            "cleaning_interval_seconds": str(int(cleaning_interval_seconds)),
        },
        "files": {"image": (image.name, image.data, image.media_type)},
    }


class ItemAPI:
    """Synchronous wrapper for the clothing-item endpoints.

    Parameters
    ----------
    transport:
        A configured :class:`ApiTransport` instance.
    """

    def __init__(self, transport: ApiTransport) -> None:
        self._transport = transport

    def list_grouped(self, token: str | None = None) -> ItemsByType:
        """Return active items grouped by type."""
        data = self._transport.request("GET", ITEMS_PATH, token=token)
        return items_by_type_from_api(data or {})

    def list_archived(self, token: str | None = None) -> ItemsByType:
        """Return archived items grouped by type."""
        data = self._transport.request("GET", f"{ITEMS_PATH}/archived", token=token)
        return items_by_type_from_api(data or {})

    def get(self, item_id: str, token: str | None = None) -> ClothingItem:
        """Return a single item by id."""
        data = self._transport.request("GET", item_path(item_id), token=token)
        return ClothingItem.from_api(data or {})

    def list_by_type(self, item_type: str, token: str | None = None) -> list[ClothingItem]:
        """Return the items of one type."""
        data = self._transport.request("GET", type_path(item_type), token=token)
        return [ClothingItem.from_api(item) for item in data or []]

    def create(self, item: ClothingItemCreate, token: str | None = None) -> ClothingItem:
        """Create an item from JSON fields (no photo upload)."""
        data = self._transport.request(
            "POST", ITEMS_PATH, token=token, json=item.to_api(),
        )
        return ClothingItem.from_api(data or {})

    def create_with_image(
        self,
        name: str,
        clothing_item_type: str,
        cleaning_interval_seconds: int,
        image: ProcessedImage,
        token: str | None = None,
    ) -> ClothingItem:
        """Create an item with a prepared photo as a multipart upload."""
        data = self._transport.request(
            "POST",
            ITEMS_PATH,
            token=token,
            **build_multipart(name, clothing_item_type, cleaning_interval_seconds, image),
        )
        return ClothingItem.from_api(data or {})

    def update_interval(
        self,
        item_id: str,
        interval_seconds: int,
        token: str | None = None,
    ) -> ClothingItem:
        """Set the cleaning interval of one item."""
        data = self._transport.request(
            "PUT",
            item_path(item_id, "cleaning-interval"),
            token=token,
            params={"cleaning_interval_seconds": int(interval_seconds)},
        )
        return ClothingItem.from_api(data or {})

    def update_type_interval(
        self,
        item_type: str,
        interval_seconds: int,
        token: str | None = None,
    ) -> CleaningIntervalUpdate:
        """Set the cleaning interval of every active item of a type."""
        data = self._transport.request(
            "PUT",
            type_path(item_type, "cleaning-interval"),
            token=token,
            params={"cleaning_interval_seconds": int(interval_seconds)},
        )
        return CleaningIntervalUpdate.from_api(data or {})

    def archive(self, item_id: str, token: str | None = None) -> ClothingItem:
        data = self._transport.request("PUT", item_path(item_id, "archive"), token=token)
        return ClothingItem.from_api(data or {})

    def unarchive(self, item_id: str, token: str | None = None) -> ClothingItem:
        data = self._transport.request("PUT", item_path(item_id, "unarchive"), token=token)
        return ClothingItem.from_api(data or {})


class AsyncItemAPI:
    """Asynchronous wrapper for the clothing-item endpoints.

    Mirrors :class:`ItemAPI` but all methods are coroutines.
    """

    def __init__(self, transport: AsyncApiTransport) -> None:
        self._transport = transport

    async def list_grouped(self, token: str | None = None) -> ItemsByType:
        data = await self._transport.request("GET", ITEMS_PATH, token=token)
        return items_by_type_from_api(data or {})

    async def list_archived(self, token: str | None = None) -> ItemsByType:
        data = await self._transport.request("GET", f"{ITEMS_PATH}/archived", token=token)
        return items_by_type_from_api(data or {})

    async def get(self, item_id: str, token: str | None = None) -> ClothingItem:
        data = await self._transport.request("GET", item_path(item_id), token=token)
        return ClothingItem.from_api(data or {})

    async def list_by_type(self, item_type: str, token: str | None = None) -> list[ClothingItem]:
        data = await self._transport.request("GET", type_path(item_type), token=token)
        return [ClothingItem.from_api(item) for item in data or []]

    async def create(self, item: ClothingItemCreate, token: str | None = None) -> ClothingItem:
        data = await self._transport.request(
            "POST", ITEMS_PATH, token=token, json=item.to_api(),
        )
        return ClothingItem.from_api(data or {})

    async def create_with_image(
        self,
        name: str,
        clothing_item_type: str,
        cleaning_interval_seconds: int,
        image: ProcessedImage,
        token: str | None = None,
    ) -> ClothingItem:
        data = await self._transport.request(
            "POST",
            ITEMS_PATH,
            token=token,
            **build_multipart(name, clothing_item_type, cleaning_interval_seconds, image),
        )
        return ClothingItem.from_api(data or {})

    async def update_interval(
        self,
        item_id: str,
        interval_seconds: int,
        token: str | None = None,
    ) -> ClothingItem:
        data = await self._transport.request(
            "PUT",
            item_path(item_id, "cleaning-interval"),
            token=token,
            params={"cleaning_interval_seconds": int(interval_seconds)},
        )
        return ClothingItem.from_api(data or {})

    async def update_type_interval(
        self,
        item_type: str,
        interval_seconds: int,
        token: str | None = None,
    ) -> CleaningIntervalUpdate:
        data = await self._transport.request(
            "PUT",
            type_path(item_type, "cleaning-interval"),
            token=token,
            params={"cleaning_interval_seconds": int(interval_seconds)},
        )
        return CleaningIntervalUpdate.from_api(data or {})

    async def archive(self, item_id: str, token: str | None = None) -> ClothingItem:
        data = await self._transport.request("PUT", item_path(item_id, "archive"), token=token)
        return ClothingItem.from_api(data or {})

    async def unarchive(self, item_id: str, token: str | None = None) -> ClothingItem:
        data = await self._transport.request("PUT", item_path(item_id, "unarchive"), token=token)
        return ClothingItem.from_api(data or {})
