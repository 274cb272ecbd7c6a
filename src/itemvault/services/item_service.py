"""Item service — per-account CRUD over items.

Learn: The service is always constructed with an OwnershipGuard, so there
is no code path that reads or writes an item without an owner check.
Attachments go through FileStorage; the item only keeps the reference.
"""

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.auth.ownership import OwnershipGuard
from itemvault.db.models import Item
from itemvault.errors import StoreError, ValidationError
from itemvault.schemas.item import ItemCreate, ItemUpdate
from itemvault.services.file_storage import FileStorage

logger = structlog.get_logger()

# Fields that cannot be cleared once set
_REQUIRED_FIELDS = ("name", "amount", "date")


def parse_item_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise ValidationError("Invalid item ID")


class ItemService:
    """Business logic for one identity's items."""

    def __init__(
        self,
        db: AsyncSession,
        guard: OwnershipGuard,
        storage: Optional[FileStorage] = None,
    ):
        self.db = db
        self.guard = guard
        self.storage = storage

    async def _attach(self, attachment: Optional[tuple[str, bytes]]) -> Optional[str]:
        if attachment is None:
            return None
        if self.storage is None:
            raise ValidationError("File uploads are not enabled")
        filename, content = attachment
        return await self.storage.save(filename, content)

    async def _commit(self, event: str, **context: Any) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(event, error=str(e), **context)
            raise StoreError()

    async def _commit_with_attachment(
        self, image: Optional[str], event: str, **context: Any
    ) -> None:
        """Commit, removing a just-stored attachment if the commit fails."""
        try:
            await self._commit(event, **context)
        except StoreError:
            if image:
                await self.storage.delete(image)
            raise

    async def create_item(
        self,
        body: ItemCreate,
        attachment: Optional[tuple[str, bytes]] = None,
    ) -> Item:
        fields = body.model_dump(exclude_none=True)
        image = await self._attach(attachment)
        if image:
            fields["image"] = image

        item = Item(**self.guard.stamp(fields))
        self.db.add(item)
        await self._commit_with_attachment(
            image, "item.create_failed", owner_id=str(self.guard.owner_id)
        )

        logger.info("item.created", item_id=str(item.id), owner_id=str(item.owner_id))
        return item

    async def list_items(self) -> list[Item]:
        stmt = self.guard.scope(select(Item), Item).order_by(Item.created_at)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("item.list_failed", error=str(e))
            raise StoreError()
        return list(result.scalars().all())

    async def get_item(self, item_id: uuid.UUID) -> Item:
        """Fetch an item this identity owns (NotFound/Forbidden otherwise)."""
        try:
            item = await self.db.get(Item, item_id)
        except SQLAlchemyError as e:
            logger.error("item.fetch_failed", item_id=str(item_id), error=str(e))
            raise StoreError()
        return self.guard.check(item)

    async def update_item(
        self,
        item_id: uuid.UUID,
        body: ItemUpdate,
        attachment: Optional[tuple[str, bytes]] = None,
    ) -> Item:
        """Apply the fields present in the payload.

        Omitted fields are left alone. product and time can be cleared
        by sending null; name, amount and date cannot.
        """
        item = await self.get_item(item_id)

        changes = body.model_dump(exclude_unset=True)
        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]
        image = await self._attach(attachment)
        if image:
            changes["image"] = image

        for field, value in changes.items():
            setattr(item, field, value)
        await self._commit_with_attachment(
            image, "item.update_failed", item_id=str(item_id)
        )
        await self.db.refresh(item)

        logger.info("item.updated", item_id=str(item_id), fields=sorted(changes))
        return item

    async def delete_item(self, item_id: uuid.UUID) -> None:
        item = await self.get_item(item_id)
        await self.db.delete(item)
        await self._commit("item.delete_failed", item_id=str(item_id))
        logger.info("item.deleted", item_id=str(item_id))
