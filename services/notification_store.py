"""Per-recipient notification reads and read-state changes."""

from typing import Optional

from config import config
from errors import NotFoundError
from logging_config import get_logger
from middleware.db_guard import OwnerScopedCollection

logger = get_logger("notification_store")


def _scoped(db, recipient_id: str) -> OwnerScopedCollection:
    return OwnerScopedCollection(db.notifications, recipient_id)


async def list_for_recipient(db, recipient_id: str, limit: Optional[int] = None) -> dict:
    """Newest notifications (capped) plus the uncapped unread count."""
    notifications = _scoped(db, recipient_id)
    page_size = limit or config.NOTIFICATION_PAGE_SIZE
    items = await notifications.find({}).sort("created_at", -1).limit(page_size).to_list(page_size)
    unread_count = await notifications.count_documents({"read": False})
    return {"notifications": items, "unreadCount": unread_count}


async def unread_count(db, recipient_id: str) -> int:
    return await _scoped(db, recipient_id).count_documents({"read": False})


async def mark_one_read(db, recipient_id: str, notification_id: str) -> dict:
    notification = await _scoped(db, recipient_id).find_one_and_update(
        {"id": notification_id},
        {"$set": {"read": True}}
    )
    if not notification:
        logger.warning("Notification not found for mark-as-read", extra={"data": {"notification_id": notification_id}})
        raise NotFoundError("Notification not found")
    return notification


async def mark_all_read(db, recipient_id: str) -> int:
    result = await _scoped(db, recipient_id).update_many(
        {"read": False},
        {"$set": {"read": True}}
    )
    return result.modified_count


async def delete_one(db, recipient_id: str, notification_id: str) -> dict:
    notification = await _scoped(db, recipient_id).find_one_and_delete({"id": notification_id})
    if not notification:
        logger.warning("Notification not found for delete", extra={"data": {"notification_id": notification_id}})
        raise NotFoundError("Notification not found")
    logger.info("Notification deleted", extra={"data": {"notification_id": notification_id}})
    return notification
