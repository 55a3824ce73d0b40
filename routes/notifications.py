from fastapi import APIRouter, Body, Depends
from models.notification import AssignmentNotificationRequest
from models.user import UserModel
from routes.deps import get_current_user, get_db
from services import notification_store
from services.notification_dispatcher import create_assignment_notification
from utils.serialization import parse_mongo_data
from logging_config import get_logger

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
logger = get_logger("notifications")


@router.post("/create", status_code=201)
async def create_notification(
    request: AssignmentNotificationRequest = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Notify an employee about a task the caller assigned to them."""
    notification = await create_assignment_notification(db, current_user.id, request)
    return {"message": "Notification created successfully", "notification": parse_mongo_data(notification)}


@router.get("")
async def get_notifications(
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Most recent notifications for the current user, plus the total unread count."""
    result = await notification_store.list_for_recipient(db, current_user.id)
    return parse_mongo_data(result)


@router.get("/unread-count")
async def get_unread_count(
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    count = await notification_store.unread_count(db, current_user.id)
    return {"count": count}


# Must stay above the /{notification_id} routes
@router.put("/mark-all-read")
async def mark_all_read(
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Mark all notifications as read for the current user."""
    updated = await notification_store.mark_all_read(db, current_user.id)
    logger.info("Notifications marked read", extra={"data": {"updated": updated}})
    return {"message": "All notifications marked as read"}


@router.put("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    notification = await notification_store.mark_one_read(db, current_user.id, notification_id)
    return parse_mongo_data(notification)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    await notification_store.delete_one(db, current_user.id, notification_id)
    return {"message": "Notification deleted"}
