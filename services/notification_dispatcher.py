"""
Creates notifications on behalf of task workflows.

Completion notices run as background tasks after the task write has
committed; they log their failures and never raise.
"""

from datetime import datetime
from typing import Optional

from constants import NotificationTypes
from errors import InvalidRequestError
from logging_config import get_logger
from models.notification import AssignmentNotificationRequest, NotificationModel, RelatedTaskModel
from services.task_lifecycle import CompletionNotice

logger = get_logger("notification_dispatcher")


async def resolve_assigner(db, notice: CompletionNotice) -> Optional[dict]:
    """
    Find the user behind a task's assigner. A stored id wins; otherwise fall
    back to an exact display-name match, which is ambiguous when names collide
    and misses entirely when the assigner has since been renamed.
    """
    if notice.assigner_id:
        assigner = await db.users.find_one({"id": notice.assigner_id})
        if assigner:
            return assigner

    matches = await db.users.count_documents({"name": notice.assigner_name})
    if matches > 1:
        logger.warning(
            "Assigner name is ambiguous, notifying the first match",
            extra={"data": {"assigner_name": notice.assigner_name, "matches": matches}}
        )
    return await db.users.find_one({"name": notice.assigner_name})


async def dispatch_completion_notice(db, notice: CompletionNotice) -> Optional[dict]:
    """Tell the assigner their task was completed. Returns the notification, or None if skipped/failed."""
    try:
        assigner = await resolve_assigner(db, notice)
        if not assigner:
            logger.info(
                "Completion notice skipped: assigner not found",
                extra={"data": {"task_id": notice.task_id, "assigner_name": notice.assigner_name}}
            )
            return None

        if assigner["id"] == notice.completed_by_id:
            logger.debug("Completion notice skipped: assigner completed the task", extra={"data": {"task_id": notice.task_id}})
            return None

        message = f"{notice.completed_by_name} completed the task: {notice.task_name}"
        if notice.project:
            message += f" ({notice.project})"

        notification = NotificationModel(
            recipient_id=assigner["id"],
            type=NotificationTypes.TASK_COMPLETED,
            message=message,
            related_task=RelatedTaskModel(task_id=notice.task_id, employee_id=notice.employee_id),
            metadata={
                "completedBy": notice.completed_by_name,
                "taskName": notice.task_name,
                "projectName": notice.project,
                "completedAt": datetime.now(),
            }
        )
        doc = notification.model_dump()
        await db.notifications.insert_one(doc)
        logger.info(
            "Task completion notification sent",
            extra={"data": {"task_id": notice.task_id, "recipient_id": assigner["id"]}}
        )
        return doc
    except Exception as e:
        logger.error(
            f"Failed to dispatch completion notice: {e}",
            exc_info=True,
            extra={"data": {"task_id": notice.task_id}}
        )
        return None


async def create_assignment_notification(db, actor_id: str, request: AssignmentNotificationRequest) -> dict:
    """Notify an employee that a task was assigned to them. The actor may not notify themselves."""
    if not request.recipient_id or not request.task_name or not request.assigned_by:
        raise InvalidRequestError("Missing required fields")

    if request.recipient_id == actor_id:
        logger.warning("Self-notification rejected", extra={"data": {"actor_id": actor_id}})
        raise InvalidRequestError("Cannot create notification for yourself")

    notification = NotificationModel(
        recipient_id=request.recipient_id,
        type=NotificationTypes.TASK_ASSIGNED,
        message=f"{request.assigned_by} assigned you a new task: {request.task_name}",
        related_task=RelatedTaskModel(task_id=request.task_id, employee_id=request.recipient_id) if request.task_id else None,
        metadata={
            "assignedBy": request.assigned_by,
            "taskName": request.task_name,
            "projectName": request.project_name,
            "dueDate": request.due_date,
        }
    )
    doc = notification.model_dump()
    await db.notifications.insert_one(doc)
    logger.info(
        "Task assignment notification sent",
        extra={"data": {"recipient_id": request.recipient_id, "task_name": request.task_name}}
    )
    return doc
