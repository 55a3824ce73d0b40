import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from conftest import auth_headers_for
from database import db
from models.notification import NotificationModel

pytestmark = pytest.mark.asyncio


async def _seed_notification(recipient_id: str, **fields) -> dict:
    notification = NotificationModel(
        recipient_id=recipient_id,
        type=fields.pop("type", "TASK_ASSIGNED"),
        message=fields.pop("message", "Alice assigned you a new task: Draft"),
        **fields
    )
    doc = notification.model_dump()
    await db.notifications.insert_one(dict(doc))
    return doc


async def test_get_notifications_empty(async_client: AsyncClient, employee_headers: dict):
    """Initially empty list for the test user."""
    resp = await async_client.get("/api/notifications", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json() == {"notifications": [], "unreadCount": 0}


async def test_notifications_unauthorized(async_client: AsyncClient):
    resp = await async_client.get("/api/notifications")
    assert resp.status_code == 401


async def test_create_assignment_notification(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    resp = await async_client.post(
        "/api/notifications/create",
        json={
            "recipientId": employee_user["id"],
            "taskName": "Draft",
            "assignedBy": "Alice",
            "projectName": "Apollo",
            "dueDate": "2024-03-01T00:00:00",
            "taskId": "t-123",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201
    notification = resp.json()["notification"]
    assert notification["recipient_id"] == employee_user["id"]
    assert notification["type"] == "TASK_ASSIGNED"
    assert notification["message"] == "Alice assigned you a new task: Draft"
    assert notification["read"] is False
    assert notification["related_task"] == {"task_id": "t-123", "employee_id": employee_user["id"]}
    assert notification["metadata"]["projectName"] == "Apollo"

    listed = (await async_client.get("/api/notifications", headers=auth_headers_for(employee_user))).json()
    assert listed["unreadCount"] == 1
    assert listed["notifications"][0]["id"] == notification["id"]


async def test_create_notification_for_yourself_rejected(async_client: AsyncClient, admin_headers: dict, admin_user: dict):
    resp = await async_client.post(
        "/api/notifications/create",
        json={"recipientId": admin_user["id"], "taskName": "Draft", "assignedBy": "Alice"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot create notification for yourself"
    assert await db.notifications.count_documents({}) == 0


async def test_create_notification_missing_fields(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    resp = await async_client.post(
        "/api/notifications/create",
        json={"recipientId": employee_user["id"], "taskName": "Draft"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required fields"


async def test_list_is_capped_but_count_is_not(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    base = datetime(2024, 1, 1)
    for i in range(60):
        await _seed_notification(employee_user["id"], message=f"n{i}", created_at=base + timedelta(minutes=i))

    resp = await async_client.get("/api/notifications", headers=employee_headers)
    body = resp.json()
    assert len(body["notifications"]) == 50
    assert body["unreadCount"] == 60
    assert body["notifications"][0]["message"] == "n59"
    assert body["notifications"][-1]["message"] == "n10"


async def test_list_only_shows_own_notifications(async_client: AsyncClient, employee_headers: dict, employee_user: dict, admin_user: dict):
    await _seed_notification(employee_user["id"], message="mine")
    await _seed_notification(admin_user["id"], message="not mine")

    body = (await async_client.get("/api/notifications", headers=employee_headers)).json()
    assert [n["message"] for n in body["notifications"]] == ["mine"]
    assert body["unreadCount"] == 1


async def test_unread_count(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    await _seed_notification(employee_user["id"])
    await _seed_notification(employee_user["id"], read=True)

    resp = await async_client.get("/api/notifications/unread-count", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json() == {"count": 1}


async def test_mark_as_read(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    seeded = await _seed_notification(employee_user["id"])

    resp = await async_client.put(f"/api/notifications/{seeded['id']}/read", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json()["read"] is True
    assert resp.json()["id"] == seeded["id"]


async def test_mark_nonexistent_notification(async_client: AsyncClient, employee_headers: dict):
    """Marking a non-existent notification as read returns 404."""
    resp = await async_client.put("/api/notifications/fake_id/read", headers=employee_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Notification not found"


async def test_someone_elses_notification_is_not_found(async_client: AsyncClient, employee_headers: dict, admin_user: dict):
    seeded = await _seed_notification(admin_user["id"])

    resp = await async_client.put(f"/api/notifications/{seeded['id']}/read", headers=employee_headers)
    assert resp.status_code == 404
    resp = await async_client.delete(f"/api/notifications/{seeded['id']}", headers=employee_headers)
    assert resp.status_code == 404

    stored = await db.notifications.find_one({"id": seeded["id"]})
    assert stored is not None
    assert stored["read"] is False


async def test_delete_then_mark_read_does_not_resurrect(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    seeded = await _seed_notification(employee_user["id"])

    resp = await async_client.delete(f"/api/notifications/{seeded['id']}", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Notification deleted"}

    resp = await async_client.put(f"/api/notifications/{seeded['id']}/read", headers=employee_headers)
    assert resp.status_code == 404
    assert await db.notifications.count_documents({"id": seeded["id"]}) == 0


async def test_mark_all_read(async_client: AsyncClient, employee_headers: dict, employee_user: dict, admin_user: dict):
    for _ in range(3):
        await _seed_notification(employee_user["id"])
    others = await _seed_notification(admin_user["id"])

    resp = await async_client.put("/api/notifications/mark-all-read", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "All notifications marked as read"}
    assert await db.notifications.count_documents({"recipient_id": employee_user["id"], "read": False}) == 0

    # Repeating is harmless
    resp = await async_client.put("/api/notifications/mark-all-read", headers=employee_headers)
    assert resp.status_code == 200

    untouched = await db.notifications.find_one({"id": others["id"]})
    assert untouched["read"] is False
