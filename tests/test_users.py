import pytest
from httpx import AsyncClient

from conftest import auth_headers_for, insert_user
from main import app
from routes.deps import get_db
from pymongo.errors import DuplicateKeyError
from database import db

pytestmark = pytest.mark.asyncio


async def test_list_users(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    """Admins see employees only, without credentials."""
    resp = await async_client.get("/api/users", headers=admin_headers)
    assert resp.status_code == 200
    users = resp.json()
    assert [u["id"] for u in users] == [employee_user["id"]]
    assert "password_hash" not in users[0]
    assert "_id" not in users[0]


async def test_list_users_unauthorized(async_client: AsyncClient):
    """Unauthenticated request returns 401."""
    resp = await async_client.get("/api/users")
    assert resp.status_code == 401


async def test_list_users_forbidden_for_employees(async_client: AsyncClient, employee_headers: dict):
    resp = await async_client.get("/api/users", headers=employee_headers)
    assert resp.status_code == 403


async def test_department_members(async_client: AsyncClient, employee_headers: dict, admin_user: dict):
    await insert_user(id="other_id", email="dave@test.com", name="Dave", department_id="dept_sales")

    resp = await async_client.get("/api/users/department/dept_ops", headers=employee_headers)
    assert resp.status_code == 200
    assert sorted(u["name"] for u in resp.json()) == ["Alice", "Bob"]


async def test_create_employee(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.post(
        "/api/users/create-employee",
        json={
            "name": "Erin",
            "email": "erin@test.com",
            "password": "welcome1",
            "department": "dept_ops",
            "jobTitle": "Designer",
            "startDate": "",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["role"] == "employee"
    assert user["jobTitle"] == "Designer"
    assert user["startDate"] is None
    assert "password_hash" not in user

    login = await async_client.post("/api/auth/login", json={"email": "erin@test.com", "password": "welcome1"})
    assert login.status_code == 200


async def test_create_employee_duplicate_email(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    resp = await async_client.post(
        "/api/users/create-employee",
        json={"name": "Bob Again", "email": employee_user["email"], "password": "welcome1"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


async def test_create_employee_forbidden_for_employees(async_client: AsyncClient, employee_headers: dict):
    resp = await async_client.post(
        "/api/users/create-employee",
        json={"name": "Erin", "email": "erin@test.com", "password": "welcome1"},
        headers=employee_headers,
    )
    assert resp.status_code == 403


async def test_update_profile(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    resp = await async_client.put(
        "/api/users/profile",
        json={"phone": "555-0101", "jobTitle": "Engineer"},
        headers=employee_headers,
    )
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["phone"] == "555-0101"
    assert user["jobTitle"] == "Engineer"
    assert user["name"] == "Bob"


async def test_profile_update_ignores_role(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    resp = await async_client.put("/api/users/profile", json={"role": "admin"}, headers=employee_headers)
    assert resp.status_code == 200

    stored = await db.users.find_one({"id": employee_user["id"]})
    assert stored["role"] == "employee"


async def test_update_employee_moves_department(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    resp = await async_client.put(
        f"/api/users/update-employee/{employee_user['id']}",
        json={"department": "dept_sales", "name": "Robert"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["department_id"] == "dept_sales"
    assert user["name"] == "Robert"


async def test_update_unknown_employee(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.put("/api/users/update-employee/ghost", json={"name": "X"}, headers=admin_headers)
    assert resp.status_code == 404


async def test_delete_employee(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    resp = await async_client.delete(f"/api/users/delete-employee/{employee_user['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert await db.users.find_one({"id": employee_user["id"]}) is None

    resp = await async_client.delete(f"/api/users/delete-employee/{employee_user['id']}", headers=admin_headers)
    assert resp.status_code == 404


async def test_admin_cannot_delete_self(async_client: AsyncClient, admin_headers: dict, admin_user: dict):
    resp = await async_client.delete(f"/api/users/delete-employee/{admin_user['id']}", headers=admin_headers)
    assert resp.status_code == 400


async def test_deleted_user_token_is_rejected(async_client: AsyncClient, admin_headers: dict, employee_user: dict):
    headers = auth_headers_for(employee_user)
    await async_client.delete(f"/api/users/delete-employee/{employee_user['id']}", headers=admin_headers)

    resp = await async_client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 401


class _RacedDB:
    class users:
        """The email check misses, then the unique index rejects the insert."""

        @staticmethod
        async def find_one(*args, **kwargs):
            return None

        @staticmethod
        async def insert_one(doc, *args, **kwargs):
            raise DuplicateKeyError("E11000 duplicate key error collection: users index: email_1")


async def test_create_employee_duplicate_email_race(async_client: AsyncClient, admin_headers: dict):
    app.dependency_overrides[get_db] = lambda: _RacedDB()
    try:
        resp = await async_client.post(
            "/api/users/create-employee",
            json={"name": "Erin", "email": "erin@test.com", "password": "welcome1"},
            headers=admin_headers,
        )
    finally:
        app.dependency_overrides.pop(get_db, None)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists"


async def test_profile_rejects_empty_name(async_client: AsyncClient, employee_headers: dict, employee_user: dict):
    resp = await async_client.put("/api/users/profile", json={"name": ""}, headers=employee_headers)
    assert resp.status_code == 422

    stored = await db.users.find_one({"id": employee_user["id"]})
    assert stored["name"] == "Bob"
