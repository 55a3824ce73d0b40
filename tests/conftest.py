import pytest
from httpx import AsyncClient, ASGITransport
import os
from datetime import timedelta

# Set up test environment variables before anything else
os.environ["ENV"] = "testing"
os.environ["DB_NAME"] = "taskdesk_test"
os.environ["SECRET_KEY"] = "test_secret_key_12345"

from config import config
config.ENV = "testing"

from mongomock_motor import AsyncMongoMockClient

from main import app
from database import client, db
from models.user import UserModel
from routes.deps import create_access_token, hash_password

TEST_PASSWORD = "secret123"
# bcrypt is deliberately slow; hash once per session
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


async def insert_user(**fields) -> dict:
    """Insert a user document the way the app stores one."""
    user = UserModel(password_hash=TEST_PASSWORD_HASH, **fields)
    doc = user.model_dump(by_alias=True)
    await db.users.insert_one(doc)
    return doc


def auth_headers_for(user: dict) -> dict:
    token = create_access_token(
        data={"sub": user["id"], "role": user["role"]},
        expires_delta=timedelta(minutes=60)
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function", autouse=True)
def mongo():
    """Fresh in-memory database for every test."""
    client.use(AsyncMongoMockClient())
    yield db

@pytest.fixture(scope="function")
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture(scope="function")
async def admin_user():
    return await insert_user(
        id="admin_id",
        email="alice@test.com",
        name="Alice",
        role="admin",
        department_id="dept_ops",
    )

@pytest.fixture(scope="function")
async def employee_user():
    return await insert_user(
        id="employee_id",
        email="bob@test.com",
        name="Bob",
        role="employee",
        department_id="dept_ops",
    )

@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return auth_headers_for(admin_user)

@pytest.fixture(scope="function")
def employee_headers(employee_user):
    return auth_headers_for(employee_user)
