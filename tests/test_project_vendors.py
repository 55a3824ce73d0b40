import pytest
from datetime import datetime
from httpx import AsyncClient

from conftest import auth_headers_for, insert_user
from database import db

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def project():
    doc = {"id": "proj_apollo", "name": "Apollo", "created_at": datetime(2024, 1, 1)}
    await db.projects.insert_one(dict(doc))
    return doc


async def _add_vendor(async_client, headers, **fields):
    payload = {"project": "proj_apollo", "vendorName": "Acme Scaffolding", "quote": 1200.5, **fields}
    resp = await async_client.post("/api/project-vendors", json=payload, headers=headers)
    assert resp.status_code == 201
    return resp.json()


async def test_add_vendor(async_client: AsyncClient, employee_headers: dict, project: dict):
    vendor = await _add_vendor(
        async_client, employee_headers,
        contactEmail="sales@acme.test",
        documentLinks=[{"name": "Quote PDF", "url": "https://files.test/quote.pdf"}],
    )
    assert vendor["entryType"] == "vendor"
    assert vendor["status"] == "pending"
    assert vendor["quote"] == 1200.5
    assert vendor["addedBy"] == {"id": "employee_id", "name": "Bob", "email": "bob@test.com"}
    assert vendor["project"] == {"id": "proj_apollo", "name": "Apollo"}
    assert vendor["documentLinks"][0]["url"] == "https://files.test/quote.pdf"
    assert vendor["documentLinks"][0]["uploadedAt"]


async def test_add_vendor_unknown_project(async_client: AsyncClient, employee_headers: dict):
    resp = await async_client.post("/api/project-vendors", json={"project": "nope"}, headers=employee_headers)
    assert resp.status_code == 404


async def test_add_vendor_invalid_entry_type(async_client: AsyncClient, employee_headers: dict, project: dict):
    resp = await async_client.post(
        "/api/project-vendors",
        json={"project": "proj_apollo", "entryType": "supplier"},
        headers=employee_headers,
    )
    assert resp.status_code == 422


async def test_list_vendors_by_project(async_client: AsyncClient, employee_headers: dict, project: dict):
    await db.projects.insert_one({"id": "proj_other", "name": "Other"})
    first = await _add_vendor(async_client, employee_headers, vendorName="First")
    await _add_vendor(async_client, employee_headers, project="proj_other", vendorName="Elsewhere")
    second = await _add_vendor(async_client, employee_headers, vendorName="Second")
    await db.project_vendors.update_one({"id": first["id"]}, {"$set": {"created_at": datetime(2024, 1, 1)}})
    await db.project_vendors.update_one({"id": second["id"]}, {"$set": {"created_at": datetime(2024, 1, 3)}})

    resp = await async_client.get("/api/project-vendors/project/proj_apollo", headers=employee_headers)
    assert resp.status_code == 200
    vendors = resp.json()
    assert [v["id"] for v in vendors] == [second["id"], first["id"]]
    assert vendors[0]["addedBy"]["name"] == "Bob"

    resp = await async_client.get("/api/project-vendors", headers=employee_headers)
    assert len(resp.json()) == 3


async def test_list_vendors_unauthorized(async_client: AsyncClient):
    resp = await async_client.get("/api/project-vendors")
    assert resp.status_code == 401


async def test_update_vendor(async_client: AsyncClient, employee_headers: dict, project: dict):
    vendor = await _add_vendor(async_client, employee_headers, notes="call back", status="in-discussion")

    resp = await async_client.put(
        f"/api/project-vendors/{vendor['id']}",
        json={"quote": 990, "notes": None, "status": "", "entryType": "agency", "agencyName": "Acme Group"},
        headers=employee_headers,
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["quote"] == 990
    assert updated["notes"] is None
    assert updated["status"] == "in-discussion"
    assert updated["entryType"] == "agency"
    assert updated["agencyName"] == "Acme Group"
    assert updated["vendorName"] == "Acme Scaffolding"


async def test_update_unknown_vendor(async_client: AsyncClient, employee_headers: dict):
    resp = await async_client.put("/api/project-vendors/missing", json={"notes": "x"}, headers=employee_headers)
    assert resp.status_code == 404


async def test_delete_vendor_permissions(async_client: AsyncClient, employee_headers: dict, admin_headers: dict, project: dict):
    other = await insert_user(id="other_id", email="dave@test.com", name="Dave")
    vendor = await _add_vendor(async_client, employee_headers)

    resp = await async_client.delete(f"/api/project-vendors/{vendor['id']}", headers=auth_headers_for(other))
    assert resp.status_code == 403

    resp = await async_client.delete(f"/api/project-vendors/{vendor['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Vendor deleted successfully"}

    resp = await async_client.delete(f"/api/project-vendors/{vendor['id']}", headers=employee_headers)
    assert resp.status_code == 404


async def test_adder_can_delete_own_vendor(async_client: AsyncClient, employee_headers: dict, project: dict):
    vendor = await _add_vendor(async_client, employee_headers)

    resp = await async_client.delete(f"/api/project-vendors/{vendor['id']}", headers=employee_headers)
    assert resp.status_code == 200
    assert await db.project_vendors.count_documents({}) == 0
