from fastapi import APIRouter, Body, Depends, HTTPException
from typing import List
from datetime import datetime
from models.project_vendor import ProjectVendorModel, ProjectVendorCreateModel, ProjectVendorUpdateModel
from models.user import UserModel
from routes.deps import get_current_user, get_db
from utils.references import populate
from utils.serialization import parse_mongo_data
from logging_config import get_logger
from constants import Roles

router = APIRouter(prefix="/api/project-vendors", tags=["Project Vendors"])
logger = get_logger("project_vendors")

# Only replaced when the new value is non-empty
KEEP_ON_EMPTY = ("entryType", "status", "documentLinks")


async def _with_refs(db, vendors: List[dict], include_project: bool = True) -> List[dict]:
    await populate(vendors, "addedBy", db.users, ("name", "email"))
    if include_project:
        await populate(vendors, "project", db.projects, ("name",))
    return parse_mongo_data(vendors)


async def _get_vendor_or_404(db, vendor_id: str) -> dict:
    vendor = await db.project_vendors.find_one({"id": vendor_id})
    if not vendor:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return vendor


@router.get("/project/{project_id}", response_model=List[dict])
async def list_project_vendors(project_id: str, current_user: UserModel = Depends(get_current_user), db=Depends(get_db)):
    vendors = await db.project_vendors.find({"project": project_id}).sort("created_at", -1).to_list(1000)
    return await _with_refs(db, vendors, include_project=False)


@router.get("", response_model=List[dict])
async def list_all_vendors(current_user: UserModel = Depends(get_current_user), db=Depends(get_db)):
    """Every vendor entry across projects, for the admin overview"""
    vendors = await db.project_vendors.find({}).sort("created_at", -1).to_list(5000)
    return await _with_refs(db, vendors)


@router.post("", status_code=201)
async def create_vendor(
    data: ProjectVendorCreateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    if not await db.projects.find_one({"id": data.project_id}):
        raise HTTPException(status_code=404, detail="Project not found")

    vendor = ProjectVendorModel(added_by=current_user.id, **data.model_dump(exclude_none=True))
    doc = vendor.model_dump(by_alias=True)
    await db.project_vendors.insert_one(doc)

    logger.info("Vendor entry added", extra={"data": {"vendor_id": vendor.id, "project_id": vendor.project_id, "entry_type": vendor.entry_type}})
    return (await _with_refs(db, [doc]))[0]


@router.put("/{vendor_id}")
async def update_vendor(
    vendor_id: str,
    data: ProjectVendorUpdateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    await _get_vendor_or_404(db, vendor_id)

    changes = data.model_dump(by_alias=True, exclude_unset=True)
    for key in KEEP_ON_EMPTY:
        if not changes.get(key):
            changes.pop(key, None)
    changes["updated_at"] = datetime.now()

    await db.project_vendors.update_one({"id": vendor_id}, {"$set": changes})
    vendor = await _get_vendor_or_404(db, vendor_id)

    logger.info("Vendor entry updated", extra={"data": {"vendor_id": vendor_id, "fields": list(changes.keys())}})
    return (await _with_refs(db, [vendor]))[0]


@router.delete("/{vendor_id}")
async def delete_vendor(
    vendor_id: str,
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Only whoever added the entry, or an admin, may remove it"""
    vendor = await _get_vendor_or_404(db, vendor_id)
    if vendor["addedBy"] != current_user.id and current_user.role != Roles.ADMIN:
        logger.warning("Vendor deletion denied", extra={"data": {"vendor_id": vendor_id}})
        raise HTTPException(status_code=403, detail="Not authorized")

    await db.project_vendors.delete_one({"id": vendor_id})
    logger.info("Vendor entry deleted", extra={"data": {"vendor_id": vendor_id}})
    return {"message": "Vendor deleted successfully"}
