from fastapi import APIRouter, Body, Depends, HTTPException
from typing import List
from models.department import DepartmentModel
from models.user import UserModel
from routes.deps import get_db, require_role
from utils.serialization import parse_mongo_data
from logging_config import get_logger
from constants import Roles

router = APIRouter(prefix="/api/departments", tags=["Departments"])
logger = get_logger("departments")


@router.get("", response_model=List[dict])
async def list_departments(db=Depends(get_db)):
    """Public: the registration form needs the list before login"""
    departments = await db.departments.find({}).sort("name", 1).to_list(500)
    return parse_mongo_data(departments)


@router.post("", status_code=201)
async def create_department(
    department: DepartmentModel = Body(...),
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    department.created_by = current_user.id
    doc = department.model_dump()
    await db.departments.insert_one(doc)
    logger.info("Department created", extra={"data": {"department_id": department.id, "name": department.name}})
    return parse_mongo_data(doc)


@router.delete("/{department_id}")
async def delete_department(
    department_id: str,
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    department = await db.departments.find_one({"id": department_id})
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")

    user_count = await db.users.count_documents({"department_id": department_id})
    if user_count > 0:
        logger.warning("Department deletion blocked: still has members", extra={"data": {"department_id": department_id, "members": user_count}})
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete department. There are {user_count} user(s) associated with this department. Please reassign the users first."
        )

    await db.departments.delete_one({"id": department_id})
    logger.info("Department deleted", extra={"data": {"department_id": department_id}})
    return {"message": "Department deleted successfully"}
