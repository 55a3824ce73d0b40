from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException
from typing import List
from datetime import datetime
from models.user import UserModel, EmployeeCreateModel, ProfileUpdateModel, EmployeeUpdateModel
from models.task import TaskCreateModel, TaskUpdateModel
from routes.deps import get_current_user, get_db, hash_password, insert_user_document, require_role
from services import task_lifecycle
from services.notification_dispatcher import dispatch_completion_notice
from utils.serialization import parse_mongo_data, public_user
from logging_config import get_logger
from constants import Roles

router = APIRouter(prefix="/api/users", tags=["Users"])
logger = get_logger("users")


# --- DIRECTORY ---

@router.get("", response_model=List[dict])
async def list_employees(current_user: UserModel = Depends(require_role(Roles.ADMIN)), db=Depends(get_db)):
    """List all employees (Admin only)"""
    users = await db.users.find({"role": Roles.EMPLOYEE}).sort("name", 1).to_list(1000)
    return [public_user(u) for u in users]


@router.get("/department/{department_id}", response_model=List[dict])
async def list_department_users(department_id: str, current_user: UserModel = Depends(get_current_user), db=Depends(get_db)):
    """Members of one department, for the team views"""
    users = await db.users.find({"department_id": department_id}).sort("name", 1).to_list(1000)
    return [public_user(u) for u in users]


@router.post("/create-employee", status_code=201)
async def create_employee(
    data: EmployeeCreateModel = Body(...),
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    """Create an employee account (Admin only)"""
    if await db.users.find_one({"email": data.email}):
        raise HTTPException(status_code=400, detail="User already exists")

    user = UserModel(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        role=Roles.EMPLOYEE,
        department_id=data.department,
        job_title=data.job_title,
        start_date=data.start_date,
        phone=data.phone,
        address=data.address,
    )
    doc = user.model_dump(by_alias=True)
    await insert_user_document(db.users, doc)

    logger.info("Employee created", extra={"data": {"user_id": user.id, "created_by": current_user.id}})
    return {"message": "Employee created successfully", "user": public_user(doc)}


# --- PROFILE ---

async def _apply_profile(db, user_id: str, fields: dict) -> dict:
    if not fields:
        user = await db.users.find_one({"id": user_id})
    else:
        fields["updated_at"] = datetime.now()
        await db.users.update_one({"id": user_id}, {"$set": fields})
        user = await db.users.find_one({"id": user_id})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(user)


@router.put("/profile")
async def update_profile(
    data: ProfileUpdateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Owner updates their own profile fields"""
    fields = data.model_dump(by_alias=True, exclude_unset=True)
    user = await _apply_profile(db, current_user.id, fields)
    logger.info("Profile updated", extra={"data": {"fields": list(fields.keys())}})
    return {"message": "Profile updated successfully", "user": user}


@router.put("/update-employee/{employee_id}")
async def update_employee(
    employee_id: str,
    data: EmployeeUpdateModel = Body(...),
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    """Admin edits an employee's profile and department"""
    fields = data.model_dump(by_alias=True, exclude_unset=True)
    if "department" in fields:
        fields["department_id"] = fields.pop("department")
    user = await _apply_profile(db, employee_id, fields)
    logger.info("Employee updated", extra={"data": {"employee_id": employee_id, "fields": list(fields.keys())}})
    return {"message": "Employee updated successfully", "user": user}


@router.delete("/delete-employee/{employee_id}")
async def delete_employee(
    employee_id: str,
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    if employee_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    result = await db.users.delete_one({"id": employee_id, "role": Roles.EMPLOYEE})
    if result.deleted_count == 0:
        logger.warning("Employee deletion failed: not found", extra={"data": {"employee_id": employee_id}})
        raise HTTPException(status_code=404, detail="Employee not found")

    logger.info("Employee deleted", extra={"data": {"employee_id": employee_id}})
    return {"message": "Employee deleted successfully"}


# --- EMBEDDED TASKS ---

@router.post("/add-task", status_code=201)
async def add_own_task(
    task: TaskCreateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Add a task to the caller's own list"""
    created = await task_lifecycle.add_task(db, current_user.id, task)
    return {"message": "Task added successfully", "task": parse_mongo_data(created)}


@router.post("/add-task-to-user/{employee_id}", status_code=201)
async def add_task_for_employee(
    employee_id: str,
    task: TaskCreateModel = Body(...),
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    """Admin assigns a task to an employee; the admin is recorded as assigner"""
    assigned_by_id = None
    if not task.assigned_by or task.assigned_by == current_user.name:
        task.assigned_by = current_user.name
        assigned_by_id = current_user.id

    created = await task_lifecycle.add_task(db, employee_id, task, assigned_by_id=assigned_by_id)
    return {"message": "Task added successfully", "task": parse_mongo_data(created)}


async def _update_and_notify(db, background_tasks: BackgroundTasks, owner_id: str, task_id: str, changes: TaskUpdateModel, current_user: UserModel):
    updated, notice = await task_lifecycle.update_task(
        db, owner_id, task_id, changes,
        completed_by_id=current_user.id,
        completed_by_name=current_user.name,
    )
    if notice:
        background_tasks.add_task(dispatch_completion_notice, db, notice)
    return {"message": "Task updated successfully", "task": parse_mongo_data(updated)}


@router.put("/update-task/{task_id}")
async def update_own_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    changes: TaskUpdateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    return await _update_and_notify(db, background_tasks, current_user.id, task_id, changes, current_user)


@router.put("/update-task-for-user/{employee_id}/{task_id}")
async def update_employee_task(
    employee_id: str,
    task_id: str,
    background_tasks: BackgroundTasks,
    changes: TaskUpdateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Update a task on behalf of another employee (managers; gated by the client)"""
    return await _update_and_notify(db, background_tasks, employee_id, task_id, changes, current_user)


@router.delete("/delete-task/{task_id}")
async def delete_own_task(
    task_id: str,
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    removed = await task_lifecycle.delete_task(db, current_user.id, task_id)
    return {"message": "Task deleted successfully", "task": parse_mongo_data(removed)}


@router.delete("/delete-task-for-user/{employee_id}/{task_id}")
async def delete_employee_task(
    employee_id: str,
    task_id: str,
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    removed = await task_lifecycle.delete_task(db, employee_id, task_id)
    return {"message": "Task deleted successfully", "task": parse_mongo_data(removed)}


@router.post("/fix-task-ids")
async def fix_task_ids(current_user: UserModel = Depends(require_role(Roles.ADMIN)), db=Depends(get_db)):
    """Give legacy task entries (native `_id` only) a string `id`"""
    fixed = await task_lifecycle.fix_task_ids(db)
    return {"message": f"Normalized task ids for {fixed} user(s)", "usersFixed": fixed}
