from fastapi import APIRouter, Body, Depends, HTTPException, Query
from typing import List, Optional
from datetime import datetime
from models.task_record import TaskRecordModel, TaskRecordCreateModel, TaskRecordUpdateModel
from models.user import UserModel
from routes.deps import get_current_user, get_db
from utils.references import populate
from utils.serialization import parse_mongo_data
from logging_config import get_logger
from constants import Roles

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])
logger = get_logger("tasks")


async def _with_refs(db, records: List[dict]) -> List[dict]:
    await populate(records, "employee", db.users, ("name", "email", "department_id"))
    await populate(records, "project", db.projects, ("name",))
    return parse_mongo_data(records)


@router.get("", response_model=List[dict])
async def list_task_records(
    employee: Optional[str] = None,
    department: Optional[str] = None,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Employees see their own records; admins see everyone's and may filter."""
    query = {}
    if current_user.role != Roles.ADMIN:
        query["employee"] = current_user.id
    else:
        if employee:
            query["employee"] = employee
        if start_date or end_date:
            query["date"] = {}
            if start_date:
                query["date"]["$gte"] = start_date
            if end_date:
                query["date"]["$lte"] = end_date
        if department:
            members = await db.users.find({"department_id": department}).to_list(1000)
            query["$and"] = [{"employee": {"$in": [m["id"] for m in members]}}]

    records = await db.tasks.find(query).sort("date", -1).to_list(5000)
    return await _with_refs(db, records)


@router.post("", status_code=201)
async def create_task_record(
    data: TaskRecordCreateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """File a task record for the caller"""
    if not await db.projects.find_one({"id": data.project_id}):
        raise HTTPException(status_code=404, detail="Project not found")

    fields = data.model_dump(exclude_none=True)
    record = TaskRecordModel(employee_id=current_user.id, **fields)
    doc = record.model_dump(by_alias=True)
    await db.tasks.insert_one(doc)

    logger.info("Task record created", extra={"data": {"task_id": record.id, "project_id": record.project_id}})
    return (await _with_refs(db, [doc]))[0]


@router.put("/{task_id}")
async def update_task_record(
    task_id: str,
    data: TaskRecordUpdateModel = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    record = await db.tasks.find_one({"id": task_id})
    if not record:
        raise HTTPException(status_code=404, detail="Task not found")

    if current_user.role != Roles.ADMIN and record["employee"] != current_user.id:
        logger.warning("Task record update denied", extra={"data": {"task_id": task_id}})
        raise HTTPException(status_code=403, detail="Not authorized")

    changes = {
        "status": data.status or record.get("status"),
        "remark": data.remark or record.get("remark"),
        "updated_at": datetime.now(),
    }
    await db.tasks.update_one({"id": task_id}, {"$set": changes})
    record.update(changes)

    logger.info("Task record updated", extra={"data": {"task_id": task_id, "status": changes["status"]}})
    return (await _with_refs(db, [record]))[0]
