from fastapi import APIRouter, Body, Depends, HTTPException
from typing import List
from models.project import ProjectModel
from models.user import UserModel
from routes.deps import get_current_user, get_db, require_role
from utils.serialization import parse_mongo_data
from logging_config import get_logger
from constants import Roles

router = APIRouter(prefix="/api/projects", tags=["Projects"])
logger = get_logger("projects")


@router.get("", response_model=List[dict])
async def list_projects(current_user: UserModel = Depends(get_current_user), db=Depends(get_db)):
    projects = await db.projects.find({}).sort("created_at", -1).to_list(1000)
    return parse_mongo_data(projects)


@router.post("", status_code=201)
async def create_project(
    project: ProjectModel = Body(...),
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    """Create a project (Admin only)"""
    project.created_by = current_user.id
    doc = project.model_dump()
    await db.projects.insert_one(doc)
    logger.info("Project created", extra={"data": {"project_id": project.id, "name": project.name}})
    return parse_mongo_data(doc)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    current_user: UserModel = Depends(require_role(Roles.ADMIN)),
    db=Depends(get_db)
):
    result = await db.projects.delete_one({"id": project_id})
    if result.deleted_count == 0:
        logger.warning("Project deletion failed: not found", extra={"data": {"project_id": project_id}})
        raise HTTPException(status_code=404, detail="Project not found")
    logger.info("Project deleted", extra={"data": {"project_id": project_id}})
    return {"message": "Project deleted successfully"}
