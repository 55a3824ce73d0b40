from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal
from datetime import datetime
import uuid

TaskRecordStatus = Literal['pending', 'in-progress', 'completed', 'blocked']


class TaskRecordModel(BaseModel):
    """
    A standalone task document in the `tasks` collection, tied to a project
    and an employee by id. Separate from the entries embedded in user documents.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    task_name: str = Field(alias="taskName", min_length=1)
    project_id: str = Field(alias="project")
    employee_id: str = Field(alias="employee")
    assigned_by: Optional[str] = Field(default=None, alias="AssignedBy")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    status: TaskRecordStatus = 'pending'
    remark: Optional[str] = None
    date: datetime = Field(default_factory=datetime.now)  # filter key for date ranges
    submission_group: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="submissionGroup")

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(populate_by_name=True)


class TaskRecordCreateModel(BaseModel):
    task_name: str = Field(alias="taskName", min_length=1)
    project_id: str = Field(alias="project", min_length=1)
    assigned_by: Optional[str] = Field(default=None, alias="AssignedBy")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    remark: Optional[str] = None
    submission_group: Optional[str] = Field(default=None, alias="submissionGroup")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


class TaskRecordUpdateModel(BaseModel):
    """Status and remark only; a missing or empty value keeps the stored one."""
    status: Optional[TaskRecordStatus] = None
    remark: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator('status', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        if not v:
            return None
        return v
