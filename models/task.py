from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal
from datetime import datetime
import uuid

from constants import SELF_ASSIGNER

TaskStatusLiteral = Literal['pending', 'in-progress', 'completed']


def _blank_to_none(value):
    # Forms post "" for untouched date/status inputs
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskEntryModel(BaseModel):
    """A task embedded in its owner's `tasks` array. Stored and served with the camelCase aliases."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    task_name: str = Field(alias="taskName")
    project: str = ""
    assigned_by: str = Field(default=SELF_ASSIGNER, alias="AssignedBy")  # display label
    assigned_by_id: Optional[str] = Field(default=None, alias="assignedById")  # user id, when known
    start_date: datetime = Field(default_factory=datetime.now, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    remark: str = ""
    status: TaskStatusLiteral = 'pending'

    model_config = ConfigDict(populate_by_name=True)


class TaskCreateModel(BaseModel):
    task_name: str = Field(alias="taskName", min_length=1)
    project: str = ""
    assigned_by: Optional[str] = Field(default=None, alias="AssignedBy")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    remark: Optional[str] = None
    status: Optional[TaskStatusLiteral] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('assigned_by', 'start_date', 'end_date', 'status', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        return _blank_to_none(v)


class TaskUpdateModel(BaseModel):
    """
    Partial update. Falsy values for every field except `remark` mean "keep the
    previous value"; `remark` overwrites whenever it is present, "" included.
    """
    task_name: Optional[str] = Field(default=None, alias="taskName")
    project: Optional[str] = None
    assigned_by: Optional[str] = Field(default=None, alias="AssignedBy")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    remark: Optional[str] = None
    status: Optional[TaskStatusLiteral] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('task_name', 'project', 'assigned_by', 'start_date', 'end_date', 'status', mode='before')
    @classmethod
    def falsy_to_none(cls, v):
        # 0, False and "" all mean "keep", so they must not reach type coercion
        if not v:
            return None
        return _blank_to_none(v)
