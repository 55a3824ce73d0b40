from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal
from datetime import datetime
import uuid


class RelatedTaskModel(BaseModel):
    task_id: Optional[str] = None
    employee_id: Optional[str] = None  # owner of the embedded task


class NotificationModel(BaseModel):
    """In-app notification for task assignments and completions."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    recipient_id: str  # Who receives the notification
    type: Literal['TASK_ASSIGNED', 'TASK_DEADLINE', 'TASK_UPDATED', 'TASK_COMPLETED']

    message: str

    # Reference
    related_task: Optional[RelatedTaskModel] = None

    # Context
    metadata: Optional[dict] = None  # assignedBy, projectName, taskName, dueDate / completedBy, completedAt

    # State
    read: bool = False
    created_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(populate_by_name=True)


class AssignmentNotificationRequest(BaseModel):
    # Presence is checked by the dispatcher so a missing field answers 400
    recipient_id: Optional[str] = Field(default=None, alias="recipientId")
    task_name: Optional[str] = Field(default=None, alias="taskName")
    assigned_by: Optional[str] = Field(default=None, alias="assignedBy")
    project_name: Optional[str] = Field(default=None, alias="projectName")
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    task_id: Optional[str] = Field(default=None, alias="taskId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('due_date', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "":
            return None
        return v
