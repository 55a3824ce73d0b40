from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid

class DepartmentModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1)
    description: Optional[str] = None
    created_by: Optional[str] = None # user_id (Set by backend)
    created_at: datetime = Field(default_factory=datetime.now)
