from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Literal
from datetime import datetime
import uuid

class ProjectModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: Literal['active', 'completed', 'on-hold', 'planning'] = 'active'
    members: List[str] = Field(default_factory=list)  # user ids
    created_by: Optional[str] = None # user_id (Set by backend)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(populate_by_name=True)
