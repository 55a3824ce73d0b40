from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator
from typing import Optional, Literal, List
from datetime import datetime
import uuid

class UserModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    name: str
    password_hash: Optional[str] = None
    role: Literal['admin', 'employee'] = "employee"
    department_id: Optional[str] = None

    # Profile
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    avatar: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    # Embedded task entries (see models.task.TaskEntryModel), kept raw so legacy
    # entries still load; every write goes through a version check
    tasks: List[dict] = Field(default_factory=list)
    version: int = 0

    # Password reset
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )


class RegisterModel(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    department: str = Field(min_length=1)


class LoginModel(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ResetPasswordModel(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)
    confirm_password: str = Field(alias="confirmPassword", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class EmployeeCreateModel(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    department: Optional[str] = None
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    phone: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('start_date', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


class ProfileUpdateModel(BaseModel):
    """Fields an owner (or an admin) may change on a user."""
    name: Optional[str] = Field(default=None, min_length=1)  # assigner lookups match on name
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    avatar: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('start_date', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


class EmployeeUpdateModel(ProfileUpdateModel):
    department: Optional[str] = None
