'''
API models for the roster: classes and students.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.config import settings

# --- 1. API Input Models (for POST/PATCH) ---

class ClassCreate(BaseModel):
    """
    Validates the request body for creating a new class.
    """
    name: str = Field(..., min_length=1)
    note: Optional[str] = None

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class ClassUpdate(BaseModel):
    """
    Validates a partial update of a class. Only the fields sent are applied.
    """
    name: Optional[str] = Field(None, min_length=1)
    note: Optional[str] = None

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class StudentCreate(BaseModel):
    """
    Validates the request body for creating a new student.
    A student without a class is sent with class_id null (or omitted).
    """
    name: str = Field(..., min_length=1)
    class_id: Optional[UUID] = None
    fee_per_week: int = Field(default=settings.DEFAULT_WEEKLY_FEE, ge=0)
    mukafaah_per_week: int = Field(default=0, ge=0)
    active: bool = True

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

class StudentUpdate(BaseModel):
    """
    Validates a partial update of a student.
    Sending class_id: null explicitly removes the student from its class.
    """
    name: Optional[str] = Field(None, min_length=1)
    class_id: Optional[UUID] = None
    fee_per_week: Optional[int] = Field(None, ge=0)
    mukafaah_per_week: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


# --- 2. API Output Models (for GET) ---

class ClassRead(BaseModel):
    id: UUID
    name: str
    note: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class StudentRead(BaseModel):
    """
    The API model for a student.
    Corresponds to db_models.Students.
    """
    id: UUID
    name: str
    class_id: Optional[UUID] = None
    fee_per_week: int
    mukafaah_per_week: int
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
