"""
Pydantic schemas for profile endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    course: Optional[str] = None
    college: Optional[str] = None
    graduation_year: Optional[int] = None
    specialization: Optional[str] = None
    resume_url: Optional[str] = None
    resume_name: Optional[str] = None
    updated_at: Optional[datetime] = None


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left untouched."""
    full_name: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    course: Optional[str] = Field(None, max_length=100, description="Course/degree, e.g. B.Tech, MBA")
    college: Optional[str] = Field(None, max_length=200)
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    specialization: Optional[str] = Field(None, max_length=100)
    resume_url: Optional[str] = Field(None, description="Storage URL of the uploaded resume")
    resume_name: Optional[str] = Field(None, max_length=255)
