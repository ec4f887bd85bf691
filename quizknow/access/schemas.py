"""
Pydantic schemas for access-request payloads
"""
from typing import Optional

from pydantic import BaseModel, Field


class AccessRequestCreate(BaseModel):
    """Body of a student's request to join an instructor"""
    instructor_id: int = Field(..., gt=0)
    message: str = Field("", max_length=1000)


class AccessRequestDecision(BaseModel):
    """Body of an instructor's accept/reject call"""
    reason: Optional[str] = Field(None, max_length=1000)
