"""
Visit Pydantic schemas for API validation and serialization.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.validation import sanitize_string


class VisitCreate(BaseModel):
    """Schema for recording a visit. The date defaults to today when omitted."""

    pet_id: int = Field(..., gt=0, description="Id of the visited pet")
    visit_date: Optional[date] = Field(None, description="Date of the visit")
    description: Optional[str] = Field(None, max_length=255)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return sanitize_string(v) or None


class VisitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: Optional[int] = None
    visit_date: date
    description: Optional[str] = None
