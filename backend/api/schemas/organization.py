"""Organization schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class DepartmentSeed(BaseModel):
    """Department created together with its organization."""

    name: str = Field(default="", description="Department name; blank entries are skipped")
    description: Optional[str] = Field(default=None, description="Department description")


class OrganizationSetupRequest(BaseModel):
    """Create an organization owned by the caller."""

    name: str = Field(min_length=1, description="Organization name")
    departments: List[DepartmentSeed] = Field(default=[], description="Initial departments")


class OrganizationUpdate(BaseModel):
    """Request to update the current organization."""

    name: Optional[str] = Field(default=None, min_length=1, description="Organization name")


class OrganizationResponse(BaseModel):
    """Organization information, with the caller's role when known."""

    id: str = Field(description="Organization ID")
    name: str = Field(description="Organization name")
    slug: str = Field(description="Unique URL slug")
    role: Optional[str] = Field(default=None, description="Caller's role in the organization")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    class Config:
        from_attributes = True


class MemberResponse(BaseModel):
    """Organization member joined with profile data."""

    user_id: str
    email: str
    full_name: str
    role: str
    department_id: Optional[str] = None
    joined_at: datetime
