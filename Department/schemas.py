from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from Grievances.models import GrievanceCategory, GrievanceStatus
from User.schemas import StudentSummary


class DepartmentBase(BaseModel):
    department_id: str = Field(..., min_length=1, max_length=50, description="Stable department code")
    name: str = Field(..., min_length=1, max_length=120)
    email: Optional[str] = None


class DepartmentCreate(DepartmentBase):
    pass


class Department(DepartmentBase):
    id: int

    class Config:
        from_attributes = True


class DepartmentGrievanceOut(BaseModel):
    id: int
    title: str
    description: str
    category: GrievanceCategory
    priority: Optional[str] = None
    status: GrievanceStatus
    submitted_by_id: int
    submitted_by: Optional[StudentSummary] = None
    department_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
