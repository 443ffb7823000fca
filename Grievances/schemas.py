from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from Comments.schemas import Comment
from User.schemas import SubmitterOut, UserBrief
from .models import GrievanceCategory, GrievanceStatus


class StatusHistoryOut(BaseModel):
    id: int
    status: GrievanceStatus
    changed_at: datetime
    changed_by_id: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class AttachmentOut(BaseModel):
    id: int
    reference: str
    file_name: str
    file_type: str
    file_size: int
    file_url: str
    uploaded_at: datetime

    class Config:
        from_attributes = True


class DepartmentBrief(BaseModel):
    id: int
    department_id: str
    name: str

    class Config:
        from_attributes = True


class GrievanceCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: GrievanceCategory
    priority: Optional[str] = Field(None, max_length=50)


class GrievanceUpdate(BaseModel):
    """
    Partial update. Only fields that were actually supplied are applied,
    read them with ``model_dump(exclude_unset=True)``.
    """
    # owner fields
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[GrievanceCategory] = None
    priority: Optional[str] = Field(None, max_length=50)
    # admin fields
    status: Optional[GrievanceStatus] = None
    assigned_to_id: Optional[int] = None
    notes: Optional[str] = None


OWNER_FIELDS = ("title", "description", "category", "priority")
ADMIN_FIELDS = ("status", "assigned_to_id", "notes")


class GrievanceOut(BaseModel):
    id: int
    title: str
    description: str
    category: GrievanceCategory
    priority: Optional[str] = None
    status: GrievanceStatus
    submitted_by_id: int
    submitted_by: Optional[SubmitterOut] = None
    assigned_to_id: Optional[int] = None
    assigned_to: Optional[UserBrief] = None
    department_id: Optional[int] = None
    department: Optional[DepartmentBrief] = None
    attachments: List[AttachmentOut] = []
    comments: List[Comment] = []
    status_history: List[StatusHistoryOut] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
