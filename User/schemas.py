from typing import Optional

from pydantic import BaseModel

from roles import RoleEnum


class UserBrief(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class StudentSummary(UserBrief):
    student_id: Optional[str] = None


class SubmitterOut(StudentSummary):
    department: Optional[str] = None


class CommentAuthorOut(UserBrief):
    role: RoleEnum
