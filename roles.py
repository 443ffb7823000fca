from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class RoleEnum(str, Enum):
    student = "student"
    admin = "admin"


@dataclass(frozen=True)
class StudentPrincipal:
    id: int


@dataclass(frozen=True)
class AdminPrincipal:
    id: int


@dataclass(frozen=True)
class DepartmentPrincipal:
    """A department account. Its id is the departments row id, not a user id."""
    id: int
    code: str


Principal = Union[StudentPrincipal, AdminPrincipal, DepartmentPrincipal]
UserPrincipal = Union[StudentPrincipal, AdminPrincipal]


def principal_for_user(user) -> UserPrincipal:
    if user.role == RoleEnum.admin:
        return AdminPrincipal(id=user.id)
    return StudentPrincipal(id=user.id)


def can_access(principal: Principal, submitted_by_id: Optional[int]) -> bool:
    """
    Admins may access any grievance, students only the ones they submitted.
    Department accounts never pass this check.
    """
    if isinstance(principal, AdminPrincipal):
        return True
    if isinstance(principal, StudentPrincipal):
        return submitted_by_id is not None and principal.id == submitted_by_id
    return False
