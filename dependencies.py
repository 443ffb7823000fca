import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

import config
from database import get_db
from Department.models import Department
from file_utils import AttachmentStore
from roles import AdminPrincipal, DepartmentPrincipal, Principal, StudentPrincipal, principal_for_user
from User.models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_KIND_USER = "user"
TOKEN_KIND_DEPARTMENT = "department"


def create_access_token(subject_id: int, kind: str = TOKEN_KIND_USER,
                        expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or config.JWT_EXPIRE_MINUTES)
    payload = {"sub": str(subject_id), "typ": kind, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_principal(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        payload = jwt.decode(credentials.credentials, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        subject_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise _unauthorized("Could not validate credentials")

    kind = payload.get("typ", TOKEN_KIND_USER)
    if kind == TOKEN_KIND_DEPARTMENT:
        department = db.query(Department).filter(Department.id == subject_id).first()
        if department is None:
            raise _unauthorized("Department not found")
        return DepartmentPrincipal(id=department.id, code=department.department_id)

    if kind != TOKEN_KIND_USER:
        raise _unauthorized("Could not validate credentials")

    user = db.query(User).filter(User.id == subject_id).first()
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Inactive user")
    return principal_for_user(user)


class PrincipalChecker:
    """Dependency that only lets through the given principal kinds."""

    def __init__(self, allowed_kinds: tuple, detail: str = "Not authorized to perform this action"):
        self.allowed_kinds = allowed_kinds
        self.detail = detail

    def __call__(self, principal: Principal = Depends(get_current_principal)) -> Principal:
        if not isinstance(principal, self.allowed_kinds):
            logger.warning("Rejected %s for this route", type(principal).__name__)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self.detail)
        return principal


user_principal = PrincipalChecker((StudentPrincipal, AdminPrincipal))
admin_principal = PrincipalChecker((AdminPrincipal,), detail="Only administrators can perform this action")
department_principal = PrincipalChecker((DepartmentPrincipal,), detail="Department account required")


def get_attachment_store(request: Request) -> AttachmentStore:
    return request.app.state.attachment_store
