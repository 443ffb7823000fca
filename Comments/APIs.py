from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import user_principal
from Grievances import crud as grievance_crud
from Grievances import schemas as grievance_schemas
from Grievances.APIs import grievance_payload, load_authorized_grievance
from roles import UserPrincipal
from schemas.base import DataResponse
from . import crud, schemas

router = APIRouter(prefix="/grievances", tags=["Comments"])


@router.post("/{grievance_id}/comments", response_model=DataResponse[grievance_schemas.GrievanceOut])
def add_comment(
        grievance_id: int,
        comment: schemas.CommentCreate,
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(user_principal),
):
    """
    Append a comment to a grievance and return the whole grievance.
    Only the submitter or an admin may comment.
    """
    grievance = load_authorized_grievance(db, grievance_id, principal, action="comment on")
    crud.create_comment(db, grievance, comment, principal)
    return grievance_payload(grievance_crud.get_grievance(db, grievance_id))
