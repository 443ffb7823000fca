from sqlalchemy.orm import Session

from Grievances.models import Grievance, utcnow
from roles import UserPrincipal
from . import models, schemas


def create_comment(db: Session, grievance: Grievance, comment: schemas.CommentCreate, principal: UserPrincipal):
    # single INSERT, concurrent appends cannot overwrite each other
    db_comment = models.GrievanceComment(
        grievance_id=grievance.id,
        user_id=principal.id,
        text=comment.text,
    )
    db.add(db_comment)
    grievance.updated_at = utcnow()
    db.commit()
    db.refresh(db_comment)
    return db_comment
