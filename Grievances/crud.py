import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from Comments.models import GrievanceComment
from Department import crud as department_crud
from roles import AdminPrincipal, UserPrincipal
from User.models import User
from . import models, schemas
from .models import GrievanceStatus, utcnow

logger = logging.getLogger(__name__)

# API field names (snake_case and the camelCase spelling clients send) -> columns
SORTABLE_FIELDS = {
    "id": models.Grievance.id,
    "title": models.Grievance.title,
    "category": models.Grievance.category,
    "priority": models.Grievance.priority,
    "status": models.Grievance.status,
    "created_at": models.Grievance.created_at,
    "createdAt": models.Grievance.created_at,
    "updated_at": models.Grievance.updated_at,
    "updatedAt": models.Grievance.updated_at,
}

DEFAULT_ORDER = (models.Grievance.created_at.desc(), models.Grievance.id.desc())


def build_sort(sort: Optional[str]) -> list:
    """
    Translate ``"priority,-createdAt"`` into ORDER BY clauses.
    A leading ``-`` sorts descending. Unknown fields are skipped.
    """
    clauses = []
    if not sort:
        return clauses
    for raw in sort.split(","):
        key = raw.strip()
        descending = key.startswith("-")
        name = key.lstrip("-+").strip()
        column = SORTABLE_FIELDS.get(name)
        if column is None:
            continue
        clauses.append(column.desc() if descending else column.asc())
    return clauses


def _with_details(query):
    return query.options(
        joinedload(models.Grievance.submitted_by),
        joinedload(models.Grievance.assigned_to),
        joinedload(models.Grievance.department),
        selectinload(models.Grievance.attachments),
        selectinload(models.Grievance.comments).joinedload(GrievanceComment.user),
        selectinload(models.Grievance.status_history),
    )


def get_grievance(db: Session, grievance_id: int) -> Optional[models.Grievance]:
    return _with_details(db.query(models.Grievance)) \
        .filter(models.Grievance.id == grievance_id) \
        .first()


def list_grievances(
        db: Session,
        principal: UserPrincipal,
        status: Optional[GrievanceStatus] = None,
        category: Optional[models.GrievanceCategory] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
) -> List[models.Grievance]:
    query = _with_details(db.query(models.Grievance))

    # Admins see everything, everybody else only what they submitted
    if not isinstance(principal, AdminPrincipal):
        query = query.filter(models.Grievance.submitted_by_id == principal.id)

    if status:
        query = query.filter(models.Grievance.status == status)
    if category:
        query = query.filter(models.Grievance.category == category)
    if priority:
        query = query.filter(models.Grievance.priority == priority)

    order = build_sort(sort) or list(DEFAULT_ORDER)
    return query.order_by(*order).all()


def create_grievance(
        db: Session,
        grievance: schemas.GrievanceCreate,
        principal: UserPrincipal,
        attachments: Optional[List[dict]] = None,
) -> models.Grievance:
    department = department_crud.get_department_for_category(db, grievance.category)

    db_g = models.Grievance(
        title=grievance.title,
        description=grievance.description,
        category=grievance.category,
        priority=grievance.priority,
        status=GrievanceStatus.pending,
        submitted_by_id=principal.id,
        department_id=department.id if department else None,
    )
    for attachment in attachments or []:
        db_g.attachments.append(models.GrievanceAttachment(**attachment))
    db_g.status_history.append(
        models.GrievanceStatusHistory(status=GrievanceStatus.pending, changed_by_id=principal.id)
    )

    db.add(db_g)
    db.commit()
    db.refresh(db_g)
    logger.info("Grievance %s created by user %s", db_g.id, principal.id)
    return db_g


def update_grievance(
        db: Session,
        db_g: models.Grievance,
        update: schemas.GrievanceUpdate,
        principal: UserPrincipal,
        attachments: Optional[List[dict]] = None,
) -> models.Grievance:
    """
    Apply the fields present in ``update`` that the principal's role may change.
    Admins move status/assignment, owners edit the content. Attachments are appended.
    """
    changes = update.model_dump(exclude_unset=True)

    if isinstance(principal, AdminPrincipal):
        new_status = changes.get("status")
        if new_status is not None and new_status != db_g.status:
            db_g.status = new_status
            db_g.status_history.append(
                models.GrievanceStatusHistory(
                    status=new_status,
                    changed_by_id=principal.id,
                    notes=changes.get("notes"),
                )
            )
            logger.info("Grievance %s moved to %s by admin %s", db_g.id, new_status.value, principal.id)
        if changes.get("assigned_to_id") is not None:
            db_g.assigned_to_id = changes["assigned_to_id"]
    else:
        for field in schemas.OWNER_FIELDS:
            if field in changes and changes[field] is not None:
                setattr(db_g, field, changes[field])

    for attachment in attachments or []:
        db_g.attachments.append(models.GrievanceAttachment(**attachment))
    if attachments:
        db_g.updated_at = utcnow()

    db.commit()
    db.refresh(db_g)
    return db_g


def delete_grievance(db: Session, db_g: models.Grievance) -> List[str]:
    """Remove the record with its children. Returns the attachment references it held."""
    references = [a.reference for a in db_g.attachments]
    grievance_id = db_g.id
    db.delete(db_g)
    db.commit()
    logger.info("Grievance %s deleted", grievance_id)
    return references


def get_attachment_by_reference(db: Session, reference: str) -> Optional[models.GrievanceAttachment]:
    return db.query(models.GrievanceAttachment) \
        .options(joinedload(models.GrievanceAttachment.grievance)) \
        .filter(models.GrievanceAttachment.reference == reference) \
        .first()


def user_exists(db: Session, user_id: int) -> bool:
    return db.query(User.id).filter(User.id == user_id).first() is not None
