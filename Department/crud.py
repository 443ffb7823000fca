import logging
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from Grievances.models import Grievance, GrievanceCategory
from . import models, schemas

logger = logging.getLogger(__name__)

CATEGORY_DEPARTMENT_CODES = {
    GrievanceCategory.academic: "ACAD001",
    GrievanceCategory.administration: "ADMIN001",
    GrievanceCategory.infrastructure: "INFRA001",
    GrievanceCategory.hostel: "HOSTEL001",
    GrievanceCategory.general: "GEN001",
}

DEFAULT_DEPARTMENTS = [
    ("ACAD001", "Academic Affairs"),
    ("ADMIN001", "Administration Office"),
    ("INFRA001", "Infrastructure and Maintenance"),
    ("HOSTEL001", "Hostel Management"),
    ("GEN001", "General Grievance Cell"),
]


def get_department_by_code(db: Session, code: str):
    return db.query(models.Department).filter(models.Department.department_id == code).first()


def get_departments(db: Session):
    return db.query(models.Department).order_by(models.Department.department_id.asc()).all()


def create_department(db: Session, dept: schemas.DepartmentCreate):
    db_dept = models.Department(department_id=dept.department_id, name=dept.name, email=dept.email)
    db.add(db_dept)
    db.commit()
    db.refresh(db_dept)
    return db_dept


def get_department_for_category(db: Session, category) -> Optional[models.Department]:
    """
    Resolve the owning department of a category through the static code table.
    Returns None when the category is unknown or no department row carries the code.
    """
    try:
        code = CATEGORY_DEPARTMENT_CODES.get(GrievanceCategory(category))
    except ValueError:
        return None
    if code is None:
        return None
    return get_department_by_code(db, code)


def seed_departments(db: Session) -> int:
    """Insert the default departments that are not present yet. Returns how many were added."""
    existing = {code for (code,) in db.query(models.Department.department_id).all()}
    added = 0
    for code, name in DEFAULT_DEPARTMENTS:
        if code in existing:
            continue
        db.add(models.Department(department_id=code, name=name))
        added += 1
    if added:
        db.commit()
        logger.info("Seeded %d departments", added)
    return added


def get_department_grievances(db: Session, department_id: int):
    return db.query(Grievance) \
        .options(joinedload(Grievance.submitted_by)) \
        .filter(Grievance.department_id == department_id) \
        .order_by(Grievance.created_at.desc(), Grievance.id.desc()) \
        .all()
