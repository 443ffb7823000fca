from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from dependencies import admin_principal, department_principal
from roles import AdminPrincipal, DepartmentPrincipal
from schemas.base import DataResponse, ListResponse
from . import crud, schemas

router = APIRouter(prefix="/departments", tags=["Departments"])
department_router = APIRouter(prefix="/department", tags=["Departments"])


@router.post("", response_model=DataResponse[schemas.Department], status_code=status.HTTP_201_CREATED)
def create_department(
        dept: schemas.DepartmentCreate,
        db: Session = Depends(get_db),
        principal: AdminPrincipal = Depends(admin_principal),
):
    if crud.get_department_by_code(db, dept.department_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Department {dept.department_id} already exists"
        )
    department = crud.create_department(db, dept)
    return {"success": True, "data": schemas.Department.model_validate(department)}


@router.get("", response_model=ListResponse[schemas.Department])
def list_departments(
        db: Session = Depends(get_db),
        principal: AdminPrincipal = Depends(admin_principal),
):
    departments = crud.get_departments(db)
    return {
        "success": True,
        "count": len(departments),
        "data": [schemas.Department.model_validate(d) for d in departments],
    }


@department_router.get("/grievances", response_model=ListResponse[schemas.DepartmentGrievanceOut])
def get_department_grievances(
        db: Session = Depends(get_db),
        principal: DepartmentPrincipal = Depends(department_principal),
):
    """
    Grievances routed to the logged-in department, newest first.
    """
    grievances = crud.get_department_grievances(db, principal.id)
    return {
        "success": True,
        "count": len(grievances),
        "data": [schemas.DepartmentGrievanceOut.model_validate(g) for g in grievances],
    }
