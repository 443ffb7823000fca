import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from dependencies import admin_principal, get_attachment_store, user_principal
from file_utils import AttachmentNotFound, AttachmentStore, AttachmentStoreError, save_upload_file
from roles import AdminPrincipal, UserPrincipal, can_access
from schemas.base import DataResponse, ListResponse, MessageResponse
from . import crud, models, schemas
from .models import GrievanceCategory, GrievanceStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grievances", tags=["Grievances"])


def load_authorized_grievance(db: Session, grievance_id: int, principal: UserPrincipal,
                              action: str = "access") -> models.Grievance:
    """Fetch a grievance, 404 when it does not exist, 403 when the caller may not touch it."""
    grievance = crud.get_grievance(db, grievance_id)
    if not grievance:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grievance not found")
    if not can_access(principal, grievance.submitted_by_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this grievance"
        )
    return grievance


def grievance_payload(grievance: models.Grievance) -> dict:
    return {"success": True, "data": schemas.GrievanceOut.model_validate(grievance)}


async def _store_photo(store: AttachmentStore, photo: Optional[UploadFile]) -> list:
    if photo is None or not photo.filename:
        return []
    try:
        return [await save_upload_file(store, photo)]
    except AttachmentStoreError as e:
        logger.error("Attachment upload failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error saving file: {str(e)}"
        )


def _discard(store: AttachmentStore, attachments: list):
    for attachment in attachments:
        try:
            store.delete(attachment["reference"])
        except AttachmentStoreError as e:
            logger.warning("Could not remove attachment %s: %s", attachment["reference"], e)


@router.post("", response_model=DataResponse[schemas.GrievanceOut], status_code=status.HTTP_201_CREATED)
@router.post("/create", response_model=DataResponse[schemas.GrievanceOut], status_code=status.HTTP_201_CREATED,
             include_in_schema=False)
async def create_grievance(
        title: str = Form(...),
        description: str = Form(...),
        category: GrievanceCategory = Form(...),
        priority: Optional[str] = Form(None),
        photo: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(user_principal),
        store: AttachmentStore = Depends(get_attachment_store),
):
    """
    Create a new grievance with an optional photo attachment.
    The owning department is derived from the category.
    """
    try:
        payload = schemas.GrievanceCreate(title=title, description=description, category=category, priority=priority)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    attachments = await _store_photo(store, photo)
    try:
        grievance = crud.create_grievance(db, payload, principal, attachments)
        return grievance_payload(grievance)
    except Exception as e:
        db.rollback()
        _discard(store, attachments)
        logger.error("Error creating grievance: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating grievance: {str(e)}"
        )


@router.get("", response_model=ListResponse[schemas.GrievanceOut])
def list_grievances(
        grievance_status: Optional[GrievanceStatus] = Query(None, alias="status"),
        category: Optional[GrievanceCategory] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(user_principal),
):
    """
    List grievances.
    - Admins see all grievances
    - Students see only their own grievances

    Filters are exact matches. ``sort`` is a comma separated field list,
    prefix a field with ``-`` for descending. Newest first by default.
    """
    grievances = crud.list_grievances(
        db, principal,
        status=grievance_status,
        category=category,
        priority=priority,
        sort=sort,
    )
    return {
        "success": True,
        "count": len(grievances),
        "data": [schemas.GrievanceOut.model_validate(g) for g in grievances],
    }


# declared before /{grievance_id} so the path is not swallowed
@router.get("/attachments/{reference}")
def download_attachment(
        reference: str,
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(user_principal),
        store: AttachmentStore = Depends(get_attachment_store),
):
    """
    Download an attachment file.

    Access follows the owning grievance: its submitter or an admin.
    Images are shown inline, everything else is sent as a download.
    """
    attachment = crud.get_attachment_by_reference(db, reference)
    if not attachment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")

    if not can_access(principal, attachment.grievance.submitted_by_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this attachment"
        )

    try:
        content, content_type = store.get(reference)
    except AttachmentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found on server")

    media_type = attachment.file_type or content_type
    filename = quote(attachment.file_name or reference)
    # svg can carry script, it is never rendered inline
    inline = media_type.startswith("image/") and media_type != "image/svg+xml"
    disposition = "inline" if inline else "attachment"
    headers = {
        "Content-Disposition": f"{disposition}; filename*=utf-8''{filename}",
        "X-Content-Type-Options": "nosniff",
    }

    return Response(content=content, media_type=media_type, headers=headers)


@router.get("/{grievance_id}", response_model=DataResponse[schemas.GrievanceOut])
def get_grievance_by_id(
        grievance_id: int,
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(user_principal),
):
    """
    Get a specific grievance by ID.
    Admins can access any grievance. Students can only access their own.
    """
    grievance = load_authorized_grievance(db, grievance_id, principal)
    return grievance_payload(grievance)


@router.put("/{grievance_id}", response_model=DataResponse[schemas.GrievanceOut])
async def update_grievance(
        grievance_id: int,
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        category: Optional[GrievanceCategory] = Form(None),
        priority: Optional[str] = Form(None),
        new_status: Optional[GrievanceStatus] = Form(None, alias="status"),
        assigned_to: Optional[int] = Form(None),
        notes: Optional[str] = Form(None),
        photo: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(user_principal),
        store: AttachmentStore = Depends(get_attachment_store),
):
    """
    Update a grievance.

    - Admins change ``status`` (and ``assigned_to``)
    - The submitter edits title, description, category and priority
    - A new photo is appended to the attachments

    Fields left out of the form keep their stored value.
    """
    grievance = load_authorized_grievance(db, grievance_id, principal, action="update")

    supplied = {
        "title": title,
        "description": description,
        "category": category,
        "priority": priority,
        "status": new_status,
        "assigned_to_id": assigned_to,
        "notes": notes,
    }
    if not isinstance(principal, AdminPrincipal):
        # students may not set these, never look at them
        for field in schemas.ADMIN_FIELDS:
            supplied.pop(field)
    try:
        update = schemas.GrievanceUpdate(**{k: v for k, v in supplied.items() if v is not None})
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    if update.assigned_to_id is not None and not crud.user_exists(db, update.assigned_to_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignee not found")

    attachments = await _store_photo(store, photo)
    try:
        grievance = crud.update_grievance(db, grievance, update, principal, attachments)
        return grievance_payload(grievance)
    except Exception as e:
        db.rollback()
        _discard(store, attachments)
        logger.error("Error updating grievance %s: %s", grievance_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating grievance: {str(e)}"
        )


@router.delete("/{grievance_id}", response_model=MessageResponse)
def delete_grievance(
        grievance_id: int,
        db: Session = Depends(get_db),
        principal: UserPrincipal = Depends(admin_principal),
        store: AttachmentStore = Depends(get_attachment_store),
):
    """
    Permanently remove a grievance. Admin only.
    Rejecting a grievance is a status change, this is the explicit delete.
    """
    grievance = crud.get_grievance(db, grievance_id)
    if not grievance:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grievance not found")

    references = crud.delete_grievance(db, grievance)
    _discard(store, [{"reference": r} for r in references])
    return {"success": True, "message": "Grievance deleted"}
