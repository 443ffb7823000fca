import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from database import Base, SessionLocal, engine
from file_utils import build_attachment_store
from User import models as user_models  # noqa: F401
from Comments import models as comment_models  # noqa: F401
from Comments.APIs import router as comments_router
from Department import crud as department_crud
from Department.APIs import department_router, router as departments_router
from Grievances.APIs import router as grievances_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if config.SEED_DEPARTMENTS:
        db = SessionLocal()
        try:
            department_crud.seed_departments(db)
        finally:
            db.close()
    app.state.attachment_store = build_attachment_store()
    logger.info("Attachment backend: %s", config.ATTACHMENT_BACKEND)
    yield


app = FastAPI(title="Grievance Cell API", lifespan=lifespan)

app.include_router(grievances_router)
app.include_router(comments_router)
app.include_router(departments_router)
app.include_router(department_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": str(exc)},
    )


@app.get("/health")
def health():
    return {"success": True, "status": "healthy"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
