from typing import List, Optional

import structlog
from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sqlalchemy.orm import Session

from .settings import settings
from . import auth, crud, deps, errors, schemas
from .logging_setup import configure_logging
from .middleware import RequestIdMiddleware

configure_logging(level=settings.LOG_LEVEL, json_logs=not settings.is_dev)
logger = structlog.get_logger(__name__)

# -----------------------------------------------------------------------------
# App & middleware
# -----------------------------------------------------------------------------
app = FastAPI(title="Task Tracker")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# -----------------------------------------------------------------------------
# Error translation
# -----------------------------------------------------------------------------
def _error_response(exc: errors.TaskTrackerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


@app.exception_handler(errors.TaskTrackerError)
async def handle_domain_error(request: Request, exc: errors.TaskTrackerError):
    if isinstance(exc, errors.InternalFailure):
        logger.error("request.internal_failure", path=request.url.path, cause=repr(exc.__cause__))
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    return _error_response(errors.ValidationError.from_pydantic(exc.errors()))


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("request.unhandled_error", path=request.url.path)
    return _error_response(errors.InternalFailure())

# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}

# -----------------------------------------------------------------------------
# Auth
# -----------------------------------------------------------------------------
@app.post("/auth/register", response_model=schemas.AuthOut, status_code=201)
def register(user_in: schemas.UserCreate, db: Session = Depends(deps.get_db)):
    return auth.register(db, user_in)


@app.post("/auth/login", response_model=schemas.AuthOut)
def login(body: schemas.LoginRequest, db: Session = Depends(deps.get_db)):
    return auth.login(db, body.email, body.password)


@app.get("/auth/me", response_model=schemas.UserOut)
def me(
    user_id: int = Depends(deps.get_current_user_id),
    db: Session = Depends(deps.get_db),
):
    return auth.current_user(db, user_id)

# -----------------------------------------------------------------------------
# Tasks (every route is owner-scoped through the access guard)
# -----------------------------------------------------------------------------
@app.get("/tasks", response_model=List[schemas.TaskOut])
def list_tasks(
    status: Optional[schemas.TaskStatus] = Query(None, description="pending | completed"),
    user_id: int = Depends(deps.get_current_user_id),
    db: Session = Depends(deps.get_db),
):
    return crud.list_tasks_for_owner(db, owner_id=user_id, status=status)


@app.post("/tasks", response_model=schemas.TaskOut, status_code=201)
def create_task(
    task_in: schemas.TaskCreate,
    user_id: int = Depends(deps.get_current_user_id),
    db: Session = Depends(deps.get_db),
):
    task = crud.create_task(db, owner_id=user_id, task_in=task_in)
    logger.info("task.created", task_id=task.id)
    return task


@app.get("/tasks/{task_id}", response_model=schemas.TaskOut)
def get_task(
    task_id: int,
    user_id: int = Depends(deps.get_current_user_id),
    db: Session = Depends(deps.get_db),
):
    task = crud.get_task(db, owner_id=user_id, task_id=task_id)
    if not task:
        raise errors.NotFound()
    return task


@app.put("/tasks/{task_id}", response_model=schemas.TaskOut)
@app.patch("/tasks/{task_id}", response_model=schemas.TaskOut)
def update_task(
    task_id: int,
    task_in: schemas.TaskUpdate,
    user_id: int = Depends(deps.get_current_user_id),
    db: Session = Depends(deps.get_db),
):
    task = crud.update_task(db, owner_id=user_id, task_id=task_id, task_in=task_in)
    if not task:
        raise errors.NotFound()
    logger.info("task.updated", task_id=task_id, fields=sorted(task_in.changes()))
    return task


@app.delete("/tasks/{task_id}", response_model=schemas.Message)
def delete_task(
    task_id: int,
    user_id: int = Depends(deps.get_current_user_id),
    db: Session = Depends(deps.get_db),
):
    if not crud.delete_task(db, owner_id=user_id, task_id=task_id):
        raise errors.NotFound()
    logger.info("task.deleted", task_id=task_id)
    return schemas.Message(detail="Task deleted")
