"""Task API routes.

Learn: Every handler receives the caller's identity from the access gate
and passes identity.account_id to the TaskService, which scopes all
storage calls by it. Task ids arrive as raw path strings and are parsed
here so a bad id gets its own error code ("invalid_id").
"""

from fastapi import APIRouter, Depends, Request

from tasklist.auth.dependencies import CurrentIdentity, get_current_user
from tasklist.errors import InvalidInput, NotFound
from tasklist.schemas.task import TaskCreate, TaskDeleted, TaskRead, TaskUpdate
from tasklist.services.task_service import TaskService

router = APIRouter()

# Largest value a BIGINT task id column can hold
MAX_TASK_ID = 2**63 - 1


def _task_svc(request: Request) -> TaskService:
    return TaskService(request.app.state.storage)


def _parse_task_id(raw: str) -> int:
    # ASCII digits only: int() would also take "+5", " 5", "5_0" and "٥".
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidInput("Task id must be a positive integer", code="invalid_id")
    task_id = int(raw)
    if task_id <= 0:
        raise InvalidInput("Task id must be a positive integer", code="invalid_id")
    if task_id > MAX_TASK_ID:
        # No row can have it, and BIGINT columns cannot even bind it.
        raise NotFound("Task not found")
    return task_id


@router.get("/todos", response_model=list[TaskRead])
async def list_tasks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first."""
    return await svc.list_tasks(identity.account_id)


@router.post("/todos", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a new task for the caller."""
    return await svc.create_task(identity.account_id, body.title)


@router.patch("/todos/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Rename a task or mark it (in)complete."""
    return await svc.update_task(
        identity.account_id,
        _parse_task_id(task_id),
        title=body.title,
        completed=body.completed,
    )


@router.delete("/todos/{task_id}", response_model=TaskDeleted)
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete one of the caller's tasks."""
    parsed = _parse_task_id(task_id)
    await svc.delete_task(identity.account_id, parsed)
    return TaskDeleted(id=parsed)
