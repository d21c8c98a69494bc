"""Task endpoints. Every route requires a verified caller."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from task_tracker_service.core.state import get_app_state
from task_tracker_service.routers.dependencies import require_caller
from task_tracker_service.routers.validation import read_json_body
from task_tracker_service.services.task_manager import TaskManager
from task_tracker_service.services.token_validator import CallerIdentity  # noqa: TC001

router = APIRouter()


def _task_manager() -> TaskManager:
    state = get_app_state()
    if state.task_manager is None:
        msg = "TaskManager not initialized"
        raise RuntimeError(msg)
    return state.task_manager


@router.post("/tasks", status_code=201)
async def create_task(
    request: Request,
    caller: CallerIdentity = Depends(require_caller),
) -> JSONResponse:
    """Create a task owned by the caller."""
    data = await read_json_body(request)
    result = await _task_manager().create_task(caller, data)
    return JSONResponse(status_code=201, content=result)


@router.get("/tasks")
async def list_tasks(caller: CallerIdentity = Depends(require_caller)) -> JSONResponse:
    """List the caller's tasks."""
    tasks = await _task_manager().list_tasks(caller)
    return JSONResponse(status_code=200, content=tasks)


# ---------------------------------------------------------------------------
# PATCH /tasks/done/{task_id}: its own path segment, distinct from
# PATCH /tasks/{task_id}
# ---------------------------------------------------------------------------


@router.patch("/tasks/done/{task_id}")
async def set_task_done(
    task_id: str,
    request: Request,
    caller: CallerIdentity = Depends(require_caller),
) -> JSONResponse:
    """Mark a task done or not done. An omitted ``done`` means not done."""
    data = await read_json_body(request)
    result = await _task_manager().set_task_done(caller, task_id, data)
    return JSONResponse(status_code=200, content=result)


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: str,
    request: Request,
    caller: CallerIdentity = Depends(require_caller),
) -> JSONResponse:
    """Update a task's title."""
    data = await read_json_body(request)
    result = await _task_manager().update_task(caller, task_id, data)
    return JSONResponse(status_code=200, content=result)


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    caller: CallerIdentity = Depends(require_caller),
) -> JSONResponse:
    """Delete one of the caller's tasks."""
    result = await _task_manager().delete_task(caller, task_id)
    return JSONResponse(status_code=200, content=result)
