from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..models import TaskEntity
from ..schemas import TaskIn, TaskOut
from ..services import TaskService

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


def get_task_service(request: Request) -> TaskService:
    """
    Dependency returning the TaskService built by create_app.
    """
    return request.app.state.task_service


def _found(item: Optional[TaskEntity]) -> TaskOut:
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get("/", response_model=List[TaskOut], summary="List Tasks")
def list_tasks(service: TaskService = Depends(get_task_service)) -> List[TaskOut]:
    return [TaskOut(**t) for t in service.list_all()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task. New tasks start as not completed unless the body says otherwise.",
    responses={
        201: {"description": "Task created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_task(payload: TaskIn, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return TaskOut(**service.create(payload))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    responses={404: {"description": "Task not found"}},
)
def get_task(task_id: int, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return _found(service.get(task_id))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Replace Task",
    description="Replace title, description and completed; id and created_at are kept.",
    responses={404: {"description": "Task not found"}},
)
def put_task(task_id: int, payload: TaskIn, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return _found(service.update(task_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(task_id: int, service: TaskService = Depends(get_task_service)) -> None:
    if not service.delete(task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return None


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/complete",
    response_model=TaskOut,
    summary="Complete Task",
    responses={404: {"description": "Task not found"}},
)
def complete_task(task_id: int, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return _found(service.set_completed(task_id, True))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/uncomplete",
    response_model=TaskOut,
    summary="Reopen Task",
    responses={404: {"description": "Task not found"}},
)
def uncomplete_task(task_id: int, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return _found(service.set_completed(task_id, False))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}/toggle",
    response_model=TaskOut,
    summary="Toggle Task Completion",
    description="Flip the completed flag, leaving every other field untouched.",
    responses={404: {"description": "Task not found"}},
)
def toggle_task(task_id: int, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return _found(service.toggle_completed(task_id))
