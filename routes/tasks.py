import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Optional
from database import get_session
from errors import NotFoundError, ValidationError
from middleware.auth import require_identity
from models import TaskPriority, TaskStatus
from schemas import (
    ApiResponse,
    Identity,
    SortOrder,
    TaskCreate,
    TaskQuery,
    TaskResponse,
    TaskSortField,
    TaskUpdate,
)
from stores.tasks import create_task, delete_task, get_task, list_tasks, update_task

router = APIRouter()


def parse_task_id(task_id: str) -> str:
    """
    Normalize a task id from the URL

    Raises:
        ValidationError: If the id is not a UUID
    """
    try:
        return str(uuid.UUID(task_id))
    except ValueError:
        raise ValidationError("Invalid task ID") from None


@router.get("")
async def get_tasks(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
    search: Optional[str] = Query(None, max_length=200),
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    sort_by: TaskSortField = Query(TaskSortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> ApiResponse:
    """
    Get all tasks for authenticated user

    Args:
        identity: Authenticated user
        session: Database session
        search: Case-insensitive text matched against title and description
        status_filter: Only tasks with this status
        priority: Only tasks with this priority
        sort_by: Field to order by
        sort_order: asc or desc

    Returns:
        ApiResponse with list of tasks
    """
    filters = TaskQuery(
        search=search.strip() if search else None,
        status=status_filter,
        priority=priority,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    tasks = await list_tasks(session, identity.user_id, filters)

    return ApiResponse(
        success=True,
        data={"tasks": [TaskResponse.model_validate(task).model_dump() for task in tasks]}
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_task(
    task_data: TaskCreate,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """Create a new task owned by the authenticated user"""
    task = await create_task(session, identity.user_id, task_data)

    return ApiResponse(
        success=True,
        data={
            "message": "Task created successfully",
            "task": TaskResponse.model_validate(task).model_dump(),
        }
    )


@router.get("/{task_id}")
async def read_task(
    task_id: str,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """
    Get task details

    A task owned by someone else is reported exactly like a missing one.
    """
    task = await get_task(session, identity.user_id, parse_task_id(task_id))

    if not task:
        raise NotFoundError("Task not found")

    return ApiResponse(
        success=True,
        data={"task": TaskResponse.model_validate(task).model_dump()}
    )


@router.put("/{task_id}")
async def edit_task(
    task_id: str,
    task_data: TaskUpdate,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """Update a task; fields left out of the body keep their values"""
    task = await update_task(session, identity.user_id, parse_task_id(task_id), task_data)

    if not task:
        raise NotFoundError("Task not found")

    return ApiResponse(
        success=True,
        data={
            "message": "Task updated successfully",
            "task": TaskResponse.model_validate(task).model_dump(),
        }
    )


@router.delete("/{task_id}")
async def remove_task(
    task_id: str,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """Delete a task"""
    deleted = await delete_task(session, identity.user_id, parse_task_id(task_id))

    if not deleted:
        raise NotFoundError("Task not found")

    return ApiResponse(
        success=True,
        data={"message": "Task deleted successfully"}
    )
