import logging
from typing import List, Optional

from sqlalchemy import delete, or_, update
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.sql.expression import SelectOfScalar

from database import with_timeout
from models import Task, utc_now
from schemas import SortOrder, TaskCreate, TaskQuery, TaskSortField, TaskUpdate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    TaskSortField.CREATED_AT: Task.created_at,
    TaskSortField.UPDATED_AT: Task.updated_at,
    TaskSortField.TITLE: Task.title,
    TaskSortField.STATUS: Task.status,
    TaskSortField.PRIORITY: Task.priority,
}


def build_task_query(user_id: str, filters: TaskQuery) -> SelectOfScalar[Task]:
    """
    Build the listing query for one user's tasks

    The owner predicate always comes first. Search matches title or
    description case-insensitively, with LIKE wildcards taken literally.
    Equal sort keys fall back to id ascending so ordering is deterministic.

    Args:
        user_id: Owning user ID
        filters: Search, status/priority filters and sort options

    Returns:
        Select statement over Task
    """
    query = select(Task).where(Task.user_id == user_id)

    if filters.search:
        query = query.where(
            or_(
                col(Task.title).icontains(filters.search, autoescape=True),
                col(Task.description).icontains(filters.search, autoescape=True),
            )
        )

    if filters.status:
        query = query.where(Task.status == filters.status.value)

    if filters.priority:
        query = query.where(Task.priority == filters.priority.value)

    sort_column = col(SORT_COLUMNS[filters.sort_by])
    if filters.sort_order == SortOrder.ASC:
        query = query.order_by(sort_column.asc(), col(Task.id).asc())
    else:
        query = query.order_by(sort_column.desc(), col(Task.id).asc())

    return query


async def list_tasks(session: AsyncSession, user_id: str, filters: TaskQuery) -> List[Task]:
    result = await with_timeout(session.exec(build_task_query(user_id, filters)))
    return list(result.all())


async def create_task(session: AsyncSession, user_id: str, task_data: TaskCreate) -> Task:
    """Create a task owned by user_id"""
    task = Task(
        user_id=user_id,
        title=task_data.title,
        description=task_data.description or "",
        status=task_data.status,
        priority=task_data.priority,
    )

    session.add(task)
    await with_timeout(session.commit())
    await session.refresh(task)

    logger.info("Created task %s for user %s", task.id, user_id)
    return task


async def get_task(session: AsyncSession, user_id: str, task_id: str) -> Optional[Task]:
    """Fetch a task only if user_id owns it"""
    result = await with_timeout(
        session.exec(
            select(Task)
            .where(Task.id == task_id, Task.user_id == user_id)
            .execution_options(populate_existing=True)
        )
    )
    return result.first()


async def update_task(
    session: AsyncSession,
    user_id: str,
    task_id: str,
    task_data: TaskUpdate,
) -> Optional[Task]:
    """
    Merge the sent fields into a task owned by user_id

    Ownership check and write are one conditional UPDATE statement.

    Returns:
        The updated task, or None if no task with that id belongs to user_id
    """
    values = task_data.model_dump(exclude_none=True)
    values["updated_at"] = utc_now()

    result = await with_timeout(
        session.exec(
            update(Task)
            .where(Task.id == task_id, Task.user_id == user_id)
            .values(**values)
        )
    )
    if result.rowcount == 0:
        return None
    await with_timeout(session.commit())

    logger.info("Updated task %s for user %s", task_id, user_id)
    return await get_task(session, user_id, task_id)


async def delete_task(session: AsyncSession, user_id: str, task_id: str) -> bool:
    """Delete a task owned by user_id; False if there was nothing to delete"""
    result = await with_timeout(
        session.exec(delete(Task).where(Task.id == task_id, Task.user_id == user_id))
    )
    if result.rowcount == 0:
        return False
    await with_timeout(session.commit())

    logger.info("Deleted task %s for user %s", task_id, user_id)
    return True
