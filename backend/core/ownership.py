"""Ownership checks shared by every project- and task-scoped route.

Each dependency runs the same three steps: authenticate the caller, load the
resource (404 when it does not exist), then compare its owning user with the
caller (403 on mismatch). Existence is always reported before ownership.
"""
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from core.errors import AuthorizationError, NotFoundError
from core.security import get_current_user
from database import get_db
from models.project import Project
from models.task import Task
from models.user import User


def _parse_id(raw_id: str, resource: str) -> UUID:
    # A malformed id can never match a row, so it is reported like a missing one
    try:
        return UUID(str(raw_id))
    except ValueError:
        raise NotFoundError(resource)


async def get_owned_project(
    project_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Project:
    result = await db.execute(select(Project).where(Project.id == _parse_id(project_id, "Project")))
    project = result.scalar_one_or_none()
    if not project:
        raise NotFoundError("Project")
    if project.user_id != user.id:
        raise AuthorizationError("User not authorized to access or modify this project's resources.")
    return project


async def get_owned_task(
    task_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Task:
    result = await db.execute(
        select(Task).options(joinedload(Task.project)).where(Task.id == _parse_id(task_id, "Task"))
    )
    task = result.scalar_one_or_none()
    if not task:
        raise NotFoundError("Task")
    if task.project.user_id != user.id:
        raise AuthorizationError("User not authorized to access this task.")
    return task
