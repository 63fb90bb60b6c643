import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.project import Project
from models.task import Task
from schemas.project import MessageResponse
from schemas.task import TaskCreate, TaskUpdate, TaskResponse, TaskEnvelope, TaskListResponse
from core.ownership import get_owned_project, get_owned_task

logger = logging.getLogger(__name__)
router = APIRouter(tags=["tasks"])


@router.get("/projects/{project_id}/tasks", response_model=TaskListResponse)
async def list_tasks(project: Project = Depends(get_owned_project), db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Task).where(Task.project_id == project.id).order_by(Task.created_at.desc())
    )
    tasks = result.scalars().all()
    return TaskListResponse(
        message="Tasks fetched successfully.",
        count=len(tasks),
        tasks=[TaskResponse.model_validate(t) for t in tasks],
    )


@router.post("/projects/{project_id}/tasks", response_model=TaskEnvelope, status_code=201)
async def create_task(
    req: TaskCreate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    task = Task(
        project_id=project.id,
        title=req.title,
        description=req.description,
        due_date=req.due_date,
        priority=req.priority,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Task created: %s (project %s)", task.id, project.id)
    return TaskEnvelope(message="Task created successfully.", task=TaskResponse.model_validate(task))


@router.get("/tasks/{task_id}", response_model=TaskEnvelope)
async def get_task(task: Task = Depends(get_owned_task)):
    return TaskEnvelope(message="Task fetched successfully.", task=TaskResponse.model_validate(task))


async def _apply_update(task: Task, req: TaskUpdate, db: AsyncSession) -> TaskEnvelope:
    for field, value in req.model_dump(exclude_unset=True).items():
        setattr(task, field, value)
    await db.commit()
    await db.refresh(task)
    return TaskEnvelope(message="Task updated successfully.", task=TaskResponse.model_validate(task))


@router.put("/tasks/{task_id}", response_model=TaskEnvelope)
async def update_task(req: TaskUpdate, task: Task = Depends(get_owned_task), db: AsyncSession = Depends(get_db)):
    return await _apply_update(task, req, db)


@router.patch("/tasks/{task_id}", response_model=TaskEnvelope)
async def patch_task(req: TaskUpdate, task: Task = Depends(get_owned_task), db: AsyncSession = Depends(get_db)):
    return await _apply_update(task, req, db)


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(task: Task = Depends(get_owned_task), db: AsyncSession = Depends(get_db)):
    task_id = task.id
    await db.delete(task)
    await db.commit()
    logger.info("Task deleted: %s", task_id)
    return MessageResponse(message="Task deleted successfully.")
