import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.user import User
from models.project import Project
from schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectEnvelope,
    ProjectListResponse,
    MessageResponse,
)
from core.security import get_current_user
from core.ownership import get_owned_project

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ProjectListResponse)
async def list_projects(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Project).where(Project.user_id == user.id).order_by(Project.created_at.desc())
    )
    projects = result.scalars().all()
    return ProjectListResponse(
        message="Projects fetched successfully.",
        count=len(projects),
        projects=[ProjectResponse.model_validate(p) for p in projects],
    )


@router.post("", response_model=ProjectEnvelope, status_code=201)
async def create_project(req: ProjectCreate, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    project = Project(name=req.name, user_id=user.id)
    db.add(project)
    await db.commit()
    await db.refresh(project)
    logger.info("Project created: %s (user %s)", project.id, user.id)
    return ProjectEnvelope(message="Project created successfully.", project=ProjectResponse.model_validate(project))


@router.get("/{project_id}", response_model=ProjectEnvelope)
async def get_project(project: Project = Depends(get_owned_project)):
    return ProjectEnvelope(message="Project fetched successfully.", project=ProjectResponse.model_validate(project))


@router.put("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    req: ProjectUpdate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
):
    project.name = req.name
    await db.commit()
    await db.refresh(project)
    return ProjectEnvelope(message="Project updated successfully.", project=ProjectResponse.model_validate(project))


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(project: Project = Depends(get_owned_project), db: AsyncSession = Depends(get_db)):
    project_id = project.id
    # tasks go with the project, through the relationship cascade and ON DELETE CASCADE
    await db.delete(project)
    await db.commit()
    logger.info("Project deleted: %s", project_id)
    return MessageResponse(message="Project and associated tasks deleted successfully.")
