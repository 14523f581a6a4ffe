from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.database import get_session
from teamtasks.models import Task, TaskCreate, TaskUpdate
from teamtasks.services.task_service import TaskService
from teamtasks.schemas.common import PaginatedResponse
from teamtasks.schemas.responses import TaskResponse
from teamtasks.dependencies import CommonQueryParams, TaskFilterParams

router = APIRouter()
service = TaskService(Task)


@router.get("", response_model=PaginatedResponse[TaskResponse])
async def list_tasks(
    commons: CommonQueryParams = Depends(),
    filters: TaskFilterParams = Depends(),
    session: AsyncSession = Depends(get_session),
):
    """Get all live tasks with filtering and pagination."""
    items, total = await service.get_all_with_filters(
        session,
        skip=commons.skip,
        limit=commons.limit,
        team_id=filters.team_id,
        status=filters.status,
        sort=commons.sort,
    )

    return PaginatedResponse(
        items=items, total=total, skip=commons.skip, limit=commons.limit
    )


@router.get("/{id}", response_model=TaskResponse)
async def get_task(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get a single task by ID."""
    return await service.get_by_id(session, id)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_create: TaskCreate,
    session: AsyncSession = Depends(get_session),
):
    """Create a new task."""
    task = Task(**task_create.model_dump(exclude_unset=True))
    return await service.create(session, task)


@router.patch("/{id}", response_model=TaskResponse)
async def update_task(
    id: int,
    task_update: TaskUpdate,
    session: AsyncSession = Depends(get_session),
):
    """Update a task (partial update)."""
    return await service.update(session, id, task_update)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Soft delete a task. Its dependency edges stay and stop blocking."""
    await service.delete(session, id)
