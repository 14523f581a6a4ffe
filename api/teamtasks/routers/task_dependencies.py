from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.database import get_session
from teamtasks.schemas.responses import (
    CanStartResponse,
    DependencyChainResponse,
    DependencyResponse,
    TaskResponse,
)
from teamtasks.services.task_dependency_service import task_dependency_service

router = APIRouter()
service = task_dependency_service


@router.get("/{id}/dependencies", response_model=List[DependencyResponse])
async def get_task_dependencies(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Live edges this task waits on."""
    await service.task_service.get_by_id(session, id)
    return await service.get_dependencies(session, id)


@router.get("/{id}/successors", response_model=List[DependencyResponse])
async def get_task_successors(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Live edges this task blocks."""
    await service.task_service.get_by_id(session, id)
    return await service.get_successors(session, id)


@router.get("/{id}/chain", response_model=DependencyChainResponse)
async def get_dependency_chain(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """All tasks that must resolve before this one, deepest first."""
    await service.task_service.get_by_id(session, id)
    chain = await service.get_dependency_chain(session, id)
    return DependencyChainResponse(task_id=id, chain=chain)


@router.get("/{id}/can-start", response_model=CanStartResponse)
async def can_task_start(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Whether all direct predecessors are completed or cancelled.

    Reports true when predecessor statuses cannot be read.
    """
    await service.task_service.get_by_id(session, id)
    can_start = await service.can_task_start(session, id)
    return CanStartResponse(task_id=id, can_start=can_start)


@router.get("/{id}/blocked", response_model=List[TaskResponse])
async def get_blocked_tasks(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Tasks that directly depend on this task."""
    await service.task_service.get_by_id(session, id)
    return await service.get_blocked_tasks(session, id)


@router.get("/{id}/available-predecessors", response_model=List[TaskResponse])
async def get_available_predecessors(
    id: int,
    team_id: Optional[int] = Query(None, description="Restrict to one team"),
    session: AsyncSession = Depends(get_session),
):
    """Tasks that can be added as predecessors without creating a cycle."""
    await service.task_service.get_by_id(session, id)
    return await service.get_available_predecessor_tasks(session, id, team_id=team_id)
