from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.database import get_session
from teamtasks.exceptions import (
    DependencyCycleException,
    DuplicateDependencyException,
    SelfDependencyException,
)
from teamtasks.models import DependencyCreate
from teamtasks.schemas.dependency_results import AddDependencyResult, ValidationResult
from teamtasks.schemas.responses import DependencyResponse
from teamtasks.services.task_dependency_service import task_dependency_service

router = APIRouter()
service = task_dependency_service


def _rejection(result: AddDependencyResult):
    """Map a rejected add-dependency result to its HTTP exception."""
    if result.reason == "self_dependency":
        return SelfDependencyException(result.error)
    if result.reason == "duplicate":
        return DuplicateDependencyException(result.error)
    return DependencyCycleException(result.error, circular_path=result.circular_path)


@router.post(
    "", response_model=DependencyResponse, status_code=status.HTTP_201_CREATED
)
async def add_dependency(
    request: DependencyCreate,
    session: AsyncSession = Depends(get_session),
):
    """Add a precedence edge (predecessor must resolve before successor).

    Edges that would create a cycle are rejected with the offending path.
    """
    result = await service.add_dependency(
        session,
        successor_id=request.successor_id,
        predecessor_id=request.predecessor_id,
        kind=request.kind,
    )
    if not result.success:
        raise _rejection(result)
    return result.dependency


@router.post("/validate", response_model=ValidationResult)
async def validate_dependency(
    request: DependencyCreate,
    session: AsyncSession = Depends(get_session),
):
    """Check a candidate edge without creating it."""
    return await service.validate_new_dependency(
        session,
        predecessor_id=request.predecessor_id,
        successor_id=request.successor_id,
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_dependency(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Soft delete an edge. Repeated calls succeed."""
    await service.remove_dependency(session, id)
