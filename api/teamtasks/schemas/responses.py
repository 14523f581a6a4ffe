from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ===== Task Response =====
class TaskResponse(BaseModel):
    """Task response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


# ===== TaskDependency Response =====
class DependencyResponse(BaseModel):
    """Dependency edge response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    successor_id: int
    predecessor_id: int
    kind: str
    created_at: datetime
    deleted_at: Optional[datetime] = None


class DependencyChainResponse(BaseModel):
    """Transitive predecessors of a task, deepest first."""

    task_id: int
    chain: list[int]


class CanStartResponse(BaseModel):
    """Start-eligibility of a task."""

    task_id: int
    can_start: bool
