from datetime import datetime
from typing import Literal, Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high"]
DependencyType = Literal["finish_to_start", "start_to_start"]

# Predecessor states that no longer block a successor
RESOLVED_STATUSES = frozenset({"completed", "cancelled"})


# ===== Task =====
class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: Optional[int] = Field(default=None, index=True)
    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    status: str = Field(default="pending", max_length=20)
    priority: str = Field(default="medium", max_length=10)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    # Soft delete marker - rows with a value are invisible to all queries
    deleted_at: Optional[datetime] = None


# ===== TaskDependency =====
class TaskDependency(SQLModel, table=True):
    """Precedence edge: predecessor must resolve before successor proceeds."""

    __tablename__ = "task_dependencies"
    __table_args__ = (
        CheckConstraint("successor_id != predecessor_id", name="no_self_dependency"),
        CheckConstraint(
            "kind IN ('finish_to_start', 'start_to_start')",
            name="valid_dependency_kind",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    successor_id: int = Field(foreign_key="tasks.id", index=True)
    predecessor_id: int = Field(foreign_key="tasks.id", index=True)
    kind: str = Field(default="finish_to_start", max_length=20)
    created_at: datetime = Field(default_factory=datetime.now)
    # Only mutable column after creation
    deleted_at: Optional[datetime] = None


# ===== Create/Update Schemas =====
class TaskCreate(SQLModel):
    """Schema for creating a new task. All required fields must be provided."""
    title: str = Field(min_length=1, max_length=300)
    team_id: Optional[int] = None
    description: Optional[str] = None
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class TaskUpdate(SQLModel):
    """Schema for updating an existing task. All fields are optional."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    team_id: Optional[int] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class DependencyCreate(SQLModel):
    """Schema for adding a precedence edge."""
    predecessor_id: int
    successor_id: int
    kind: DependencyType = "finish_to_start"
