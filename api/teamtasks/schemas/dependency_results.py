from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from teamtasks.models import TaskDependency

RejectionReason = Literal["self_dependency", "circular_dependency", "duplicate"]


class ValidationResult(BaseModel):
    """Outcome of checking a candidate edge against the live graph."""

    valid: bool
    error: Optional[str] = None
    circular_path: Optional[List[int]] = None


class AddDependencyResult(BaseModel):
    """Outcome of an add-dependency request.

    Rejections are user-correctable and returned as data, never raised.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    reason: Optional[RejectionReason] = None
    error: Optional[str] = None
    circular_path: Optional[List[int]] = None
    dependency: Optional[TaskDependency] = None
