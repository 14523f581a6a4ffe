from typing import List, Optional

from fastapi import HTTPException, status


class NotFoundException(HTTPException):
    """Resource not found exception (404)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class ConflictException(HTTPException):
    """Resource conflict exception (409)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ValidationException(HTTPException):
    """Validation error exception (422)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class StoreException(HTTPException):
    """Backing store read/write failure (503)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )


# ===== Dependency-specific Exceptions =====


class SelfDependencyException(ValidationException):
    """Task cannot depend on itself (422)."""

    code = "SELF_DEPENDENCY"

    def __init__(self, detail: str = "Task cannot depend on itself"):
        super().__init__(detail)


class DependencyCycleException(ValidationException):
    """Dependency cycle detected (422).

    Carries the offending cycle so the client can show which edge to remove.
    """

    code = "CIRCULAR_DEPENDENCY"

    def __init__(
        self,
        detail: str = "Circular dependency detected",
        circular_path: Optional[List[int]] = None,
    ):
        super().__init__(detail)
        self.circular_path = circular_path or []


class DuplicateDependencyException(ConflictException):
    """Live dependency between the two tasks already exists (409)."""

    code = "DUPLICATE_DEPENDENCY"

    def __init__(self, detail: str = "Dependency already exists"):
        super().__init__(detail)
