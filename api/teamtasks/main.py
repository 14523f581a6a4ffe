import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from teamtasks.config import settings
from teamtasks.exceptions import (
    DependencyCycleException,
    DuplicateDependencyException,
    SelfDependencyException,
)
from teamtasks.routers import dependencies, health, task_dependencies, tasks
from teamtasks.schemas.common import ErrorResponse

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse.create(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details={"errors": exc.errors()},
        ).model_dump(),
    )


@app.exception_handler(SelfDependencyException)
@app.exception_handler(DependencyCycleException)
@app.exception_handler(DuplicateDependencyException)
async def dependency_rejection_handler(request: Request, exc):
    """Render a rejected dependency, including the cycle path when there is one."""
    details = {}
    if isinstance(exc, DependencyCycleException):
        details["circular_path"] = exc.circular_path

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.create(
            code=exc.code,
            message=exc.detail,
            details=details,
        ).model_dump(),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Handle database integrity errors (FK violations, unique constraints, etc.)."""
    error_msg = str(exc.orig) if exc.orig else str(exc)
    logger.warning(f"Integrity error on {request.url.path}: {error_msg}")

    # Check for foreign key violation
    if "foreign key" in error_msg.lower() or "ForeignKeyViolation" in error_msg:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse.create(
                code="FOREIGN_KEY_VIOLATION",
                message="Referenced resource does not exist",
                details={"error": error_msg},
            ).model_dump(),
        )

    # Check for the self dependency check constraint
    if "no_self_dependency" in error_msg:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse.create(
                code="SELF_DEPENDENCY",
                message="Task cannot depend on itself",
                details={"error": error_msg},
            ).model_dump(),
        )

    # Other integrity errors
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse.create(
            code="INTEGRITY_ERROR",
            message="Database integrity constraint violated",
            details={"error": error_msg},
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.create(
            code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred",
            details={"error": str(exc)},
        ).model_dump(),
    )


# Routers
app.include_router(health.router, tags=["Health"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])

# Task dependencies
app.include_router(
    task_dependencies.router, prefix="/api/v1/tasks", tags=["Task Dependencies"]
)
app.include_router(
    dependencies.router, prefix="/api/v1/dependencies", tags=["Task Dependencies"]
)


@app.get("/")
async def root():
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/api/docs",
    }
