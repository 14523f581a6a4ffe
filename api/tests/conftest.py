"""
Pytest configuration and fixtures for integration tests.

This module provides:
- A fresh database per test (in-memory SQLite unless TEST_DATABASE_URL is set)
- Schema creation from the SQLModel metadata
- FastAPI test client with the session dependency overridden
- Factory fixtures for creating test data
"""

import os
from datetime import datetime
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.database import get_session
from teamtasks.main import app
from teamtasks.models import Task, TaskDependency


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================


@pytest.fixture(scope="session")
def test_database_url() -> str:
    """
    Get the test database URL from environment variables or use default.

    Defaults to an in-memory SQLite database through aiosqlite. Point
    TEST_DATABASE_URL at a disposable PostgreSQL database
    (postgresql+asyncpg://...) to run the suite against the production dialect.
    """
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


# =============================================================================
# Function-scoped fixtures (fresh for each test)
# =============================================================================


@pytest.fixture
async def test_engine(test_database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create an async engine with an empty schema for a single test.

    In-memory SQLite needs StaticPool so every session shares one connection.
    """
    engine_kwargs = {}
    if test_database_url.startswith("sqlite"):
        engine_kwargs = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }

    engine = create_async_engine(test_database_url, echo=False, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a single test."""
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an async HTTP client for testing FastAPI endpoints.

    This client has the database session dependency overridden to use the test session,
    ensuring all API calls see the same data as direct database operations in tests.
    """

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Factory fixtures for creating test data
# =============================================================================


@pytest.fixture
async def task_factory(test_session: AsyncSession):
    """
    Factory fixture for creating Task instances in the test database.

    Usage:
        task = await task_factory(title="Write report", status="in_progress")
    """

    async def _create_task(**kwargs) -> Task:
        defaults = {
            "title": "Test task",
            "status": "pending",
            "priority": "medium",
        }
        defaults.update(kwargs)

        task = Task(**defaults)
        test_session.add(task)
        await test_session.commit()
        await test_session.refresh(task)
        return task

    return _create_task


@pytest.fixture
async def task_dependency_factory(test_session: AsyncSession):
    """
    Factory fixture for creating TaskDependency edges in the test database.

    Bypasses validation, so tests can also seed states the API would reject.

    Usage:
        dep = await task_dependency_factory(successor_id=b.id, predecessor_id=a.id)
    """

    async def _create_dependency(
        successor_id: int,
        predecessor_id: int,
        kind: str = "finish_to_start",
        deleted_at: Optional[datetime] = None,
    ) -> TaskDependency:
        dep = TaskDependency(
            successor_id=successor_id,
            predecessor_id=predecessor_id,
            kind=kind,
            deleted_at=deleted_at,
        )
        test_session.add(dep)
        await test_session.commit()
        await test_session.refresh(dep)
        return dep

    return _create_dependency


@pytest.fixture
async def task_chain_factory(task_factory, task_dependency_factory):
    """
    Factory fixture for a linear chain of tasks, each depending on the previous.

    Usage:
        tasks = await task_chain_factory(3)  # tasks[0] -> tasks[1] -> tasks[2]
    """

    async def _create_chain(length: int, **task_kwargs) -> list[Task]:
        tasks = []
        for i in range(length):
            tasks.append(await task_factory(title=f"Step {i}", **task_kwargs))

        for previous, current in zip(tasks, tasks[1:]):
            await task_dependency_factory(
                successor_id=current.id, predecessor_id=previous.id
            )
        return tasks

    return _create_chain
