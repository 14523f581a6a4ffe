import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.config import settings
from teamtasks.dependency_graph import (
    SELF_DEPENDENCY_ERROR,
    build_dependency_graph,
    collect_descendants,
    validate_new_edge,
)
from teamtasks.exceptions import NotFoundException, StoreException
from teamtasks.models import RESOLVED_STATUSES, Task, TaskDependency
from teamtasks.schemas.dependency_results import AddDependencyResult, ValidationResult
from teamtasks.services.task_service import TaskService

logger = logging.getLogger(__name__)

DUPLICATE_DEPENDENCY_ERROR = "Dependency already exists"


class TaskDependencyService:
    """Task dependency management.

    Keeps the live edge set acyclic and answers chain / eligibility queries
    over it. The graph is re-read from the store on every call.
    """

    def __init__(self, lock_key: Optional[int] = None):
        self.lock_key = settings.DEPENDENCY_LOCK_KEY if lock_key is None else lock_key
        self.task_service = TaskService(Task)
        # Serializes read-validate-write of new edges within this process
        self._write_lock = asyncio.Lock()

    async def get_dependencies(
        self, session: AsyncSession, task_id: int
    ) -> List[TaskDependency]:
        """Live edges where the task is the successor (what it waits on).

        Args:
            session: Database session
            task_id: Task ID

        Returns:
            Edges ordered by creation
        """
        query = (
            select(TaskDependency)
            .where(
                TaskDependency.successor_id == task_id,
                TaskDependency.deleted_at.is_(None),
            )
            .order_by(TaskDependency.id)
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_successors(
        self, session: AsyncSession, task_id: int
    ) -> List[TaskDependency]:
        """Live edges where the task is the predecessor (what it blocks).

        Args:
            session: Database session
            task_id: Task ID

        Returns:
            Edges ordered by creation
        """
        query = (
            select(TaskDependency)
            .where(
                TaskDependency.predecessor_id == task_id,
                TaskDependency.deleted_at.is_(None),
            )
            .order_by(TaskDependency.id)
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    async def validate_new_dependency(
        self,
        session: AsyncSession,
        predecessor_id: int,
        successor_id: int,
    ) -> ValidationResult:
        """Check a candidate edge against the current live graph without writing.

        Args:
            session: Database session
            predecessor_id: Task that must resolve first
            successor_id: Task that would be blocked

        Returns:
            ValidationResult, with the cycle path when invalid
        """
        if predecessor_id == successor_id:
            return validate_new_edge(predecessor_id, successor_id, [])

        edges = await self._load_downstream_edges(session, successor_id)
        return validate_new_edge(predecessor_id, successor_id, edges)

    async def add_dependency(
        self,
        session: AsyncSession,
        successor_id: int,
        predecessor_id: int,
        kind: str = "finish_to_start",
    ) -> AddDependencyResult:
        """Add a precedence edge after validating it.

        Args:
            session: Database session
            successor_id: Task that becomes blocked
            predecessor_id: Task that must resolve first
            kind: finish_to_start or start_to_start

        Returns:
            AddDependencyResult carrying the created edge, or the rejection
            reason (self dependency, duplicate, cycle with its path)

        Raises:
            NotFoundException: Either task does not exist
            StoreException: The insert failed
        """
        if predecessor_id == successor_id:
            logger.info(f"Rejected self dependency on task {successor_id}")
            return AddDependencyResult(
                success=False,
                reason="self_dependency",
                error=SELF_DEPENDENCY_ERROR,
            )

        await self.task_service.get_by_id(session, successor_id)
        await self.task_service.get_by_id(session, predecessor_id)

        async with self._serialized(session):
            if await self._find_live_edge(session, successor_id, predecessor_id):
                return AddDependencyResult(
                    success=False,
                    reason="duplicate",
                    error=DUPLICATE_DEPENDENCY_ERROR,
                )

            validation = await self.validate_new_dependency(
                session, predecessor_id, successor_id
            )
            if not validation.valid:
                logger.info(
                    f"Rejected dependency {predecessor_id} -> {successor_id}: "
                    f"cycle {validation.circular_path}"
                )
                return AddDependencyResult(
                    success=False,
                    reason="circular_dependency",
                    error=validation.error,
                    circular_path=validation.circular_path,
                )

            dependency = TaskDependency(
                successor_id=successor_id,
                predecessor_id=predecessor_id,
                kind=kind,
            )
            session.add(dependency)
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    f"Failed to add dependency {predecessor_id} -> {successor_id}: {e}"
                )
                raise StoreException(f"Failed to add dependency: {e}") from e

        await session.refresh(dependency)
        logger.info(
            f"Added dependency {dependency.id}: {predecessor_id} -> {successor_id} ({kind})"
        )
        return AddDependencyResult(success=True, dependency=dependency)

    async def remove_dependency(
        self, session: AsyncSession, dependency_id: int
    ) -> TaskDependency:
        """Soft delete an edge. Removing an already removed edge is a no-op.

        Args:
            session: Database session
            dependency_id: Edge ID

        Returns:
            The (now soft deleted) edge

        Raises:
            NotFoundException: No edge with this ID was ever created
            StoreException: The update failed
        """
        query = select(TaskDependency).where(TaskDependency.id == dependency_id)
        result = await session.execute(query)
        dependency = result.scalar_one_or_none()

        if not dependency:
            raise NotFoundException(f"Dependency with id {dependency_id} not found")

        if dependency.deleted_at is not None:
            return dependency

        dependency.deleted_at = datetime.now()
        session.add(dependency)
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to remove dependency {dependency_id}: {e}")
            raise StoreException(f"Failed to remove dependency: {e}") from e

        logger.info(f"Removed dependency {dependency_id}")
        return dependency

    async def get_dependency_chain(
        self, session: AsyncSession, task_id: int
    ) -> List[int]:
        """All tasks that must (transitively) resolve before ``task_id``.

        Depth-first post-order: every predecessor appears before the tasks
        depending on it, each task at most once.

        Args:
            session: Database session
            task_id: Task ID

        Returns:
            Predecessor task IDs, empty when the task has none
        """
        visited: Set[int] = {task_id}
        chain: List[int] = []
        stack = [(task_id, iter(await self._get_predecessor_ids(session, task_id)))]

        while stack:
            node, predecessors = stack[-1]
            predecessor_id = next(predecessors, None)

            if predecessor_id is None:
                stack.pop()
                if node != task_id:
                    chain.append(node)
                continue

            if predecessor_id in visited:
                continue

            visited.add(predecessor_id)
            stack.append(
                (
                    predecessor_id,
                    iter(await self._get_predecessor_ids(session, predecessor_id)),
                )
            )

        return chain

    async def can_task_start(self, session: AsyncSession, task_id: int) -> bool:
        """Whether every direct predecessor is completed or cancelled.

        The dependency kind is not consulted: start_to_start edges block the
        same way finish_to_start edges do. Predecessors that no longer resolve
        to a live task do not block.

        Fails open: any error while reading predecessors is logged and the
        task is reported as startable.

        Args:
            session: Database session
            task_id: Task ID

        Returns:
            False if a predecessor is still pending or in progress
        """
        try:
            predecessor_ids = await self._get_predecessor_ids(session, task_id)
            if not predecessor_ids:
                return True

            query = select(Task.id, Task.status).where(
                Task.id.in_(predecessor_ids),
                Task.deleted_at.is_(None),
            )
            result = await session.execute(query)
            statuses = {row.id: row.status for row in result.all()}
        except Exception as e:
            logger.warning(
                f"Failed to check if task {task_id} can start, allowing start: {e}"
            )
            return True

        for predecessor_id in predecessor_ids:
            status = statuses.get(predecessor_id)
            if status is not None and status not in RESOLVED_STATUSES:
                return False

        return True

    async def get_blocked_tasks(
        self, session: AsyncSession, task_id: int
    ) -> List[Task]:
        """Live tasks that directly depend on ``task_id``."""
        successors = await self.get_successors(session, task_id)
        successor_ids = list(dict.fromkeys(edge.successor_id for edge in successors))
        return await self.task_service.get_many(session, successor_ids)

    async def get_available_predecessor_tasks(
        self,
        session: AsyncSession,
        successor_id: int,
        team_id: Optional[int] = None,
    ) -> List[Task]:
        """Live tasks that could become predecessors of ``successor_id``.

        Excludes the task itself and every task downstream of it, since
        making any of those a predecessor would close a cycle.

        Args:
            session: Database session
            successor_id: Task that would be blocked
            team_id: Restrict candidates to one team

        Returns:
            Candidate tasks ordered by ID
        """
        edges = await self._load_downstream_edges(session, successor_id)
        graph = build_dependency_graph(edges, task_ids=(successor_id,))
        excluded = collect_descendants(graph, successor_id)
        excluded.add(successor_id)

        query = select(Task).where(
            Task.deleted_at.is_(None),
            Task.id.not_in(excluded),
        )
        if team_id is not None:
            query = query.where(Task.team_id == team_id)

        result = await session.execute(query.order_by(Task.id))
        return list(result.scalars().all())

    # ===== Private Methods =====

    @asynccontextmanager
    async def _serialized(self, session: AsyncSession):
        """Hold the dependency write lock for one read-validate-write cycle.

        On PostgreSQL a transaction-scoped advisory lock extends the
        serialization across processes; it is released when the transaction
        ends.
        """
        async with self._write_lock:
            advisory = _dialect_name(session) == "postgresql"
            if advisory:
                await session.execute(
                    text("SELECT pg_advisory_xact_lock(:key)"),
                    params={"key": self.lock_key},
                )
            try:
                yield
            finally:
                if advisory and session.in_transaction():
                    await session.rollback()

    async def _load_downstream_edges(
        self, session: AsyncSession, start_id: int
    ) -> List[TaskDependency]:
        """Load every live edge reachable from ``start_id``.

        Breadth-first, one query per level.

        Args:
            session: Database session
            start_id: Task to expand from

        Returns:
            Live edges of the downstream subgraph
        """
        edges: List[TaskDependency] = []
        seen: Set[int] = {start_id}
        frontier = [start_id]

        while frontier:
            query = (
                select(TaskDependency)
                .where(
                    TaskDependency.predecessor_id.in_(frontier),
                    TaskDependency.deleted_at.is_(None),
                )
                .order_by(TaskDependency.id)
            )
            result = await session.execute(query)
            level = list(result.scalars().all())
            edges.extend(level)

            frontier = []
            for edge in level:
                if edge.successor_id not in seen:
                    seen.add(edge.successor_id)
                    frontier.append(edge.successor_id)

        return edges

    async def _get_predecessor_ids(
        self, session: AsyncSession, task_id: int
    ) -> List[int]:
        """IDs of the live direct predecessors of a task."""
        query = (
            select(TaskDependency.predecessor_id)
            .where(
                TaskDependency.successor_id == task_id,
                TaskDependency.deleted_at.is_(None),
            )
            .order_by(TaskDependency.id)
        )
        result = await session.execute(query)
        return list(dict.fromkeys(result.scalars().all()))

    async def _find_live_edge(
        self,
        session: AsyncSession,
        successor_id: int,
        predecessor_id: int,
    ) -> Optional[TaskDependency]:
        query = select(TaskDependency).where(
            TaskDependency.successor_id == successor_id,
            TaskDependency.predecessor_id == predecessor_id,
            TaskDependency.deleted_at.is_(None),
        )
        result = await session.execute(query)
        return result.scalars().first()


def _dialect_name(session: AsyncSession) -> str:
    bind = session.bind
    return bind.dialect.name if bind is not None else ""


# Instance used by every dependency router
task_dependency_service = TaskDependencyService()
