from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.models import Task, TaskUpdate
from teamtasks.services.base import BaseCRUDService


class TaskService(BaseCRUDService[Task, TaskUpdate]):
    """Extended task service with custom query methods."""

    async def get_all_with_filters(
        self,
        session: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        team_id: Optional[int] = None,
        status: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> tuple[List[Task], int]:
        """Get live tasks filtered by team and status.

        Args:
            session: Database session
            skip: Number of records to skip
            limit: Number of records to return
            team_id: Filter by team ID
            status: Filter by status
            sort: Field name to sort by (prefix with - for descending)

        Returns:
            Tuple of (items list, total count)
        """
        return await self.get_all(
            session,
            skip=skip,
            limit=limit,
            filters={"team_id": team_id, "status": status},
            order_by=sort,
        )

    async def get_many(
        self, session: AsyncSession, task_ids: List[int]
    ) -> List[Task]:
        """Get live tasks by ID, ordered by ID. Unknown IDs are skipped."""
        if not task_ids:
            return []

        query = (
            select(Task)
            .where(Task.id.in_(task_ids), Task.deleted_at.is_(None))
            .order_by(Task.id)
        )
        result = await session.execute(query)
        return list(result.scalars().all())
