from datetime import datetime
from typing import Generic, TypeVar, Type, Optional, List

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.exceptions import NotFoundException

ModelType = TypeVar("ModelType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class BaseCRUDService(Generic[ModelType, UpdateSchemaType]):
    """Base class for CRUD operations on SQLModel models.

    Models with a ``deleted_at`` column are soft deleted: rows carrying a
    value there are hidden from every read.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model
        self.soft_delete = hasattr(model, "deleted_at")

    def _live(self, query):
        if self.soft_delete:
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def get_by_id(
        self,
        session: AsyncSession,
        id: int,
    ) -> ModelType:
        """Get a single live record by ID.

        Args:
            session: Database session
            id: Record ID

        Returns:
            Model instance

        Raises:
            NotFoundException: If record not found
        """
        query = self._live(select(self.model).where(self.model.id == id))
        result = await session.execute(query)
        item = result.scalar_one_or_none()

        if not item:
            raise NotFoundException(f"{self.model.__name__} with id {id} not found")

        return item

    async def get_all(
        self,
        session: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        filters: Optional[dict] = None,
        order_by: Optional[str] = None,
    ) -> tuple[List[ModelType], int]:
        """Get all live records with pagination, filtering, and sorting.

        Args:
            session: Database session
            skip: Number of records to skip
            limit: Number of records to return
            filters: Dictionary of field names and values to filter by
            order_by: Field name to sort by (prefix with - for descending)

        Returns:
            Tuple of (items list, total count)
        """
        # Base query
        query = self._live(select(self.model))

        # Apply filters
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)

        # Get total count (before pagination)
        count_query = select(func.count()).select_from(query.subquery())
        total_result = await session.execute(count_query)
        total = total_result.scalar_one()

        # Apply sorting
        if order_by:
            desc = order_by.startswith("-")
            field = order_by.lstrip("-")
            if hasattr(self.model, field):
                order_col = getattr(self.model, field)
                query = query.order_by(order_col.desc() if desc else order_col)
        else:
            query = query.order_by(self.model.id)

        # Apply pagination
        query = query.offset(skip).limit(limit)

        result = await session.execute(query)
        items = result.scalars().all()

        return items, total

    async def create(
        self,
        session: AsyncSession,
        obj_in: ModelType,
    ) -> ModelType:
        """Create a new record.

        Args:
            session: Database session
            obj_in: Model instance to create

        Returns:
            Created model instance
        """
        session.add(obj_in)
        await session.commit()
        await session.refresh(obj_in)
        return obj_in

    async def update(
        self,
        session: AsyncSession,
        id: int,
        obj_in: UpdateSchemaType,
    ) -> ModelType:
        """Update an existing record with partial data.

        Args:
            session: Database session
            id: Record ID
            obj_in: Update schema with partial data

        Returns:
            Updated model instance

        Raises:
            NotFoundException: If record not found
        """
        db_obj = await self.get_by_id(session, id)

        # Update fields that are set
        update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = datetime.now()

        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        session: AsyncSession,
        id: int,
    ) -> None:
        """Delete a record by ID (soft delete where supported).

        Args:
            session: Database session
            id: Record ID

        Raises:
            NotFoundException: If record not found
        """
        db_obj = await self.get_by_id(session, id)

        if self.soft_delete:
            db_obj.deleted_at = datetime.now()
            session.add(db_obj)
        else:
            await session.delete(db_obj)
        await session.commit()
