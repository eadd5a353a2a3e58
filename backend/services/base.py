"""Base CRUD service with soft-delete aware queries.

Resource services inherit from this. Provides standard
create/read/update/delete with automatic soft-delete filtering,
pagination, and organization scoping (multi-tenant).
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.base import BaseModel, new_id

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseService(Generic[ModelType]):
    """Generic CRUD service for any soft-deletable SQLAlchemy model.

    Usage:
        class AgentService(BaseService[Agent]):
            def __init__(self, db: AsyncSession):
                super().__init__(Agent, db)
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # ─── Read ──────────────────────────────────────────────

    async def get_by_id(
        self,
        id: str,
        include_deleted: bool = False,
    ) -> Optional[ModelType]:
        """Get a single record by ID."""
        query = select(self.model).where(self.model.id == id)
        if not include_deleted:
            query = query.where(self.model.is_deleted == False)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_id_and_org(
        self,
        id: str,
        organization_id: str,
        include_deleted: bool = False,
    ) -> Optional[ModelType]:
        """Get a single record scoped to an organization."""
        query = select(self.model).where(
            self.model.id == id,
            self.model.organization_id == organization_id,
        )
        if not include_deleted:
            query = query.where(self.model.is_deleted == False)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        organization_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 50,
        order_by: str = "created_at",
        order_desc: bool = True,
        include_deleted: bool = False,
        filters: dict[str, Any] = None,
    ) -> tuple[Sequence[ModelType], int]:
        """List records with pagination, filtering, and sorting.

        Returns:
            Tuple of (items, total_count)
        """
        query = select(self.model)
        count_query = select(func.count()).select_from(self.model)

        # Organization scope
        if organization_id and hasattr(self.model, "organization_id"):
            query = query.where(self.model.organization_id == organization_id)
            count_query = count_query.where(self.model.organization_id == organization_id)

        # Soft delete filter
        if not include_deleted:
            query = query.where(self.model.is_deleted == False)
            count_query = count_query.where(self.model.is_deleted == False)

        # Additional filters
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field):
                    col = getattr(self.model, field)
                    if isinstance(value, (list, set, frozenset, tuple)):
                        query = query.where(col.in_(list(value)))
                        count_query = count_query.where(col.in_(list(value)))
                    else:
                        query = query.where(col == value)
                        count_query = count_query.where(col == value)

        # Sorting
        if hasattr(self.model, order_by):
            col = getattr(self.model, order_by)
            query = query.order_by(col.desc() if order_desc else col.asc())

        query = query.offset(offset).limit(limit)

        result = await self.db.execute(query)
        items = result.scalars().all()

        count_result = await self.db.execute(count_query)
        total = count_result.scalar() or 0

        return items, total

    async def count(self, organization_id: str, filters: dict[str, Any] = None) -> int:
        """Count live records of an organization."""
        _, total = await self.list(
            organization_id=organization_id, limit=1, filters=filters
        )
        return total

    # ─── Create ────────────────────────────────────────────

    async def create(self, data: dict[str, Any]) -> ModelType:
        """Create a new record.

        Args:
            data: Dict of field values

        Returns:
            Created model instance
        """
        if "id" not in data:
            data["id"] = new_id()

        instance = self.model(**data)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    # ─── Update ────────────────────────────────────────────

    async def update(
        self,
        id: str,
        data: dict[str, Any],
        organization_id: Optional[str] = None,
    ) -> Optional[ModelType]:
        """Update a record by ID.

        Args:
            id: Record UUID
            data: Dict of fields to update (None values are skipped)
            organization_id: Optional org scope

        Returns:
            Updated model instance or None if not found
        """
        if organization_id and hasattr(self.model, "organization_id"):
            instance = await self.get_by_id_and_org(id, organization_id)
        else:
            instance = await self.get_by_id(id)

        if not instance:
            return None

        update_data = {k: v for k, v in data.items() if v is not None}
        if not update_data:
            return instance

        for key, value in update_data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    # ─── Delete ────────────────────────────────────────────

    async def soft_delete(
        self,
        id: str,
        organization_id: Optional[str] = None,
    ) -> bool:
        """Soft-delete a record (set is_deleted=True).

        Returns:
            True if deleted, False if not found
        """
        if organization_id and hasattr(self.model, "organization_id"):
            instance = await self.get_by_id_and_org(id, organization_id)
        else:
            instance = await self.get_by_id(id)

        if not instance:
            return False

        instance.soft_delete()
        await self.db.flush()
        return True
