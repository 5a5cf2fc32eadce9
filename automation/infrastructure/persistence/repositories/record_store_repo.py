"""SQL record store (IRecordStore) over the entity_record table."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from automation.domain.exceptions import ResourceNotFoundException
from automation.infrastructure.persistence.models.entity_record import EntityRecord
from automation.infrastructure.persistence.repositories.base import BaseRepository


class SqlRecordStore(BaseRepository[EntityRecord]):
    """Tenant-scoped JSON records keyed by entity type and CUID."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, EntityRecord)

    async def _load(
        self, tenant_id: str, entity_type: str, record_id: str
    ) -> EntityRecord:
        async with self._translate_errors("get"):
            result = await self.db.execute(
                select(EntityRecord).where(
                    EntityRecord.id == record_id,
                    EntityRecord.tenant_id == tenant_id,
                    EntityRecord.entity_type == entity_type,
                )
            )
            row = result.scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundException(entity_type, record_id)
        return row

    async def get(
        self, tenant_id: str, entity_type: str, record_id: str
    ) -> dict[str, Any]:
        row = await self._load(tenant_id, entity_type, record_id)
        return {"id": row.id, **row.data}

    async def create(
        self, tenant_id: str, entity_type: str, fields: dict[str, Any]
    ) -> str:
        row = EntityRecord(tenant_id=tenant_id, entity_type=entity_type, data=dict(fields))
        async with self._savepoint("create"):
            self.db.add(row)
            await self.db.flush()
        return row.id

    async def update(
        self,
        tenant_id: str,
        entity_type: str,
        record_id: str,
        partial_fields: dict[str, Any],
    ) -> None:
        """Merge partial_fields into the stored document."""
        row = await self._load(tenant_id, entity_type, record_id)
        async with self._savepoint("update"):
            # Reassign so SQLAlchemy sees the JSON column change.
            row.data = {**row.data, **partial_fields}
