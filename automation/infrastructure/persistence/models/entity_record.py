"""EntityRecord ORM model: generic record store row (JSON field document)."""

from typing import Any

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from automation.infrastructure.persistence.database import Base
from automation.infrastructure.persistence.models.mixins import MultiTenantModel


class EntityRecord(MultiTenantModel, Base):
    """A record of any entity kind. Table: entity_record."""

    __tablename__ = "entity_record"

    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_entity_record_tenant_entity_type", "tenant_id", "entity_type"),
    )
