"""Base repository: session holder and error translation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from automation.domain.exceptions import PersistenceException
from automation.infrastructure.persistence.database import Base
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository bound to one AsyncSession and one model.

    Database errors are translated to PersistenceException so callers can
    tell transient failures from "not found".
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("%s %s failed: %s", self.model.__name__, operation, e)
            raise PersistenceException(
                f"{self.model.__name__} {operation} failed", operation=operation
            ) from e

    @asynccontextmanager
    async def _savepoint(self, operation: str) -> AsyncIterator[None]:
        """Write inside a SAVEPOINT so a failed write leaves the session usable."""
        async with self._translate_errors(operation):
            async with self.db.begin_nested():
                yield
