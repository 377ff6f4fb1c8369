import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.infrastructure.repositories import (
    SQLAlchemyCatalogRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyUserRepository
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Одна транзакция на вызов use case.

    Фабрика сессий может быть sessionmaker или функцией, возвращающей
    сессию текущего запроса FastAPI.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator["_Transaction"]:
        async with self._session_factory() as session:
            transaction = _Transaction(session)
            try:
                yield transaction
            except Exception as e:
                logger.warning(f"Транзакция откатывается: {e!r}")
                await session.rollback()
                raise
            if not transaction.committed:
                await session.rollback()


class _Transaction:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.committed = False
        self.orders = SQLAlchemyOrderRepository(session)
        self.catalog = SQLAlchemyCatalogRepository(session)
        self.users = SQLAlchemyUserRepository(session)

    async def commit(self):
        await self._session.commit()
        self.committed = True

    async def rollback(self):
        await self._session.rollback()
        self.committed = False
