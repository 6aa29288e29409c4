import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from order_management.domain.exceptions import InfrastructureError
from order_management.infrastructure.repositories import (
    SQLAlchemyOrderRepository,
    SQLAlchemyCustomerRepository,
    SQLAlchemyProductRepository,
    SQLAlchemyCounterRepository
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        try:
            async with self._session_factory() as session:
                uow_impl = _UnitOfWorkImpl(session)
                try:
                    yield uow_impl
                except Exception:
                    await session.rollback()
                    raise
                # Если commit не вызван, откатываем
                await session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Ошибка базы данных: {e}", exc_info=True)
            raise InfrastructureError("database error") from e


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.orders = SQLAlchemyOrderRepository(session)
        self.customers = SQLAlchemyCustomerRepository(session)
        self.products = SQLAlchemyProductRepository(session)
        self.counters = SQLAlchemyCounterRepository(session)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
