from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from order_management.infrastructure.db_schema import metadata


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Создает таблицы, которых еще нет (для локального запуска и тестов; в проде alembic)"""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
