from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .settings.config import settings


def _set_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    # SQLite ignores FOREIGN KEY / ON DELETE CASCADE unless enabled per connection.
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _set_sqlite_foreign_keys)


engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, future=True)
enable_sqlite_foreign_keys(engine)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
Base = declarative_base()

async def get_db():
    async with async_session_maker() as session:
        yield session

async def init_db():
    # Only run create_all in dev, never in prod with Alembic
    if settings.RUN_DB_CREATE_ALL:
        from . import models  # noqa: F401  registers tables on Base.metadata
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
