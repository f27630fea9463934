# relay/db.py
import asyncio
import datetime

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from relay.config import Settings
from relay.errors import PersistenceError

Base = declarative_base()


def _make_engine(url: str, *, timeout: float = 10.0, pool_size: int = 10) -> AsyncEngine:
    if url.startswith("postgresql"):
        return create_async_engine(
            url,
            pool_size=pool_size,
            pool_timeout=timeout,
            pool_pre_ping=True,
            connect_args={"timeout": timeout, "command_timeout": timeout},
        )
    return create_async_engine(url)


class ProcessLogStore:
    """Owns the connection pool for the process_logs table."""

    def __init__(self, url: str, *, timeout: float = 10.0, pool_size: int = 10):
        self.url = url
        self.engine = _make_engine(url, timeout=timeout, pool_size=pool_size)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProcessLogStore":
        return cls(settings.database_url, timeout=settings.db_timeout, pool_size=settings.db_pool_size)

    async def init_db(self) -> None:
        # import models lazily so Base metadata has them
        import relay.models  # noqa: F401
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def insert_log(self, time: datetime.datetime, processing_time: str) -> int:
        """
        INSERT INTO process_logs (time, processing_time) VALUES (...) RETURNING process_number

        Returns the process_number assigned by the database.
        Raises PersistenceError on any database failure.
        """
        from relay.models import ProcessLog
        stmt = (
            insert(ProcessLog)
            .values(time=time, processing_time=processing_time)
            .returning(ProcessLog.process_number)
        )
        try:
            async with self.sessionmaker() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    process_number = result.scalar_one()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            raise PersistenceError(f"process_logs insert failed: {e}") from e
        return int(process_number)

    async def dispose(self) -> None:
        await self.engine.dispose()
