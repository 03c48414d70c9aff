"""Database plumbing for WeekStay.

One async engine per process, pointed at ``settings.async_database_url``.
Request handlers get a session from ``get_db``; scripts such as the seeder
open their own through ``async_session_factory``. Loaded rows are not
expired on commit.
"""

import uuid
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from weekstay.config import settings

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by users, houses, bookings and assignments."""

    pass


class TimestampMixin:
    """Server-stamped ``created_at`` and ``updated_at``.

    A cancelled booking keeps its ``created_at`` and gets a fresh
    ``updated_at``, which is when it was cancelled.
    """

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    """Random ``uuid4`` id, the one that appears in house and booking URLs."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async database session for FastAPI dependency injection.

    The session commits when the request handler returns and rolls back if
    it raises, so a booking insert and its credit debit land together.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
