from typing import AsyncGenerator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from marketplace.core.config import settings
from marketplace.core.exceptions import PersistenceError, ValidationError

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,    # Verify connection health before use
    pool_recycle=180,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def commit_or_raise(session: AsyncSession, what: str) -> None:
    """Commit, rolling back and re-raising store failures as domain errors.

    Raises:
        ValidationError: A constraint rejected the change
        PersistenceError: Any other database failure
    """
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise ValidationError(f"{what} rejected by the store") from e
    except SQLAlchemyError as e:
        await session.rollback()
        raise PersistenceError(f"Failed to save {what.lower()}") from e
