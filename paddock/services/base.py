import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import ConflictError, DatabaseError, ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(
    session: AsyncSession, action: str, *, commit: bool = True
) -> AsyncIterator[AsyncSession]:
    """
    Runs one unit of work for a service operation.

    Commits on success (unless ``commit`` is False, for reads) and rolls back on
    any failure. Service errors raised inside the block propagate unchanged;
    storage failures are translated into ConflictError/DatabaseError and anything
    else into a generic ServiceError.
    """
    try:
        yield session
        if commit:
            await session.commit()
    except ServiceError:
        await session.rollback()
        raise
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Integrity error while trying to {action}: {e}", exc_info=True)
        raise ConflictError(f"Could not {action} due to a data conflict.") from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
        raise DatabaseError(f"Failed to {action} due to a database error.") from e
    except Exception as e:
        await session.rollback()
        logger.error(f"Unexpected error while trying to {action}: {e}", exc_info=True)
        raise ServiceError(f"An unexpected error occurred while trying to {action}.") from e
