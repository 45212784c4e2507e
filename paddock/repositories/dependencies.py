from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from paddock.db import get_db_session

from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .reservation_repository import ReservationRepository
from .subject_repository import SubjectRepository
from .user_block_repository import UserBlockRepository
from .user_repository import UserRepository


def get_conversation_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ConversationRepository:
    return ConversationRepository(session)


def get_message_repository(
    session: AsyncSession = Depends(get_db_session),
) -> MessageRepository:
    """Dependency provider for MessageRepository."""
    return MessageRepository(session)


def get_user_block_repository(
    session: AsyncSession = Depends(get_db_session),
) -> UserBlockRepository:
    """Dependency provider for UserBlockRepository."""
    return UserBlockRepository(session)


def get_reservation_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ReservationRepository:
    return ReservationRepository(session)


def get_subject_repository(
    session: AsyncSession = Depends(get_db_session),
) -> SubjectRepository:
    return SubjectRepository(session)


def get_user_repository(
    session: AsyncSession = Depends(get_db_session),
) -> UserRepository:
    """Dependency provider for UserRepository."""
    return UserRepository(session)
