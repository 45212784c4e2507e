import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from test_helpers import add_user, add_vehicle

from paddock.models import User, Vehicle
from paddock.repositories.conversation_repository import ConversationRepository
from paddock.repositories.message_repository import MessageRepository
from paddock.repositories.reservation_repository import ReservationRepository
from paddock.repositories.subject_repository import SubjectRepository
from paddock.repositories.user_block_repository import UserBlockRepository
from paddock.repositories.user_repository import UserRepository
from paddock.services.conversation_service import ConversationService
from paddock.services.message_service import MessageService
from paddock.services.user_block_service import UserBlockService


@pytest.fixture
def conversation_service(service_session: AsyncSession) -> ConversationService:
    return ConversationService(
        conversation_repository=ConversationRepository(service_session),
        message_repository=MessageRepository(service_session),
        user_block_repository=UserBlockRepository(service_session),
        reservation_repository=ReservationRepository(service_session),
        subject_repository=SubjectRepository(service_session),
        user_repository=UserRepository(service_session),
    )


@pytest.fixture
def message_service(service_session: AsyncSession) -> MessageService:
    return MessageService(
        message_repository=MessageRepository(service_session),
        conversation_repository=ConversationRepository(service_session),
        subject_repository=SubjectRepository(service_session),
        user_repository=UserRepository(service_session),
    )


@pytest.fixture
def block_service(service_session: AsyncSession) -> UserBlockService:
    return UserBlockService(
        user_block_repository=UserBlockRepository(service_session),
        user_repository=UserRepository(service_session),
    )


@pytest.fixture
async def renter(db_session: AsyncSession) -> User:
    return await add_user(db_session, name="Riley Renter")


@pytest.fixture
async def owner(db_session: AsyncSession) -> User:
    return await add_user(db_session, name="Olive Owner")


@pytest.fixture
async def outsider(db_session: AsyncSession) -> User:
    return await add_user(db_session, name="Oscar Outsider")


@pytest.fixture
async def vehicle(db_session: AsyncSession, owner: User) -> Vehicle:
    return await add_vehicle(db_session, owner)
