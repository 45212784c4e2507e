from fastapi import Depends

from paddock.repositories.conversation_repository import ConversationRepository
from paddock.repositories.dependencies import (
    get_conversation_repository,
    get_message_repository,
    get_reservation_repository,
    get_subject_repository,
    get_user_block_repository,
    get_user_repository,
)
from paddock.repositories.message_repository import MessageRepository
from paddock.repositories.reservation_repository import ReservationRepository
from paddock.repositories.subject_repository import SubjectRepository
from paddock.repositories.user_block_repository import UserBlockRepository
from paddock.repositories.user_repository import UserRepository

from .conversation_service import ConversationService
from .message_service import MessageService
from .user_block_service import UserBlockService


def get_conversation_service(
    conv_repo: ConversationRepository = Depends(get_conversation_repository),
    msg_repo: MessageRepository = Depends(get_message_repository),
    block_repo: UserBlockRepository = Depends(get_user_block_repository),
    reservation_repo: ReservationRepository = Depends(get_reservation_repository),
    subject_repo: SubjectRepository = Depends(get_subject_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> ConversationService:
    """Provides an instance of the ConversationService with its dependencies."""
    return ConversationService(
        conversation_repository=conv_repo,
        message_repository=msg_repo,
        user_block_repository=block_repo,
        reservation_repository=reservation_repo,
        subject_repository=subject_repo,
        user_repository=user_repo,
    )


def get_message_service(
    msg_repo: MessageRepository = Depends(get_message_repository),
    conv_repo: ConversationRepository = Depends(get_conversation_repository),
    subject_repo: SubjectRepository = Depends(get_subject_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> MessageService:
    """Provides an instance of the MessageService."""
    return MessageService(
        message_repository=msg_repo,
        conversation_repository=conv_repo,
        subject_repository=subject_repo,
        user_repository=user_repo,
    )


def get_user_block_service(
    block_repo: UserBlockRepository = Depends(get_user_block_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> UserBlockService:
    """Provides an instance of the UserBlockService."""
    return UserBlockService(
        user_block_repository=block_repo,
        user_repository=user_repo,
    )
