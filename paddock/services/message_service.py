import logging
from datetime import timedelta
from uuid import UUID

from paddock.core.clock import as_utc, utcnow
from paddock.core.config import settings
from paddock.core.sanitize import sanitize_message
from paddock.models import Conversation, Message
from paddock.repositories.conversation_repository import ConversationRepository
from paddock.repositories.message_repository import MessageRepository
from paddock.repositories.subject_repository import SubjectRepository
from paddock.repositories.user_repository import UserRepository
from paddock.schemas.auth import AuthContext
from paddock.schemas.conversation import ParticipantRole
from paddock.schemas.message import (
    MessageDetails,
    MessageSendRequest,
    MessageSendResult,
    MessageType,
    RepliedToMessage,
)

from .access import require_identity, require_participant, require_self
from .base import transaction
from .exceptions import (
    BusinessRuleError,
    ConversationNotFoundError,
    MessageNotFoundError,
    NotAuthorizedError,
)
from .references import require_distinct_participants, require_users, require_vehicle

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        message_repository: MessageRepository,
        conversation_repository: ConversationRepository,
        subject_repository: SubjectRepository,
        user_repository: UserRepository,
    ):
        self.msg_repo = message_repository
        self.conv_repo = conversation_repository
        self.subject_repo = subject_repository
        self.user_repo = user_repository
        self.session = message_repository.session

    async def _get_conversation(self, conversation_id: UUID) -> Conversation:
        conversation = await self.conv_repo.get_conversation_by_id(conversation_id)
        if not conversation:
            raise ConversationNotFoundError(
                f"Conversation with id '{conversation_id}' not found."
            )
        return conversation

    async def _get_message(self, message_id: UUID) -> Message:
        message = await self.msg_repo.get_message_by_id(message_id)
        if not message:
            raise MessageNotFoundError(f"Message with id '{message_id}' not found.")
        return message

    async def _resolve_conversation(
        self, sender_id: UUID, request: MessageSendRequest
    ) -> Conversation:
        if request.conversation_id:
            return await self._get_conversation(request.conversation_id)

        if not (request.vehicle_id and request.renter_id and request.owner_id):
            raise BusinessRuleError("Missing required fields to create conversation.")
        if sender_id not in (request.renter_id, request.owner_id):
            raise NotAuthorizedError("Not authorized to create this conversation.")
        require_distinct_participants(request.renter_id, request.owner_id)

        conversation = await self.conv_repo.find_rental_conversation(
            request.vehicle_id, request.renter_id, request.owner_id
        )
        if conversation:
            return conversation

        await require_vehicle(self.subject_repo, request.vehicle_id)
        await require_users(self.user_repo, request.renter_id, request.owner_id)
        # Created inactive; the message below activates it
        return await self.conv_repo.create_conversation(
            request.renter_id, request.owner_id, vehicle_id=request.vehicle_id
        )

    async def send(
        self, auth: AuthContext | None, request: MessageSendRequest
    ) -> MessageSendResult:
        """
        Sends a message into a conversation, opening the rental conversation for
        the (vehicle, renter, owner) triad when no conversation id is given.

        Updates the conversation's last-message fields, increments the
        recipient's unread counter and activates the conversation. A party who
        had deleted the conversation gets it back, showing only messages from
        this one on.
        """
        sender_id = require_identity(auth)

        async with transaction(self.session, "send message"):
            conversation = await self._resolve_conversation(sender_id, request)
            role = require_participant(
                conversation,
                sender_id,
                "Not authorized to send messages in this conversation.",
            )

            if request.reply_to_id:
                replied_to = await self.msg_repo.get_message_by_id(request.reply_to_id)
                if not replied_to:
                    raise MessageNotFoundError("Reply to message not found.")
                if replied_to.conversation_id != conversation.id:
                    raise BusinessRuleError(
                        "Reply to message must be in the same conversation."
                    )

            now = utcnow()
            content = sanitize_message(request.content)
            attachments = (
                [attachment.model_dump(mode="json") for attachment in request.attachments]
                if request.attachments
                else None
            )
            message = await self.msg_repo.create_message(
                conversation.id,
                sender_id,
                content,
                message_type=request.message_type,
                reply_to_id=request.reply_to_id,
                attachments=attachments,
                created_at=now,
            )

            recipient_role = (
                ParticipantRole.OWNER
                if role == ParticipantRole.RENTER
                else ParticipantRole.RENTER
            )
            updates = {
                "last_message_at": now,
                "last_message_text": content,
                "last_message_sender_id": sender_id,
                f"unread_count_{recipient_role.value}": conversation.unread_count_for(
                    recipient_role
                )
                + 1,
                "is_active": True,
            }
            for party in ParticipantRole:
                if conversation.is_deleted_by(party):
                    updates[f"deleted_by_{party.value}"] = False
                    updates[f"reopened_at_{party.value}"] = now
            await self.conv_repo.update_conversation(conversation, **updates)

        logger.info(f"User {sender_id} sent message {message.id} in {conversation.id}")
        return MessageSendResult(message_id=message.id, conversation_id=conversation.id)

    async def edit_message(
        self, auth: AuthContext | None, message_id: UUID, content: str
    ) -> UUID:
        """Edits a message's content; only the sender may, within the edit window."""
        subject = require_identity(auth)

        async with transaction(self.session, "edit message"):
            message = await self._get_message(message_id)
            if message.sender_id != subject:
                raise NotAuthorizedError("Not authorized to edit this message.")

            now = utcnow()
            window = timedelta(minutes=settings.MESSAGE_EDIT_WINDOW_MINUTES)
            if now - as_utc(message.created_at) > window:
                raise BusinessRuleError(
                    f"Messages can only be edited within "
                    f"{settings.MESSAGE_EDIT_WINDOW_MINUTES} minutes of sending."
                )

            await self.msg_repo.update_message(
                message, content=sanitize_message(content), edited_at=now
            )
        return message_id

    async def delete_message(self, auth: AuthContext | None, message_id: UUID) -> UUID:
        subject = require_identity(auth)

        async with transaction(self.session, "delete message"):
            message = await self._get_message(message_id)
            if message.sender_id != subject:
                raise NotAuthorizedError("Not authorized to delete this message.")
            await self.msg_repo.delete_message(message)
        return message_id

    async def get_by_conversation(
        self,
        auth: AuthContext | None,
        conversation_id: UUID,
        user_id: UUID,
        limit: int | None = None,
    ) -> list[MessageDetails]:
        """
        Returns the newest ``limit`` messages the user can see, oldest first.

        After a conversation is reopened for the user, messages from before the
        reopening (and replies pointing at them) are hidden.
        """
        require_self(auth, user_id)
        limit = limit or settings.MESSAGE_PAGE_SIZE

        async with transaction(self.session, "list messages", commit=False):
            conversation = await self._get_conversation(conversation_id)
            role = require_participant(
                conversation, user_id, "Not authorized to view this conversation."
            )
            if conversation.is_deleted_by(role):
                raise ConversationNotFoundError(
                    f"Conversation with id '{conversation_id}' not found."
                )

            reopened_at = conversation.reopened_at_for(role)
            messages = await self.msg_repo.list_recent_messages(
                conversation_id, limit, visible_since=reopened_at
            )

            results = []
            for message in messages:
                details = MessageDetails.model_validate(message)
                replied_to = message.replied_to
                if replied_to is not None and (
                    reopened_at is None
                    or as_utc(replied_to.created_at) >= as_utc(reopened_at)
                ):
                    details.replied_to_message = RepliedToMessage.model_validate(
                        replied_to
                    )
                results.append(details)
        return results

    async def mark_conversation_as_read(
        self, auth: AuthContext | None, conversation_id: UUID, user_id: UUID
    ) -> UUID:
        require_self(auth, user_id)

        async with transaction(self.session, "mark conversation as read"):
            conversation = await self._get_conversation(conversation_id)
            role = require_participant(
                conversation,
                user_id,
                "Not authorized to mark this conversation as read.",
            )
            await self.conv_repo.reset_unread_count(conversation, role)
            await self.msg_repo.mark_messages_read(conversation_id, user_id, utcnow())
        return conversation_id

    async def mark_message_as_read(
        self, auth: AuthContext | None, message_id: UUID
    ) -> UUID:
        """Marks a single message read for its recipient. A no-op for the sender."""
        subject = require_identity(auth)

        async with transaction(self.session, "mark message as read"):
            message = await self._get_message(message_id)
            if message.sender_id == subject:
                return message_id

            conversation = await self._get_conversation(message.conversation_id)
            role = require_participant(
                conversation, subject, "Not authorized to read this message."
            )
            if not message.is_read:
                now = utcnow()
                await self.msg_repo.update_message(message, is_read=True, read_at=now)
                remaining = max(conversation.unread_count_for(role) - 1, 0)
                await self.conv_repo.update_conversation(
                    conversation, **{f"unread_count_{role.value}": remaining}
                )
        return message_id

    async def get_unread_count(self, auth: AuthContext | None, user_id: UUID) -> int:
        require_self(auth, user_id)

        async with transaction(self.session, "count unread messages", commit=False):
            conversations = await self.conv_repo.list_visible_active_conversations(
                user_id
            )
        return sum(
            conversation.unread_count_for(conversation.role_of(user_id))
            for conversation in conversations
        )

    async def send_host_system_message(
        self,
        auth: AuthContext | None,
        conversation_id: UUID,
        content: str,
        host_id: UUID,
    ) -> UUID:
        require_self(auth, host_id)

        async with transaction(self.session, "send system message"):
            conversation = await self._get_conversation(conversation_id)
            if conversation.owner_id != host_id:
                raise NotAuthorizedError(
                    "Not authorized to send messages in this conversation."
                )

            now = utcnow()
            sanitized = sanitize_message(content)
            message = await self.msg_repo.create_message(
                conversation_id,
                host_id,
                sanitized,
                message_type=MessageType.SYSTEM,
                created_at=now,
            )
            await self.conv_repo.update_conversation(
                conversation,
                last_message_at=now,
                last_message_text=sanitized,
                last_message_sender_id=host_id,
                unread_count_renter=conversation.unread_count_renter + 1,
            )

        logger.info(f"Host {host_id} sent system message {message.id} in {conversation_id}")
        return message.id
