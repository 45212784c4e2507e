import logging
import math
from datetime import timedelta
from uuid import UUID

from paddock.core.clock import as_utc, utcnow
from paddock.models import Conversation
from paddock.repositories.conversation_repository import ConversationRepository
from paddock.repositories.message_repository import MessageRepository
from paddock.repositories.reservation_repository import ReservationRepository
from paddock.repositories.subject_repository import SubjectRepository
from paddock.repositories.user_block_repository import UserBlockRepository
from paddock.repositories.user_repository import UserRepository
from paddock.schemas.auth import AuthContext
from paddock.schemas.conversation import (
    AnalyticsTimeRange,
    BulkActionResult,
    BulkConversationAction,
    ConversationAnalytics,
    ConversationType,
    DeleteConversationResult,
    HostConversationRead,
    HostMessageStats,
    ParticipantRole,
)
from paddock.schemas.message import MessageRead

from .access import require_identity, require_participant, require_self
from .base import transaction
from .exceptions import (
    BusinessRuleError,
    ConflictError,
    ConversationNotFoundError,
    NotAuthorizedError,
    ReservationNotFoundError,
)
from .references import (
    require_distinct_participants,
    require_motorsports_subject,
    require_users,
    require_vehicle,
)

logger = logging.getLogger(__name__)

ANALYTICS_WINDOWS = {
    AnalyticsTimeRange.WEEK: timedelta(days=7),
    AnalyticsTimeRange.MONTH: timedelta(days=30),
    AnalyticsTimeRange.QUARTER: timedelta(days=90),
    AnalyticsTimeRange.YEAR: timedelta(days=365),
}


class ConversationService:
    def __init__(
        self,
        conversation_repository: ConversationRepository,
        message_repository: MessageRepository,
        user_block_repository: UserBlockRepository,
        reservation_repository: ReservationRepository,
        subject_repository: SubjectRepository,
        user_repository: UserRepository,
    ):
        self.conv_repo = conversation_repository
        self.msg_repo = message_repository
        self.block_repo = user_block_repository
        self.reservation_repo = reservation_repository
        self.subject_repo = subject_repository
        self.user_repo = user_repository
        # The session is shared via the repositories
        self.session = conversation_repository.session

    async def _get_conversation(self, conversation_id: UUID) -> Conversation:
        conversation = await self.conv_repo.get_conversation_by_id(conversation_id)
        if not conversation:
            raise ConversationNotFoundError(
                f"Conversation with id '{conversation_id}' not found."
            )
        return conversation

    async def _get_visible_conversation(
        self, conversation_id: UUID, user_id: UUID, message: str
    ) -> tuple[Conversation, ParticipantRole]:
        """Loads a conversation the user takes part in and has not deleted."""
        conversation = await self._get_conversation(conversation_id)
        role = require_participant(conversation, user_id, message)
        if conversation.is_deleted_by(role):
            raise ConversationNotFoundError(
                f"Conversation with id '{conversation_id}' not found."
            )
        return conversation, role

    async def get_by_user(
        self, auth: AuthContext | None, user_id: UUID, role: ParticipantRole
    ) -> list[Conversation]:
        """
        Lists the active conversations where the user holds ``role``.

        Conversations the user deleted are never returned, nor are ones where
        either party has blocked the other.
        """
        require_self(auth, user_id)

        async with transaction(self.session, "list conversations", commit=False):
            conversations = await self.conv_repo.list_conversations_for_participant(
                user_id, role
            )
            visible = []
            for conversation in conversations:
                if await self.block_repo.is_blocked_either_way(
                    conversation.renter_id, conversation.owner_id
                ):
                    continue
                visible.append(conversation)
        return visible

    async def get_by_id(
        self, auth: AuthContext | None, conversation_id: UUID, user_id: UUID
    ) -> Conversation:
        require_self(auth, user_id)

        async with transaction(self.session, "fetch conversation", commit=False):
            conversation = await self.conv_repo.get_conversation_details(
                conversation_id
            )
            if not conversation:
                raise ConversationNotFoundError(
                    f"Conversation with id '{conversation_id}' not found."
                )

            role = require_participant(
                conversation, user_id, "Not authorized to view this conversation."
            )
            # A conversation deleted by the caller no longer exists from their side
            if conversation.is_deleted_by(role):
                raise ConversationNotFoundError(
                    f"Conversation with id '{conversation_id}' not found."
                )
        return conversation

    async def get_by_vehicle_and_participants(
        self,
        auth: AuthContext | None,
        vehicle_id: UUID,
        renter_id: UUID,
        owner_id: UUID,
    ) -> Conversation | None:
        subject = require_identity(auth)
        if subject not in (renter_id, owner_id):
            raise NotAuthorizedError("Unauthorized: Cannot access other users' data.")

        async with transaction(self.session, "look up conversation", commit=False):
            return await self.conv_repo.find_rental_conversation(
                vehicle_id, renter_id, owner_id, with_details=True
            )

    async def create(
        self,
        auth: AuthContext | None,
        vehicle_id: UUID,
        renter_id: UUID,
        owner_id: UUID,
    ) -> UUID:
        """
        Returns the id of the rental conversation for the triad, creating an
        inactive one if none exists yet.
        """
        subject = require_identity(auth)
        if subject not in (renter_id, owner_id):
            raise NotAuthorizedError("Not authorized to create this conversation.")
        require_distinct_participants(renter_id, owner_id)

        async with transaction(self.session, "look up conversation", commit=False):
            existing = await self.conv_repo.find_rental_conversation(
                vehicle_id, renter_id, owner_id
            )
            if not existing:
                await require_vehicle(self.subject_repo, vehicle_id)
                await require_users(self.user_repo, renter_id, owner_id)
        if existing:
            return existing.id

        try:
            async with transaction(self.session, "create conversation"):
                conversation = await self.conv_repo.create_conversation(
                    renter_id, owner_id, vehicle_id=vehicle_id
                )
        except ConflictError:
            # Lost the race against a concurrent create for the same triad
            async with transaction(self.session, "look up conversation", commit=False):
                existing = await self.conv_repo.find_rental_conversation(
                    vehicle_id, renter_id, owner_id
                )
            if not existing:
                raise
            logger.info(f"Conversation for vehicle {vehicle_id} created concurrently")
            return existing.id

        logger.info(
            f"Created conversation {conversation.id} for vehicle {vehicle_id} "
            f"between {renter_id} and {owner_id}"
        )
        return conversation.id

    async def create_motorsports_conversation(
        self,
        auth: AuthContext | None,
        participant_id: UUID,
        conversation_type: ConversationType,
        team_id: UUID | None = None,
        driver_profile_id: UUID | None = None,
    ) -> UUID:
        """
        Returns the team or driver conversation between the caller and
        ``participant_id``, creating it if needed.

        The pair is looked up regardless of who started the conversation; the
        initiator of a new one takes the first participant slot.
        """
        subject = require_identity(auth)

        if conversation_type == ConversationType.RENTAL:
            raise BusinessRuleError(
                "Motorsports conversations must be of type 'team' or 'driver'."
            )
        require_distinct_participants(subject, participant_id)
        if conversation_type == ConversationType.TEAM and driver_profile_id:
            raise BusinessRuleError("Team conversations cannot reference a driver profile.")
        if conversation_type == ConversationType.DRIVER and team_id:
            raise BusinessRuleError("Driver conversations cannot reference a team.")

        async with transaction(self.session, "create conversation"):
            await require_users(self.user_repo, participant_id)
            await require_motorsports_subject(
                self.subject_repo, team_id, driver_profile_id
            )

            existing = await self.conv_repo.find_conversation_between(
                subject, participant_id, conversation_type
            )
            if existing:
                return existing.id

            conversation = await self.conv_repo.create_conversation(
                subject,
                participant_id,
                conversation_type=conversation_type,
                team_id=team_id,
                driver_profile_id=driver_profile_id,
            )

        logger.info(
            f"Created {conversation_type.value} conversation {conversation.id} "
            f"between {subject} and {participant_id}"
        )
        return conversation.id

    async def _mark_read_for(
        self, conversation: Conversation, role: ParticipantRole
    ) -> int:
        reader_id = conversation.participant_id(role)
        await self.conv_repo.reset_unread_count(conversation, role)
        return await self.msg_repo.mark_messages_read(
            conversation.id, reader_id, utcnow()
        )

    async def mark_as_read(
        self, auth: AuthContext | None, conversation_id: UUID, user_id: UUID
    ) -> UUID:
        """Zeroes the user's unread counter and marks the other party's messages read."""
        require_self(auth, user_id)

        async with transaction(self.session, "mark conversation as read"):
            conversation = await self._get_conversation(conversation_id)
            role = require_participant(
                conversation,
                user_id,
                "Not authorized to mark this conversation as read.",
            )
            marked = await self._mark_read_for(conversation, role)

        logger.debug(f"Marked {marked} messages read in {conversation_id} for {user_id}")
        return conversation_id

    async def archive(self, auth: AuthContext | None, conversation_id: UUID) -> UUID:
        """Archives the conversation for both parties."""
        subject = require_identity(auth)

        async with transaction(self.session, "archive conversation"):
            conversation, _ = await self._get_visible_conversation(
                conversation_id, subject, "Not authorized to archive this conversation."
            )
            await self.conv_repo.update_conversation(conversation, is_active=False)
        return conversation_id

    async def _soft_delete(
        self, conversation: Conversation, role: ParticipantRole
    ) -> bool:
        """Sets the party's delete flag, purging the conversation once both are set."""
        conversation_id = conversation.id
        await self.conv_repo.mark_deleted_by(conversation, role)

        # Re-read after the write; a concurrent delete by the other party may
        # already have purged the row.
        current = await self.conv_repo.get_conversation_by_id(conversation_id)
        if current is None:
            return True
        await self.session.refresh(current)
        if current.deleted_by_renter and current.deleted_by_owner:
            await self.conv_repo.hard_delete_conversation(conversation_id)
            logger.info(f"Conversation {conversation_id} deleted by both parties, purged")
            return True
        return False

    async def delete_conversation(
        self, auth: AuthContext | None, conversation_id: UUID
    ) -> DeleteConversationResult:
        subject = require_identity(auth)

        async with transaction(self.session, "delete conversation"):
            conversation, role = await self._get_visible_conversation(
                conversation_id, subject, "Not authorized to delete this conversation."
            )
            hard_deleted = await self._soft_delete(conversation, role)

        return DeleteConversationResult(
            conversation_id=conversation_id, hard_deleted=hard_deleted
        )

    async def link_to_reservation(
        self, auth: AuthContext | None, conversation_id: UUID, reservation_id: UUID
    ) -> UUID:
        subject = require_identity(auth)

        async with transaction(self.session, "link reservation"):
            conversation, _ = await self._get_visible_conversation(
                conversation_id, subject, "Not authorized to modify this conversation."
            )

            reservation = await self.reservation_repo.get_reservation_by_id(
                reservation_id
            )
            if not reservation:
                raise ReservationNotFoundError(
                    f"Reservation with id '{reservation_id}' not found."
                )
            if (
                reservation.renter_id != conversation.renter_id
                or reservation.owner_id != conversation.owner_id
            ):
                raise BusinessRuleError(
                    "Reservation participants do not match conversation participants."
                )

            await self.conv_repo.update_conversation(
                conversation, reservation_id=reservation_id
            )
        return conversation_id

    async def bulk_host_conversation_actions(
        self,
        auth: AuthContext | None,
        host_id: UUID,
        conversation_ids: list[UUID],
        action: BulkConversationAction,
    ) -> BulkActionResult:
        """
        Applies ``action`` to each conversation in turn.

        Missing conversations are skipped. Each conversation is committed on its
        own, so when one the host is not part of aborts the batch, the ones
        before it stay processed.
        """
        require_self(auth, host_id)

        processed: list[UUID] = []
        for conversation_id in conversation_ids:
            async with transaction(self.session, f"{action.value} conversation"):
                conversation = await self.conv_repo.get_conversation_by_id(
                    conversation_id
                )
                if not conversation:
                    continue

                role = require_participant(
                    conversation,
                    host_id,
                    "Not authorized to perform this action on this conversation.",
                )

                if action == BulkConversationAction.ARCHIVE:
                    await self.conv_repo.update_conversation(
                        conversation, is_active=False
                    )
                elif action == BulkConversationAction.UNARCHIVE:
                    await self.conv_repo.update_conversation(
                        conversation, is_active=True
                    )
                elif action == BulkConversationAction.MARK_READ:
                    await self._mark_read_for(conversation, role)
                elif action == BulkConversationAction.DELETE:
                    await self._soft_delete(conversation, role)

            processed.append(conversation_id)

        logger.info(
            f"Host {host_id} applied '{action.value}' to {len(processed)} conversations"
        )
        return BulkActionResult(
            action=action,
            processed_count=len(processed),
            conversation_ids=processed,
        )

    async def get_host_conversations(
        self,
        auth: AuthContext | None,
        host_id: UUID,
        include_archived: bool = False,
    ) -> list[HostConversationRead]:
        """Host inbox: owned conversations with vehicle, renter and latest message."""
        require_self(auth, host_id)

        async with transaction(self.session, "list host conversations", commit=False):
            conversations = await self.conv_repo.list_owner_conversations(
                host_id,
                include_archived=include_archived,
                with_listing_details=True,
            )
            inbox = []
            for conversation in conversations:
                latest = await self.msg_repo.get_latest_message(conversation.id)
                entry = HostConversationRead.model_validate(conversation)
                entry.latest_message = (
                    MessageRead.model_validate(latest) if latest else None
                )
                inbox.append(entry)
        return inbox

    async def get_host_conversations_by_vehicle(
        self, auth: AuthContext | None, host_id: UUID, vehicle_id: UUID
    ) -> list[Conversation]:
        require_self(auth, host_id)

        async with transaction(self.session, "list vehicle conversations", commit=False):
            return list(
                await self.conv_repo.list_owner_conversations(
                    host_id, vehicle_id=vehicle_id, with_listing_details=True
                )
            )

    async def get_host_conversation_analytics(
        self,
        auth: AuthContext | None,
        host_id: UUID,
        time_range: AnalyticsTimeRange = AnalyticsTimeRange.MONTH,
    ) -> ConversationAnalytics:
        """
        Conversation counts and host response times over conversations created
        within ``time_range``.

        A response is a host message directly following a message from the
        other party; the average is reported in whole minutes.
        """
        require_self(auth, host_id)
        threshold = utcnow() - ANALYTICS_WINDOWS[time_range]

        async with transaction(self.session, "compute analytics", commit=False):
            conversations = await self.conv_repo.list_owner_conversations(
                host_id, created_since=threshold
            )

            total_response_seconds = 0.0
            response_count = 0
            for conversation in conversations:
                messages = await self.msg_repo.list_conversation_messages(
                    conversation.id
                )
                for current, following in zip(messages, messages[1:]):
                    if current.sender_id != host_id and following.sender_id == host_id:
                        elapsed = as_utc(following.created_at) - as_utc(
                            current.created_at
                        )
                        total_response_seconds += elapsed.total_seconds()
                        response_count += 1

        active = sum(1 for conversation in conversations if conversation.is_active)
        average_minutes = (
            math.floor(total_response_seconds / response_count / 60 + 0.5)
            if response_count
            else 0
        )
        return ConversationAnalytics(
            total_conversations=len(conversations),
            active_conversations=active,
            archived_conversations=len(conversations) - active,
            average_response_time_minutes=average_minutes,
            response_count=response_count,
            time_range=time_range,
        )

    async def get_host_message_stats(
        self, auth: AuthContext | None, host_id: UUID
    ) -> HostMessageStats:
        require_self(auth, host_id)

        async with transaction(self.session, "compute message stats", commit=False):
            conversations = await self.conv_repo.list_owner_conversations(host_id)
            conversation_ids = [conversation.id for conversation in conversations]
            total_messages = await self.msg_repo.count_messages(conversation_ids)
            unread_messages = await self.msg_repo.count_unread_messages(
                conversation_ids, host_id
            )

        active = sum(1 for conversation in conversations if conversation.is_active)
        return HostMessageStats(
            total_messages=total_messages,
            unread_messages=unread_messages,
            active_conversations=active,
            archived_conversations=len(conversations) - active,
            total_conversations=len(conversations),
        )

    async def bulk_mark_host_conversations_as_read(
        self,
        auth: AuthContext | None,
        host_id: UUID,
        conversation_ids: list[UUID] | None = None,
    ) -> list[UUID]:
        """
        Marks the given conversations (or every conversation in the host inbox)
        as read for the host.
        """
        require_self(auth, host_id)

        if conversation_ids is None:
            async with transaction(self.session, "list host conversations", commit=False):
                conversations = await self.conv_repo.list_owner_conversations(host_id)
            conversation_ids = [conversation.id for conversation in conversations]

        processed: list[UUID] = []
        for conversation_id in conversation_ids:
            async with transaction(self.session, "mark conversation as read"):
                conversation = await self.conv_repo.get_conversation_by_id(
                    conversation_id
                )
                if not conversation:
                    continue
                role = require_participant(
                    conversation,
                    host_id,
                    "Not authorized to mark this conversation as read.",
                )
                await self._mark_read_for(conversation, role)
            processed.append(conversation_id)
        return processed

    async def bulk_archive_host_conversations(
        self,
        auth: AuthContext | None,
        host_id: UUID,
        conversation_ids: list[UUID],
    ) -> list[UUID]:
        require_self(auth, host_id)

        archived: list[UUID] = []
        for conversation_id in conversation_ids:
            async with transaction(self.session, "archive conversation"):
                conversation = await self.conv_repo.get_conversation_by_id(
                    conversation_id
                )
                if not conversation:
                    continue
                if conversation.owner_id != host_id:
                    raise NotAuthorizedError(
                        "Not authorized to archive this conversation."
                    )
                await self.conv_repo.update_conversation(conversation, is_active=False)
            archived.append(conversation_id)
        return archived
