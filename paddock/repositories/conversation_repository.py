from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, or_, and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from paddock.core.clock import utcnow
from paddock.models import Conversation, Message, participant_pair_key
from paddock.schemas.conversation import ConversationType, ParticipantRole

from .base import BaseRepository


def _details_options():
    """Eager-loads every entity a conversation view joins against."""
    return (
        selectinload(Conversation.renter),
        selectinload(Conversation.owner),
        selectinload(Conversation.vehicle),
        selectinload(Conversation.team),
        selectinload(Conversation.driver_profile),
        selectinload(Conversation.reservation),
    )


class ConversationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_conversation_by_id(
        self, conversation_id: UUID
    ) -> Conversation | None:
        """Retrieves a specific conversation by its ID."""
        stmt = select(Conversation).filter(Conversation.id == conversation_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_conversation_details(
        self, conversation_id: UUID
    ) -> Conversation | None:
        """Retrieves a conversation with its participants and subject loaded."""
        stmt = (
            select(Conversation)
            .filter(Conversation.id == conversation_id)
            .options(*_details_options())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_conversations_for_participant(
        self, user_id: UUID, role: ParticipantRole
    ) -> Sequence[Conversation]:
        """Active conversations where the user holds the given slot and has not deleted them."""
        if role == ParticipantRole.RENTER:
            filters = (
                Conversation.renter_id == user_id,
                Conversation.deleted_by_renter.is_(False),
            )
        else:
            filters = (
                Conversation.owner_id == user_id,
                Conversation.deleted_by_owner.is_(False),
            )

        stmt = (
            select(Conversation)
            .filter(Conversation.is_active.is_(True), *filters)
            .options(*_details_options())
            .order_by(Conversation.last_message_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_visible_active_conversations(
        self, user_id: UUID
    ) -> Sequence[Conversation]:
        """Active conversations in either slot that the user has not deleted."""
        stmt = select(Conversation).filter(
            Conversation.is_active.is_(True),
            or_(
                and_(
                    Conversation.renter_id == user_id,
                    Conversation.deleted_by_renter.is_(False),
                ),
                and_(
                    Conversation.owner_id == user_id,
                    Conversation.deleted_by_owner.is_(False),
                ),
            ),
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_rental_conversation(
        self,
        vehicle_id: UUID,
        renter_id: UUID,
        owner_id: UUID,
        *,
        with_details: bool = False,
    ) -> Conversation | None:
        """Finds the conversation for a (vehicle, renter, owner) triad."""
        stmt = select(Conversation).filter(
            Conversation.renter_id == renter_id,
            Conversation.owner_id == owner_id,
            Conversation.vehicle_id == vehicle_id,
        )
        if with_details:
            stmt = stmt.options(*_details_options()).execution_options(
                populate_existing=True
            )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_conversation_between(
        self,
        first_user_id: UUID,
        second_user_id: UUID,
        conversation_type: ConversationType,
    ) -> Conversation | None:
        """Finds a conversation of the given type between two users, whichever slot each holds."""
        stmt = select(Conversation).filter(
            Conversation.participant_pair_key
            == participant_pair_key(first_user_id, second_user_id),
            Conversation.conversation_type == conversation_type,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_conversation(
        self,
        renter_id: UUID,
        owner_id: UUID,
        *,
        conversation_type: ConversationType = ConversationType.RENTAL,
        vehicle_id: UUID | None = None,
        team_id: UUID | None = None,
        driver_profile_id: UUID | None = None,
    ) -> Conversation:
        """Creates an inactive conversation with zeroed unread counters."""
        now = utcnow()
        conversation = Conversation(
            renter_id=renter_id,
            owner_id=owner_id,
            participant_pair_key=participant_pair_key(renter_id, owner_id),
            conversation_type=conversation_type,
            vehicle_id=vehicle_id,
            team_id=team_id,
            driver_profile_id=driver_profile_id,
            last_message_at=now,
            unread_count_renter=0,
            unread_count_owner=0,
            is_active=False,
            deleted_by_renter=False,
            deleted_by_owner=False,
            created_at=now,
            updated_at=now,
        )
        self.session.add(conversation)
        await self.session.flush()
        return conversation

    async def list_owner_conversations(
        self,
        owner_id: UUID,
        *,
        vehicle_id: UUID | None = None,
        include_archived: bool = True,
        created_since: datetime | None = None,
        with_listing_details: bool = False,
    ) -> Sequence[Conversation]:
        """Conversations where the user holds the owner slot and has not deleted them."""
        stmt = select(Conversation).filter(
            Conversation.owner_id == owner_id,
            Conversation.deleted_by_owner.is_(False),
        )
        if vehicle_id is not None:
            stmt = stmt.filter(Conversation.vehicle_id == vehicle_id)
        if not include_archived:
            stmt = stmt.filter(Conversation.is_active.is_(True))
        if created_since is not None:
            stmt = stmt.filter(Conversation.created_at >= created_since)
        if with_listing_details:
            stmt = stmt.options(*_details_options()).execution_options(
                populate_existing=True
            )

        stmt = stmt.order_by(Conversation.last_message_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update_conversation(self, conversation: Conversation, **values) -> None:
        """Applies the given column values and bumps updated_at."""
        for field, value in values.items():
            setattr(conversation, field, value)
        conversation.updated_at = utcnow()
        self.session.add(conversation)
        await self.session.flush()

    async def reset_unread_count(
        self, conversation: Conversation, role: ParticipantRole
    ) -> None:
        field = (
            "unread_count_renter"
            if role == ParticipantRole.RENTER
            else "unread_count_owner"
        )
        await self.update_conversation(conversation, **{field: 0})

    async def mark_deleted_by(
        self, conversation: Conversation, role: ParticipantRole
    ) -> None:
        field = (
            "deleted_by_renter" if role == ParticipantRole.RENTER else "deleted_by_owner"
        )
        await self.update_conversation(conversation, **{field: True})

    async def hard_delete_conversation(self, conversation_id: UUID) -> None:
        """Purges a conversation and its whole message log. Deleting purged rows is a no-op."""
        await self.session.execute(
            delete(Message).where(Message.conversation_id == conversation_id)
        )
        await self.session.execute(
            delete(Conversation).where(Conversation.id == conversation_id)
        )
        await self.session.flush()
