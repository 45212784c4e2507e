from uuid import UUID

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import relationship
from sqlalchemy.types import Uuid

from paddock.core.clock import utcnow
from paddock.schemas.conversation import (
    ConversationType,
    DriverSubject,
    ParticipantRole,
    RentalSubject,
    TeamSubject,
)

from .base import BaseModel


def participant_pair_key(first_user_id: UUID, second_user_id: UUID) -> str:
    """Order-independent key for a pair of participants."""
    return ":".join(sorted((str(first_user_id), str(second_user_id))))


class Conversation(BaseModel):
    __tablename__ = "conversations"

    # Participant slots. Non-rental threads reuse them without any role meaning.
    renter_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    participant_pair_key = Column(Text, nullable=False)

    conversation_type = Column(
        SQLAlchemyEnum(
            ConversationType,
            name="conversation_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=ConversationType.RENTAL,
    )
    vehicle_id = Column(Uuid(as_uuid=True), ForeignKey("vehicles.id"), nullable=True)
    team_id = Column(Uuid(as_uuid=True), ForeignKey("teams.id"), nullable=True)
    driver_profile_id = Column(
        Uuid(as_uuid=True), ForeignKey("driver_profiles.id"), nullable=True
    )
    reservation_id = Column(
        Uuid(as_uuid=True), ForeignKey("reservations.id"), nullable=True
    )

    # Denormalized from the message log, maintained on every write
    last_message_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_message_text = Column(Text, nullable=True)
    last_message_sender_id = Column(Uuid(as_uuid=True), nullable=True)
    unread_count_renter = Column(Integer, nullable=False, default=0)
    unread_count_owner = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=False)
    deleted_by_renter = Column(Boolean, nullable=False, default=False)
    deleted_by_owner = Column(Boolean, nullable=False, default=False)
    reopened_at_renter = Column(DateTime(timezone=True), nullable=True)
    reopened_at_owner = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    renter = relationship("User", foreign_keys=[renter_id])
    owner = relationship("User", foreign_keys=[owner_id])
    vehicle = relationship("Vehicle", foreign_keys=[vehicle_id])
    team = relationship("Team", foreign_keys=[team_id])
    driver_profile = relationship("DriverProfile", foreign_keys=[driver_profile_id])
    reservation = relationship("Reservation", foreign_keys=[reservation_id])

    __table_args__ = (
        UniqueConstraint(
            "renter_id", "owner_id", "vehicle_id", name="uq_conversation_triad"
        ),
        Index("ix_conversations_renter_active", "renter_id", "is_active"),
        Index("ix_conversations_owner_active", "owner_id", "is_active"),
        Index("ix_conversations_participants", "renter_id", "owner_id"),
        Index("ix_conversations_pair_type", "participant_pair_key", "conversation_type"),
        Index("ix_conversations_vehicle", "vehicle_id"),
        Index("ix_conversations_reservation", "reservation_id"),
        Index("ix_conversations_last_message", "last_message_at"),
    )

    @property
    def subject(self) -> RentalSubject | TeamSubject | DriverSubject | None:
        if self.vehicle_id is not None:
            return RentalSubject(vehicle_id=self.vehicle_id)
        if self.team_id is not None:
            return TeamSubject(team_id=self.team_id)
        if self.driver_profile_id is not None:
            return DriverSubject(driver_profile_id=self.driver_profile_id)
        return None

    def role_of(self, user_id: UUID) -> ParticipantRole | None:
        if self.renter_id == user_id:
            return ParticipantRole.RENTER
        if self.owner_id == user_id:
            return ParticipantRole.OWNER
        return None

    def participant_id(self, role: ParticipantRole) -> UUID:
        return self.renter_id if role == ParticipantRole.RENTER else self.owner_id

    def counterpart_id(self, role: ParticipantRole) -> UUID:
        return self.owner_id if role == ParticipantRole.RENTER else self.renter_id

    def is_deleted_by(self, role: ParticipantRole) -> bool:
        if role == ParticipantRole.RENTER:
            return bool(self.deleted_by_renter)
        return bool(self.deleted_by_owner)

    def reopened_at_for(self, role: ParticipantRole):
        if role == ParticipantRole.RENTER:
            return self.reopened_at_renter
        return self.reopened_at_owner

    def unread_count_for(self, role: ParticipantRole) -> int:
        if role == ParticipantRole.RENTER:
            return self.unread_count_renter or 0
        return self.unread_count_owner or 0
