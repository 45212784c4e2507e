import enum
from datetime import date, datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .message import MessageRead
from .user import UserSummary


class ConversationType(str, enum.Enum):
    RENTAL = "rental"
    TEAM = "team"
    DRIVER = "driver"


class ParticipantRole(str, enum.Enum):
    """The two participant slots of a conversation."""

    RENTER = "renter"
    OWNER = "owner"


class BulkConversationAction(str, enum.Enum):
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"
    MARK_READ = "mark_read"
    DELETE = "delete"


class AnalyticsTimeRange(str, enum.Enum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"


# What a conversation is about
class RentalSubject(BaseModel):
    kind: Literal["rental"] = "rental"
    vehicle_id: UUID


class TeamSubject(BaseModel):
    kind: Literal["team"] = "team"
    team_id: UUID


class DriverSubject(BaseModel):
    kind: Literal["driver"] = "driver"
    driver_profile_id: UUID


ConversationSubject = Annotated[
    Union[RentalSubject, TeamSubject, DriverSubject], Field(discriminator="kind")
]


# Request bodies
class ConversationCreateRequest(BaseModel):
    vehicle_id: UUID
    renter_id: UUID
    owner_id: UUID


class MotorsportsConversationCreateRequest(BaseModel):
    participant_id: UUID
    conversation_type: ConversationType
    team_id: UUID | None = None
    driver_profile_id: UUID | None = None


class LinkReservationRequest(BaseModel):
    reservation_id: UUID


class BulkConversationActionRequest(BaseModel):
    conversation_ids: list[UUID]
    action: BulkConversationAction


class HostConversationIdsRequest(BaseModel):
    conversation_ids: list[UUID] | None = None


# Joined summaries of entities owned by other modules
class VehicleSummary(BaseModel):
    id: UUID
    make: str
    model: str
    year: int

    model_config = ConfigDict(from_attributes=True)


class TeamSummary(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class DriverProfileSummary(BaseModel):
    id: UUID
    user_id: UUID
    headline: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ReservationSummary(BaseModel):
    id: UUID
    status: str
    start_date: date
    end_date: date
    total_amount: float

    model_config = ConfigDict(from_attributes=True)


# Responses
class ConversationIdResponse(BaseModel):
    conversation_id: UUID


class ConversationRead(BaseModel):
    id: UUID
    renter_id: UUID
    owner_id: UUID
    conversation_type: ConversationType
    subject: ConversationSubject | None = None
    reservation_id: UUID | None = None
    last_message_at: datetime
    last_message_text: str | None = None
    last_message_sender_id: UUID | None = None
    unread_count_renter: int
    unread_count_owner: int
    is_active: bool
    deleted_by_renter: bool
    deleted_by_owner: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationDetails(ConversationRead):
    vehicle: VehicleSummary | None = None
    renter: UserSummary | None = None
    owner: UserSummary | None = None
    team: TeamSummary | None = None
    driver_profile: DriverProfileSummary | None = None
    reservation: ReservationSummary | None = None


class HostConversationRead(ConversationRead):
    vehicle: VehicleSummary | None = None
    renter: UserSummary | None = None
    latest_message: MessageRead | None = None


class DeleteConversationResult(BaseModel):
    conversation_id: UUID
    hard_deleted: bool


class BulkActionResult(BaseModel):
    action: BulkConversationAction
    processed_count: int
    conversation_ids: list[UUID]


class ConversationAnalytics(BaseModel):
    total_conversations: int
    active_conversations: int
    archived_conversations: int
    average_response_time_minutes: int
    response_count: int
    time_range: AnalyticsTimeRange


class HostMessageStats(BaseModel):
    total_messages: int
    unread_messages: int
    active_conversations: int
    archived_conversations: int
    total_conversations: int
