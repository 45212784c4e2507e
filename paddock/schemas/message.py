import enum
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .user import UserSummary


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    SYSTEM = "system"


class AttachmentType(str, enum.Enum):
    IMAGE = "image"
    PDF = "pdf"


class Attachment(BaseModel):
    type: AttachmentType
    url: str
    file_name: str
    file_size: int


class MessageSendRequest(BaseModel):
    """
    Either ``conversation_id`` or the (vehicle, renter, owner) triad must be given;
    the latter finds or opens the rental conversation for that triad.
    """

    conversation_id: UUID | None = None
    vehicle_id: UUID | None = None
    renter_id: UUID | None = None
    owner_id: UUID | None = None
    content: str
    message_type: MessageType = MessageType.TEXT
    reply_to_id: UUID | None = None
    attachments: list[Attachment] | None = None


class MessageEditRequest(BaseModel):
    content: str


class HostSystemMessageRequest(BaseModel):
    content: str


class MessageSendResult(BaseModel):
    message_id: UUID
    conversation_id: UUID


class MessageIdResponse(BaseModel):
    message_id: UUID


class MessageRead(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    message_type: MessageType
    reply_to_id: UUID | None = None
    attachments: list[Attachment] | None = None
    is_read: bool
    read_at: datetime | None = None
    edited_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RepliedToMessage(BaseModel):
    id: UUID
    content: str
    sender: UserSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class MessageDetails(MessageRead):
    sender: UserSummary | None = None
    replied_to_message: RepliedToMessage | None = None


class UnreadCountResponse(BaseModel):
    user_id: UUID
    unread_count: int = Field(ge=0)
