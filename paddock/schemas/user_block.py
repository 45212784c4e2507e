from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .user import UserSummary


class UserBlockRequest(BaseModel):
    blocked_user_id: UUID


class UserBlockRead(BaseModel):
    id: UUID
    blocker_id: UUID
    blocked_user_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BlockedUserRead(UserBlockRead):
    user: UserSummary | None = None


class BlockStatusResponse(BaseModel):
    user_id: UUID
    other_user_id: UUID
    is_blocked: bool
