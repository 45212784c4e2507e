import uuid

from fastapi_users import schemas
from pydantic import BaseModel, ConfigDict


class UserRead(schemas.BaseUser[uuid.UUID]):
    name: str


class UserCreate(schemas.BaseUserCreate):
    name: str


class UserUpdate(schemas.BaseUserUpdate):
    name: str | None = None


class UserSummary(BaseModel):
    """The public face of a participant, joined into conversation and message views."""

    id: uuid.UUID
    name: str

    model_config = ConfigDict(from_attributes=True)
