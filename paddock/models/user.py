import uuid

from fastapi_users.db import SQLAlchemyBaseUserTable
from sqlalchemy import Column, Text

from .base import BaseModel


# SQLAlchemyBaseUserTable requires a specific type for the ID. Uuid works.
class User(SQLAlchemyBaseUserTable[uuid.UUID], BaseModel):
    __tablename__ = "users"

    # email, hashed_password, is_active, is_superuser, is_verified are from SQLAlchemyBaseUserTable
    name = Column(Text, nullable=False, default="")
