from sqlalchemy import Column, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import Uuid

from .base import BaseModel


class UserBlock(BaseModel):
    __tablename__ = "user_blocks"

    blocker_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    blocked_user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )

    user = relationship("User", foreign_keys=[blocked_user_id])

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_user_id", name="uq_user_block_pair"),
        Index("ix_user_blocks_blocked", "blocked_user_id"),
    )
