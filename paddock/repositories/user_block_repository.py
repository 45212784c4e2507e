from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from paddock.core.clock import utcnow
from paddock.models import UserBlock

from .base import BaseRepository


class UserBlockRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_block(self, blocker_id: UUID, blocked_user_id: UUID) -> UserBlock | None:
        stmt = select(UserBlock).filter(
            UserBlock.blocker_id == blocker_id,
            UserBlock.blocked_user_id == blocked_user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def is_blocked_either_way(self, first_user_id: UUID, second_user_id: UUID) -> bool:
        """True if either user has blocked the other."""
        if await self.get_block(first_user_id, second_user_id) is not None:
            return True
        return await self.get_block(second_user_id, first_user_id) is not None

    async def create_block(self, blocker_id: UUID, blocked_user_id: UUID) -> UserBlock:
        now = utcnow()
        block = UserBlock(
            blocker_id=blocker_id,
            blocked_user_id=blocked_user_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(block)
        await self.session.flush()
        return block

    async def delete_block(self, block: UserBlock) -> None:
        await self.session.delete(block)
        await self.session.flush()

    async def list_blocks_by_blocker(self, blocker_id: UUID) -> Sequence[UserBlock]:
        """Lists the users a given user has blocked, newest first."""
        stmt = (
            select(UserBlock)
            .filter(UserBlock.blocker_id == blocker_id)
            .options(selectinload(UserBlock.user))
            .order_by(UserBlock.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
