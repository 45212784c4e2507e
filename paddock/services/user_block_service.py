import logging
from uuid import UUID

from paddock.models import UserBlock
from paddock.repositories.user_block_repository import UserBlockRepository
from paddock.repositories.user_repository import UserRepository
from paddock.schemas.auth import AuthContext

from .access import require_identity, require_self
from .base import transaction
from .exceptions import (
    BlockNotFoundError,
    BusinessRuleError,
    NotAuthorizedError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class UserBlockService:
    def __init__(
        self,
        user_block_repository: UserBlockRepository,
        user_repository: UserRepository,
    ):
        self.block_repo = user_block_repository
        self.user_repo = user_repository
        self.session = user_block_repository.session

    async def block_user(
        self, auth: AuthContext | None, blocked_user_id: UUID
    ) -> UserBlock:
        """Blocks a user. Blocking someone already blocked returns the existing block."""
        blocker_id = require_identity(auth)
        if blocker_id == blocked_user_id:
            raise BusinessRuleError("Cannot block yourself.")

        async with transaction(self.session, "block user"):
            if not await self.user_repo.get_user_by_id(blocked_user_id):
                raise UserNotFoundError(f"User with id '{blocked_user_id}' not found.")

            existing = await self.block_repo.get_block(blocker_id, blocked_user_id)
            if existing:
                return existing
            block = await self.block_repo.create_block(blocker_id, blocked_user_id)

        logger.info(f"User {blocker_id} blocked {blocked_user_id}")
        return block

    async def unblock_user(self, auth: AuthContext | None, blocked_user_id: UUID) -> None:
        blocker_id = require_identity(auth)

        async with transaction(self.session, "unblock user"):
            block = await self.block_repo.get_block(blocker_id, blocked_user_id)
            if not block:
                raise BlockNotFoundError()
            await self.block_repo.delete_block(block)

        logger.info(f"User {blocker_id} unblocked {blocked_user_id}")

    async def get_blocked_users(
        self, auth: AuthContext | None, user_id: UUID
    ) -> list[UserBlock]:
        require_self(auth, user_id)

        async with transaction(self.session, "list blocked users", commit=False):
            return list(await self.block_repo.list_blocks_by_blocker(user_id))

    async def is_blocked(
        self, auth: AuthContext | None, user_id: UUID, other_user_id: UUID
    ) -> bool:
        """Whether either user has blocked the other. The caller must be one of them."""
        subject = require_identity(auth)
        if subject not in (user_id, other_user_id):
            raise NotAuthorizedError("Unauthorized: Cannot access other users' data.")

        async with transaction(self.session, "check block status", commit=False):
            return await self.block_repo.is_blocked_either_way(user_id, other_user_id)
