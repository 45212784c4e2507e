import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from test_helpers import auth_for

from paddock.models import User, UserBlock
from paddock.schemas.user_block import BlockedUserRead
from paddock.services.exceptions import (
    BlockNotFoundError,
    BusinessRuleError,
    NotAuthenticatedError,
    NotAuthorizedError,
    UserNotFoundError,
)
from paddock.services.user_block_service import UserBlockService

pytestmark = pytest.mark.asyncio


async def _block_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(UserBlock))
    return result.scalar_one()


async def test_block_user_is_idempotent(
    block_service: UserBlockService,
    db_session: AsyncSession,
    renter: User,
    owner: User,
):
    first = await block_service.block_user(auth_for(owner), renter.id)
    second = await block_service.block_user(auth_for(owner), renter.id)

    assert first.id == second.id
    assert first.blocker_id == owner.id
    assert first.blocked_user_id == renter.id
    assert await _block_count(db_session) == 1


async def test_block_user_rejects_invalid_targets(
    block_service: UserBlockService, renter: User
):
    with pytest.raises(BusinessRuleError):
        await block_service.block_user(auth_for(renter), renter.id)
    with pytest.raises(UserNotFoundError):
        await block_service.block_user(auth_for(renter), uuid.uuid4())
    with pytest.raises(NotAuthenticatedError):
        await block_service.block_user(None, renter.id)


async def test_unblock_user(
    block_service: UserBlockService,
    db_session: AsyncSession,
    renter: User,
    owner: User,
):
    with pytest.raises(BlockNotFoundError):
        await block_service.unblock_user(auth_for(owner), renter.id)

    await block_service.block_user(auth_for(owner), renter.id)
    await block_service.unblock_user(auth_for(owner), renter.id)

    assert await _block_count(db_session) == 0


async def test_unblock_only_removes_own_block(
    block_service: UserBlockService,
    db_session: AsyncSession,
    renter: User,
    owner: User,
):
    await block_service.block_user(auth_for(owner), renter.id)

    with pytest.raises(BlockNotFoundError):
        await block_service.unblock_user(auth_for(renter), owner.id)
    assert await _block_count(db_session) == 1


async def test_get_blocked_users_includes_user_summary(
    block_service: UserBlockService,
    renter: User,
    owner: User,
    outsider: User,
):
    await block_service.block_user(auth_for(owner), renter.id)
    await block_service.block_user(auth_for(owner), outsider.id)

    blocks = await block_service.get_blocked_users(auth_for(owner), owner.id)

    assert {block.blocked_user_id for block in blocks} == {renter.id, outsider.id}
    names = {BlockedUserRead.model_validate(block).user.name for block in blocks}
    assert names == {"Riley Renter", "Oscar Outsider"}

    with pytest.raises(NotAuthorizedError):
        await block_service.get_blocked_users(auth_for(renter), owner.id)


async def test_is_blocked_checks_both_directions(
    block_service: UserBlockService,
    renter: User,
    owner: User,
    outsider: User,
):
    assert not await block_service.is_blocked(auth_for(renter), renter.id, owner.id)

    await block_service.block_user(auth_for(owner), renter.id)

    assert await block_service.is_blocked(auth_for(renter), renter.id, owner.id)
    assert await block_service.is_blocked(auth_for(owner), owner.id, renter.id)

    with pytest.raises(NotAuthorizedError):
        await block_service.is_blocked(auth_for(outsider), renter.id, owner.id)
