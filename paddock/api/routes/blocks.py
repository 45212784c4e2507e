import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from paddock.api.common import BaseRouter
from paddock.auth_config import get_auth_context
from paddock.schemas.auth import AuthContext
from paddock.schemas.user_block import (
    BlockedUserRead,
    BlockStatusResponse,
    UserBlockRead,
    UserBlockRequest,
)
from paddock.services.dependencies import get_user_block_service
from paddock.services.user_block_service import UserBlockService

logger = logging.getLogger(__name__)
blocks_router_instance = APIRouter()
router = BaseRouter(router=blocks_router_instance, default_tags=["blocks"])


@router.post(
    "/blocks",
    response_model=UserBlockRead,
    status_code=status.HTTP_201_CREATED,
)
async def block_user(
    request_data: UserBlockRequest,
    auth: AuthContext = Depends(get_auth_context),
    block_service: UserBlockService = Depends(get_user_block_service),
):
    return await block_service.block_user(auth, request_data.blocked_user_id)


@router.get("/blocks/check", response_model=BlockStatusResponse)
async def check_block_status(
    other_user_id: UUID,
    user_id: UUID | None = None,
    auth: AuthContext = Depends(get_auth_context),
    block_service: UserBlockService = Depends(get_user_block_service),
):
    """Whether the two users have blocked each other in either direction."""
    user_id = user_id or auth.subject
    is_blocked = await block_service.is_blocked(auth, user_id, other_user_id)
    return BlockStatusResponse(
        user_id=user_id, other_user_id=other_user_id, is_blocked=is_blocked
    )


@router.delete(
    "/blocks/{blocked_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def unblock_user(
    blocked_user_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    block_service: UserBlockService = Depends(get_user_block_service),
):
    await block_service.unblock_user(auth, blocked_user_id)


@router.get("/users/{user_id}/blocks", response_model=list[BlockedUserRead])
async def list_blocked_users(
    user_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    block_service: UserBlockService = Depends(get_user_block_service),
):
    return await block_service.get_blocked_users(auth, user_id)
