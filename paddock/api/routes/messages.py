import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from paddock.api.common import BaseRouter
from paddock.auth_config import get_auth_context
from paddock.schemas.auth import AuthContext
from paddock.schemas.message import (
    MessageEditRequest,
    MessageIdResponse,
    MessageSendRequest,
    MessageSendResult,
    UnreadCountResponse,
)
from paddock.services.dependencies import get_message_service
from paddock.services.message_service import MessageService

logger = logging.getLogger(__name__)
messages_router_instance = APIRouter()
router = BaseRouter(router=messages_router_instance, default_tags=["messages"])


@router.post(
    "/messages",
    response_model=MessageSendResult,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    request_data: MessageSendRequest,
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    return await msg_service.send(auth, request_data)


@router.patch("/messages/{message_id}", response_model=MessageIdResponse)
async def edit_message(
    message_id: UUID,
    request_data: MessageEditRequest,
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    await msg_service.edit_message(auth, message_id, request_data.content)
    return MessageIdResponse(message_id=message_id)


@router.delete("/messages/{message_id}", response_model=MessageIdResponse)
async def delete_message(
    message_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    await msg_service.delete_message(auth, message_id)
    return MessageIdResponse(message_id=message_id)


@router.post("/messages/{message_id}/read", response_model=MessageIdResponse)
async def mark_message_as_read(
    message_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    await msg_service.mark_message_as_read(auth, message_id)
    return MessageIdResponse(message_id=message_id)


@router.get("/users/{user_id}/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    user_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    unread_count = await msg_service.get_unread_count(auth, user_id)
    return UnreadCountResponse(user_id=user_id, unread_count=unread_count)
