import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from paddock.api.common import BaseRouter
from paddock.auth_config import get_auth_context
from paddock.schemas.auth import AuthContext
from paddock.schemas.conversation import (
    AnalyticsTimeRange,
    BulkActionResult,
    BulkConversationActionRequest,
    ConversationAnalytics,
    ConversationDetails,
    HostConversationIdsRequest,
    HostConversationRead,
    HostMessageStats,
)
from paddock.schemas.message import HostSystemMessageRequest, MessageIdResponse
from paddock.services.conversation_service import ConversationService
from paddock.services.dependencies import (
    get_conversation_service,
    get_message_service,
)
from paddock.services.message_service import MessageService

logger = logging.getLogger(__name__)
hosts_router_instance = APIRouter(prefix="/hosts/{host_id}")
router = BaseRouter(router=hosts_router_instance, default_tags=["hosts"])


@router.get("/conversations", response_model=list[HostConversationRead])
async def list_host_conversations(
    host_id: UUID,
    include_archived: bool = False,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """The host inbox, newest activity first."""
    return await conv_service.get_host_conversations(
        auth, host_id, include_archived=include_archived
    )


@router.get(
    "/vehicles/{vehicle_id}/conversations",
    response_model=list[ConversationDetails],
)
async def list_host_vehicle_conversations(
    host_id: UUID,
    vehicle_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.get_host_conversations_by_vehicle(
        auth, host_id, vehicle_id
    )


@router.get("/conversation-analytics", response_model=ConversationAnalytics)
async def get_conversation_analytics(
    host_id: UUID,
    time_range: AnalyticsTimeRange = AnalyticsTimeRange.MONTH,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.get_host_conversation_analytics(
        auth, host_id, time_range
    )


@router.get("/message-stats", response_model=HostMessageStats)
async def get_message_stats(
    host_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.get_host_message_stats(auth, host_id)


@router.post("/conversations/bulk", response_model=BulkActionResult)
async def bulk_conversation_action(
    host_id: UUID,
    request_data: BulkConversationActionRequest,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.bulk_host_conversation_actions(
        auth, host_id, request_data.conversation_ids, request_data.action
    )


@router.post("/conversations/bulk-read", response_model=list[UUID])
async def bulk_mark_conversations_as_read(
    host_id: UUID,
    request_data: HostConversationIdsRequest,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.bulk_mark_host_conversations_as_read(
        auth, host_id, request_data.conversation_ids
    )


@router.post("/conversations/bulk-archive", response_model=list[UUID])
async def bulk_archive_conversations(
    host_id: UUID,
    request_data: HostConversationIdsRequest,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.bulk_archive_host_conversations(
        auth, host_id, request_data.conversation_ids or []
    )


@router.post(
    "/conversations/{conversation_id}/system-messages",
    response_model=MessageIdResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_system_message(
    host_id: UUID,
    conversation_id: UUID,
    request_data: HostSystemMessageRequest,
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    message_id = await msg_service.send_host_system_message(
        auth, conversation_id, request_data.content, host_id
    )
    return MessageIdResponse(message_id=message_id)
