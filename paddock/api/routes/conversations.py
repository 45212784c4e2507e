import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from paddock.api.common import BaseRouter
from paddock.auth_config import get_auth_context
from paddock.schemas.auth import AuthContext
from paddock.schemas.conversation import (
    ConversationCreateRequest,
    ConversationDetails,
    ConversationIdResponse,
    DeleteConversationResult,
    LinkReservationRequest,
    MotorsportsConversationCreateRequest,
    ParticipantRole,
)
from paddock.schemas.message import MessageDetails
from paddock.services.conversation_service import ConversationService
from paddock.services.dependencies import (
    get_conversation_service,
    get_message_service,
)
from paddock.services.message_service import MessageService

logger = logging.getLogger(__name__)
conversations_router_instance = APIRouter()
router = BaseRouter(router=conversations_router_instance, default_tags=["conversations"])


@router.get(
    "/users/{user_id}/conversations",
    response_model=list[ConversationDetails],
)
async def list_user_conversations(
    user_id: UUID,
    role: ParticipantRole = Query(...),
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Active conversations where the user holds the given role."""
    return await conv_service.get_by_user(auth, user_id, role)


@router.get(
    "/conversations/lookup",
    response_model=ConversationDetails | None,
)
async def lookup_conversation(
    vehicle_id: UUID,
    renter_id: UUID,
    owner_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.get_by_vehicle_and_participants(
        auth, vehicle_id, renter_id, owner_id
    )


@router.post(
    "/conversations",
    response_model=ConversationIdResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_conversation(
    request_data: ConversationCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    conversation_id = await conv_service.create(
        auth, request_data.vehicle_id, request_data.renter_id, request_data.owner_id
    )
    return ConversationIdResponse(conversation_id=conversation_id)


@router.post(
    "/conversations/motorsports",
    response_model=ConversationIdResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["motorsports"],
)
async def create_motorsports_conversation(
    request_data: MotorsportsConversationCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    conversation_id = await conv_service.create_motorsports_conversation(
        auth,
        request_data.participant_id,
        request_data.conversation_type,
        team_id=request_data.team_id,
        driver_profile_id=request_data.driver_profile_id,
    )
    return ConversationIdResponse(conversation_id=conversation_id)


@router.get(
    "/conversations/{conversation_id}",
    response_model=ConversationDetails,
)
async def get_conversation(
    conversation_id: UUID,
    user_id: UUID | None = None,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    return await conv_service.get_by_id(
        auth, conversation_id, user_id or auth.subject
    )


@router.post(
    "/conversations/{conversation_id}/read",
    response_model=ConversationIdResponse,
)
async def mark_conversation_as_read(
    conversation_id: UUID,
    user_id: UUID | None = None,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    await conv_service.mark_as_read(auth, conversation_id, user_id or auth.subject)
    return ConversationIdResponse(conversation_id=conversation_id)


@router.post(
    "/conversations/{conversation_id}/archive",
    response_model=ConversationIdResponse,
)
async def archive_conversation(
    conversation_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    await conv_service.archive(auth, conversation_id)
    return ConversationIdResponse(conversation_id=conversation_id)


@router.delete(
    "/conversations/{conversation_id}",
    response_model=DeleteConversationResult,
)
async def delete_conversation(
    conversation_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Hides the conversation for the caller; purges it once both parties have."""
    return await conv_service.delete_conversation(auth, conversation_id)


@router.put(
    "/conversations/{conversation_id}/reservation",
    response_model=ConversationIdResponse,
)
async def link_conversation_to_reservation(
    conversation_id: UUID,
    request_data: LinkReservationRequest,
    auth: AuthContext = Depends(get_auth_context),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    await conv_service.link_to_reservation(
        auth, conversation_id, request_data.reservation_id
    )
    return ConversationIdResponse(conversation_id=conversation_id)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=list[MessageDetails],
    tags=["messages"],
)
async def list_conversation_messages(
    conversation_id: UUID,
    user_id: UUID | None = None,
    limit: int | None = Query(None, ge=1, le=200),
    auth: AuthContext = Depends(get_auth_context),
    msg_service: MessageService = Depends(get_message_service),
):
    return await msg_service.get_by_conversation(
        auth, conversation_id, user_id or auth.subject, limit=limit
    )
