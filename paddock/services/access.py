"""Authorization checks every messaging operation repeats."""

from uuid import UUID

from paddock.models import Conversation
from paddock.schemas.auth import AuthContext
from paddock.schemas.conversation import ParticipantRole

from .exceptions import NotAuthenticatedError, NotAuthorizedError


def require_identity(auth: AuthContext | None) -> UUID:
    if auth is None:
        raise NotAuthenticatedError()
    return auth.subject


def require_self(auth: AuthContext | None, user_id: UUID) -> UUID:
    """The caller may only act on their own user-scoped data."""
    subject = require_identity(auth)
    if subject != user_id:
        raise NotAuthorizedError("Unauthorized: Cannot access other users' data.")
    return subject


def require_participant(
    conversation: Conversation,
    user_id: UUID,
    message: str = "Not authorized to access this conversation.",
) -> ParticipantRole:
    role = conversation.role_of(user_id)
    if role is None:
        raise NotAuthorizedError(message)
    return role
