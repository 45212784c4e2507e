# Makes 'models' a package and simplifies imports

from .base import BaseModel, metadata
from .conversation import Conversation, participant_pair_key
from .message import Message
from .subjects import DriverProfile, Reservation, Team, Vehicle
from .user import User
from .user_block import UserBlock

__all__ = [
    "BaseModel",
    "metadata",
    "User",
    "Conversation",
    "Message",
    "UserBlock",
    "Vehicle",
    "Team",
    "DriverProfile",
    "Reservation",
    "participant_pair_key",
]
