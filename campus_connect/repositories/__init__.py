# Repository classes for database operations
from .base_repository import BaseRepository
from .conversation_repository import ConversationRepository
from .friend_request_repository import FriendRequestRepository
from .message_repository import MessageRepository
from .participant_repository import ParticipantRepository
from .swipe_repository import SwipeRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ConversationRepository",
    "FriendRequestRepository",
    "MessageRepository",
    "ParticipantRepository",
    "SwipeRepository",
    "UserRepository",
]
