# SQLAlchemy database models
from .conversation_model import ConversationModel
from .friend_request_model import FriendRequestModel
from .message_model import MessageModel
from .participant_model import ParticipantModel
from .swipe_model import SwipeModel
from .user_model import ProfileModel, UserModel

__all__ = [
    "ConversationModel",
    "FriendRequestModel",
    "MessageModel",
    "ParticipantModel",
    "ProfileModel",
    "SwipeModel",
    "UserModel",
]
