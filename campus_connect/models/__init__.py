# Export all models
from .api import (
    CandidateResult,
    ConversationCreated,
    ConversationDetail,
    ConversationResponse,
    ConversationSummary,
    FriendResponse,
    MessageResponse,
    MessagesPage,
    ParticipantResponse,
    SendMessageRequest,
    SwipeResult,
    UserSummary,
)
from .db import (
    ConversationModel,
    FriendRequestModel,
    MessageModel,
    ParticipantModel,
    ProfileModel,
    SwipeModel,
    UserModel,
)

__all__ = [
    # API models
    "CandidateResult",
    "ConversationCreated",
    "ConversationDetail",
    "ConversationResponse",
    "ConversationSummary",
    "FriendResponse",
    "MessageResponse",
    "MessagesPage",
    "ParticipantResponse",
    "SendMessageRequest",
    "SwipeResult",
    "UserSummary",
    # DB models
    "ConversationModel",
    "FriendRequestModel",
    "MessageModel",
    "ParticipantModel",
    "ProfileModel",
    "SwipeModel",
    "UserModel",
]
