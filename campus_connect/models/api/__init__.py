# API models for request/response contracts
from .conversations import (
    ConversationCreated,
    ConversationDetail,
    ConversationResponse,
    ConversationSummary,
    CreateConversationRequest,
    ReadReceipt,
    TypingStatusRequest,
)
from .friends import FriendResponse, FriendUser
from .matching import (
    Candidate,
    CandidateResult,
    SwipeRequest,
    SwipeResponse,
    SwipeResult,
)
from .messages import MessageResponse, MessagesPage, SendMessageRequest
from .participants import ParticipantResponse
from .users import ProfileSummary, UserSummary

__all__ = [
    "Candidate",
    "CandidateResult",
    "ConversationCreated",
    "ConversationDetail",
    "ConversationResponse",
    "ConversationSummary",
    "CreateConversationRequest",
    "FriendResponse",
    "FriendUser",
    "MessageResponse",
    "MessagesPage",
    "ParticipantResponse",
    "ProfileSummary",
    "ReadReceipt",
    "SendMessageRequest",
    "SwipeRequest",
    "SwipeResponse",
    "SwipeResult",
    "TypingStatusRequest",
    "UserSummary",
]
