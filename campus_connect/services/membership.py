from campus_connect.errors import ForbiddenError
from campus_connect.repositories.participant_repository import ParticipantRepository


async def ensure_participant(
    participant_repo: ParticipantRepository, conversation_id: int, user_id: str
) -> None:
    """Raise ForbiddenError unless `user_id` belongs to the conversation."""
    if not await participant_repo.is_participant(conversation_id, user_id):
        raise ForbiddenError(details={"conversation_id": conversation_id})
