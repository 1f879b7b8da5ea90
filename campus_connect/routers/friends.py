from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.auth import get_current_user_id
from campus_connect.database import get_db
from campus_connect.models.api.friends import FriendResponse
from campus_connect.services.friends_service import FriendsService

router = APIRouter()


@router.get("", response_model=List[FriendResponse])
async def get_friends(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[FriendResponse]:
    service = FriendsService(db)
    return await service.get_friends(user_id)
