from datetime import datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.models.api.matching import SwipeResponse
from campus_connect.models.db.swipe_model import SwipeModel
from campus_connect.repositories.base_repository import BaseRepository


class SwipeRepository(BaseRepository[SwipeModel, SwipeResponse]):
    """Repository for the append-only swipe log."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, SwipeModel)

    async def get_swipe(self, swiper_id: str, swiped_id: str) -> Optional[SwipeResponse]:
        query = select(self.model_class).where(
            self.model_class.swiper_id == swiper_id,
            self.model_class.swiped_id == swiped_id,
        )
        result = await self.db.execute(query)
        db_model = result.scalars().first()
        return self._to_pydantic(db_model) if db_model else None

    async def create_swipe(
        self, swiper_id: str, swiped_id: str, direction: str, created_at: datetime
    ) -> SwipeResponse:
        return await self.add(
            SwipeModel(
                swiper_id=swiper_id,
                swiped_id=swiped_id,
                direction=direction,
                created_at=created_at,
            )
        )

    async def has_swiped_right(self, swiper_id: str, swiped_id: str) -> bool:
        """Whether `swiper_id` has already expressed interest in `swiped_id`."""
        query = (
            select(self.model_class.id)
            .where(
                self.model_class.swiper_id == swiper_id,
                self.model_class.swiped_id == swiped_id,
                self.model_class.direction == "right",
            )
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    def swiped_ids_query(self, swiper_id: str) -> Any:
        """Subquery of every user `swiper_id` has swiped on, either direction."""
        return select(self.model_class.swiped_id).where(
            self.model_class.swiper_id == swiper_id
        )

    def _to_pydantic(self, db_model: Any) -> SwipeResponse:
        return SwipeResponse(
            id=db_model.id,
            swiper_id=db_model.swiper_id,
            swiped_id=db_model.swiped_id,
            direction=db_model.direction,
        )
