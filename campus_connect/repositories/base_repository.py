from typing import Any, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.database import Base

ModelType = TypeVar("ModelType", bound=Base)
PydanticType = TypeVar("PydanticType", bound=BaseModel)


class BaseRepository(Generic[ModelType, PydanticType]):
    """Generic base repository with common read/write operations.

    Writes are flushed, never committed: the calling service owns the
    transaction boundary.
    """

    def __init__(self, db: AsyncSession, model_class: Any):
        self.db = db
        self.model_class = model_class

    async def get_by_id(self, id: Union[int, str]) -> Optional[PydanticType]:
        """Get a single record by ID."""
        query = select(self.model_class).where(self.model_class.id == id)
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def exists(self, id: Union[int, str]) -> bool:
        query = select(self.model_class.id).where(self.model_class.id == id).limit(1)
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def add(self, db_model: ModelType) -> PydanticType:
        """Stage a new row and flush it so generated columns are populated."""
        self.db.add(db_model)
        await self.db.flush()
        await self.db.refresh(db_model)
        return self._to_pydantic(db_model)

    async def add_all(self, db_models: List[ModelType]) -> List[PydanticType]:
        self.db.add_all(db_models)
        await self.db.flush()
        for db_model in db_models:
            await self.db.refresh(db_model)
        return [self._to_pydantic(db_model) for db_model in db_models]

    def _to_pydantic(self, db_model: ModelType) -> PydanticType:
        """Convert SQLAlchemy model to Pydantic model.

        This should be overridden in subclasses for specific conversion logic.
        """
        raise NotImplementedError
