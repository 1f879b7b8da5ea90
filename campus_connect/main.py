from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect import config
from campus_connect.database import close_db, get_db, init_db
from campus_connect.errors import PERSISTENCE_ERRORS, register_exception_handlers
from campus_connect.logging_config import get_logger, setup_logging
from campus_connect.realtime.channel import close_realtime_channel
from campus_connect.routers.conversations import router as conversations_router
from campus_connect.routers.friends import router as friends_router
from campus_connect.routers.matching import router as matching_router
from campus_connect.routers.messages import router as messages_router
from campus_connect.routers.realtime import router as realtime_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    # Startup
    setup_logging()
    await init_db()
    logger.info("startup", environment=config.ENV, version=config.COMMIT_HASH)
    yield
    # Shutdown
    await close_realtime_channel()
    await close_db()


app = FastAPI(
    title="Campus Connect",
    description="Direct messaging, realtime delivery and swipe matching",
    version=config.COMMIT_HASH or "dev",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Include routers
app.include_router(
    conversations_router, prefix="/api/conversations", tags=["conversations"]
)
app.include_router(messages_router, prefix="/api/messages", tags=["messages"])
app.include_router(matching_router, prefix="/api/matching", tags=["matching"])
app.include_router(friends_router, prefix="/api/friends", tags=["friends"])
app.include_router(realtime_router, prefix="/api/realtime", tags=["realtime"])


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Optional[str]]:
    """Health check endpoint with database connectivity."""
    try:
        # Test database connection
        result = await db.execute(text("SELECT 1"))
        db_status = "connected" if result.scalar() == 1 else "error"
    except (*PERSISTENCE_ERRORS, OSError):
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": config.ENV,
        "version": config.COMMIT_HASH,
    }


# If run directly, start the server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.APP_ADDR, port=config.APP_PORT)
