from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from campus_connect.database import Base

SWIPE_DIRECTIONS = ("left", "right")


class SwipeModel(Base):
    """SQLAlchemy model for swipes table (append-only)."""

    __tablename__ = "swipes"
    __table_args__ = (
        UniqueConstraint("swiper_id", "swiped_id", name="uq_swipes_swiper_swiped"),
        CheckConstraint("swiper_id <> swiped_id", name="ck_swipes_no_self_swipe"),
        CheckConstraint("direction IN ('left', 'right')", name="ck_swipes_direction"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    swiper_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    swiped_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    direction = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())
