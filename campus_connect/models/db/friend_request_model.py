from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
)

from campus_connect.database import Base


class FriendRequestModel(Base):
    """SQLAlchemy model for friend_requests table.

    A match is stored as two accepted rows, one per direction.
    """

    __tablename__ = "friend_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_friend_requests_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(
        String(255), ForeignKey("users.id"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())
