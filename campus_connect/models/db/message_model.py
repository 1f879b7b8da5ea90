from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from campus_connect.database import Base

MESSAGE_STATUSES = ("sent", "delivered", "read")


class MessageModel(Base):
    """SQLAlchemy model for messages table.

    The serial id is monotonic and doubles as the pagination cursor.
    """

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "status IN ('sent', 'delivered', 'read')", name="ck_messages_status"
        ),
        Index("idx_messages_conversation_id_id", "conversation_id", "id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False)
    sender_id = Column(String(255), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())
    status = Column(String(20), nullable=False, default="sent")

    # Relationships
    conversation = relationship("ConversationModel", back_populates="messages")
    sender = relationship("UserModel")
