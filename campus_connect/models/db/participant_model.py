from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from campus_connect.database import Base


class ParticipantModel(Base):
    """SQLAlchemy model for conversation_participants table."""

    __tablename__ = "conversation_participants"
    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "user_id", name="uq_participant_conversation_user"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id"), nullable=False, index=True
    )
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    last_read = Column(DateTime(timezone=True), nullable=False, default=func.now())

    # Relationships
    conversation = relationship("ConversationModel", back_populates="participants")
    user = relationship("UserModel")
