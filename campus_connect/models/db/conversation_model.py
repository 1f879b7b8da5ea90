from sqlalchemy import Column, DateTime, Integer, func
from sqlalchemy.orm import relationship

from campus_connect.database import Base


class ConversationModel(Base):
    """SQLAlchemy model for conversations table."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())
    # Bumped by the service on every new message
    updated_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    # Relationships
    messages = relationship("MessageModel", back_populates="conversation")
    participants = relationship("ParticipantModel", back_populates="conversation")
