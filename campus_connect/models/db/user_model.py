from sqlalchemy import Column, DateTime, Integer, String, Text, func

from campus_connect.database import Base


class UserModel(Base):
    """Read-only mapping of the identity service's users table."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    name = Column(String(255))
    email = Column(String(255), nullable=False)
    image = Column(String(255))


class ProfileModel(Base):
    """Read-only mapping of the identity service's profiles table."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), nullable=False, unique=True)
    display_name = Column(String(255), nullable=False)
    bio = Column(Text)
    university = Column(String(255), nullable=False)
    major = Column(String(255), nullable=False)
    graduation_year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())
