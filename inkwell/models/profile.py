"""SQLAlchemy ORM model for public author profiles."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from inkwell.database import Base
from .base import TimestampMixin


class Profile(TimestampMixin, Base):
    __tablename__ = "profiles"

    # Same value as the auth identity; one profile per user.
    id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    profile_image = Column(String(2048), nullable=True)
    bio = Column(Text, nullable=True)

    user = relationship("User", back_populates="profile")
    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")


__all__ = ["Profile"]
