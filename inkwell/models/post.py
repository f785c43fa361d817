"""SQLAlchemy ORM models for posts and like membership."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from inkwell.database import Base
from .base import TimestampMixin


class Post(TimestampMixin, Base):
    __tablename__ = "posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(300), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(500), nullable=True)
    image = Column(String(2048), nullable=True)
    author_id = Column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE", name="posts_author_id_fkey"),
        nullable=False,
        index=True,
    )
    # Denormalised copy of the like row count for this post.
    likes = Column(Integer, nullable=True, default=0, server_default="0")

    author = relationship("Profile", back_populates="posts")
    like_rows = relationship("Like", back_populates="post", cascade="all, delete-orphan")


class Like(Base):
    __tablename__ = "likes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="like_rows")
    user = relationship("User", back_populates="likes")

    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),)


__all__ = ["Post", "Like"]
