"""
DevConnector Backend - Post Model
==================================

What:  ORM model for the `posts` table.
How:   `likes` and `comments` are JSON lists embedded in the row.

Table Design:
    - name / avatar: author snapshot taken when the post is created; later
      changes to the user record are not propagated
    - user_id: indexed but deliberately NOT a foreign key, because deleting
      an account leaves that user's posts in place
    - likes: [{"user": "<uuid>"}], at most one entry per user, newest first
    - comments: [{"id", "text", "name", "avatar", "user", "date"}], newest first
    - Index on date DESC serves the newest-first feed
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devconnector.database import Base


class Post(Base):
    """A post in the feed, owning its likes and comments."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    text: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(512), nullable=True)

    likes: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    comments: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_posts_date", date.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id}, likes={len(self.likes or [])})>"
