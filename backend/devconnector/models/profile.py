"""
DevConnector Backend - Profile Model
=====================================

What:  ORM model for the `profiles` table, one row per user.
How:   Scalar fields are columns; `skills`, `social`, `experience` and
       `education` are JSON columns holding the embedded sub-documents.

Table Design:
    - user_id UNIQUE: at most one profile per user
    - experience / education: ordered lists, newest entry first, each entry
      a dict with its own string `id`
    - Embedded lists are replaced wholesale by ProfileService, never mutated
      in place (plain JSON columns do not track in-place changes)
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devconnector.database import Base
from devconnector.models.user import User


class Profile(Base):
    """
    A developer profile.

    Lifecycle:
        1. Created by the first POST /api/profile (status and skills required)
        2. Patched by later POSTs; only the fields present in the body change
        3. Experience/education entries are prepended or removed by id
        4. Deleted together with the owning user account
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(512), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(255), nullable=False)
    githubusername: Mapped[str | None] = mapped_column(String(255), nullable=True)

    skills: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    social: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    experience: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    education: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Joined eagerly: every profile response embeds the owner's name and avatar
    user: Mapped[User] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
