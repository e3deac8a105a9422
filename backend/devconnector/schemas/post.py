"""
DevConnector Backend - Post Request/Response Schemas
=====================================================

What:  API contract for /api/posts.
How:   Response models read ORM rows (`from_attributes`) and the embedded
       JSON entries. The author reference is exposed as `user` on the wire
       while the column is `user_id`.
"""

import uuid
from datetime import datetime
from typing import ClassVar, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from devconnector.schemas.profile import RequiredFieldsMixin


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(RequiredFieldsMixin, BaseModel):
    """Body of POST /api/posts."""

    REQUIRED: ClassVar[Dict[str, str]] = {"text": "Text"}

    text: Optional[str] = None


class CommentCreate(RequiredFieldsMixin, BaseModel):
    """Body of POST /api/posts/comment/{post_id}."""

    REQUIRED: ClassVar[Dict[str, str]] = {"text": "Text"}

    text: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class LikeItem(BaseModel):
    user: uuid.UUID


class CommentItem(BaseModel):
    """A comment with the commenter's name/avatar as they were when it was written."""
    id: str
    text: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    user: uuid.UUID
    date: datetime


class PostResponse(BaseModel):
    """
    A post with its embedded likes and comments.

    `name`/`avatar` are the author snapshot taken at creation time.
    """
    id: uuid.UUID
    text: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    user: uuid.UUID = Field(validation_alias=AliasChoices("user_id", "user"))
    likes: List[LikeItem] = Field(default_factory=list)
    comments: List[CommentItem] = Field(default_factory=list)
    date: datetime

    model_config = ConfigDict(from_attributes=True)
