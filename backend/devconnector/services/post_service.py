"""
DevConnector Backend - Post Service
====================================

What:  Business logic for the feed: posts plus their embedded likes and
       comments.
Who:   Called by the /api/posts route handlers.

Rules:
    - name/avatar are copied from the author's user record when a post or
      comment is written and never refreshed afterwards.
    - Only the author may delete a post; only the comment's author may
      delete a comment. A non-author gets UnauthorizedError (401).
    - A user likes a post at most once. Liking twice or unliking a post that
      was never liked is a ConflictError (400).
    - Likes and comments are prepended, so the newest entry is first.
    - Every change reassigns the whole list and re-persists the post row.
      Concurrent like/comment calls on one post race and the last commit wins.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.exceptions import (
    ConflictError,
    DatabaseError,
    DevConnectorError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from devconnector.models.post import Post
from devconnector.models.user import User
from devconnector.schemas.post import (
    CommentCreate,
    CommentItem,
    LikeItem,
    PostCreate,
    PostResponse,
)

logger = logging.getLogger(__name__)


def _parse_id(value: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class PostService:
    """
    Feed manager.

    Responsibilities:
        - create_post / list_posts / get_post / delete_post
        - like_post / unlike_post
        - add_comment / delete_comment
    """

    async def _load_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def _load_post(self, db: AsyncSession, post_id: Union[str, uuid.UUID]) -> Post:
        """Fetches a post; unknown and malformed ids both raise NotFoundError (404)."""
        parsed = _parse_id(post_id)
        post = await db.get(Post, parsed) if parsed is not None else None
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create_post(
        self, db: AsyncSession, user_id: uuid.UUID, payload: PostCreate
    ) -> PostResponse:
        """
        Publishes a post authored by `user_id`.

        Raises:
            ValidationError: text missing or empty
            NotFoundError (404): the token's user no longer exists
        """
        missing = payload.missing_required()
        if missing:
            raise ValidationError.missing_fields(missing)

        try:
            user = await self._load_user(db, user_id)
            post = Post(
                user_id=user.id,
                text=payload.text,
                name=user.name,
                avatar=user.avatar,
                likes=[],
                comments=[],
            )
            db.add(post)
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("create_post", e, user_id=str(user_id))

        logger.info("Post %s created by user %s", post.id, user_id)
        return PostResponse.model_validate(post)

    async def list_posts(self, db: AsyncSession) -> List[PostResponse]:
        """All posts, newest first."""
        try:
            result = await db.execute(select(Post).order_by(desc(Post.date)))
            posts = result.scalars().all()
        except Exception as e:
            raise self._storage_error("list_posts", e)
        return [PostResponse.model_validate(p) for p in posts]

    async def get_post(self, db: AsyncSession, post_id: Union[str, uuid.UUID]) -> PostResponse:
        try:
            post = await self._load_post(db, post_id)
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("get_post", e, post_id=str(post_id))
        return PostResponse.model_validate(post)

    async def delete_post(
        self, db: AsyncSession, user_id: uuid.UUID, post_id: Union[str, uuid.UUID]
    ) -> None:
        """
        Deletes a post owned by `user_id`.

        Raises:
            NotFoundError (404): no such post
            UnauthorizedError (401): the caller is not the author
        """
        try:
            post = await self._load_post(db, post_id)
            if post.user_id != user_id:
                logger.warning("User %s attempted to delete post %s owned by %s", user_id, post.id, post.user_id)
                raise UnauthorizedError()
            await db.delete(post)
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("delete_post", e, post_id=str(post_id))

        logger.info("Post %s removed by user %s", post_id, user_id)

    # ── Likes ─────────────────────────────────────────────────────────────

    async def like_post(
        self, db: AsyncSession, user_id: uuid.UUID, post_id: Union[str, uuid.UUID]
    ) -> List[LikeItem]:
        """Adds the caller's like to the front of the list and returns the full list."""
        try:
            post = await self._load_post(db, post_id)
            likes = list(post.likes or [])
            if any(like.get("user") == str(user_id) for like in likes):
                raise ConflictError("Post has already been liked")
            post.likes = [{"user": str(user_id)}] + likes
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("like_post", e, post_id=str(post_id))

        return [LikeItem.model_validate(like) for like in post.likes]

    async def unlike_post(
        self, db: AsyncSession, user_id: uuid.UUID, post_id: Union[str, uuid.UUID]
    ) -> List[LikeItem]:
        """Removes the caller's like and returns the remaining list."""
        try:
            post = await self._load_post(db, post_id)
            likes = list(post.likes or [])
            index = next(
                (i for i, like in enumerate(likes) if like.get("user") == str(user_id)),
                None,
            )
            if index is None:
                raise ConflictError("Post has not yet been liked")
            del likes[index]
            post.likes = likes
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("unlike_post", e, post_id=str(post_id))

        return [LikeItem.model_validate(like) for like in post.likes]

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        post_id: Union[str, uuid.UUID],
        payload: CommentCreate,
    ) -> List[CommentItem]:
        """Prepends a comment carrying the commenter's current name and avatar; returns all comments."""
        missing = payload.missing_required()
        if missing:
            raise ValidationError.missing_fields(missing)

        try:
            post = await self._load_post(db, post_id)
            user = await self._load_user(db, user_id)
            comment = {
                "id": str(uuid.uuid4()),
                "text": payload.text,
                "name": user.name,
                "avatar": user.avatar,
                "user": str(user.id),
                "date": datetime.now(timezone.utc).isoformat(),
            }
            post.comments = [comment] + list(post.comments or [])
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("add_comment", e, post_id=str(post_id))

        logger.info("Comment %s added to post %s by user %s", comment["id"], post.id, user_id)
        return [CommentItem.model_validate(c) for c in post.comments]

    async def delete_comment(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        post_id: Union[str, uuid.UUID],
        comment_id: str,
    ) -> List[CommentItem]:
        """
        Removes exactly the comment with `comment_id` and returns the remaining
        comments.

        Raises:
            NotFoundError (404): no such post, or no such comment on it
            UnauthorizedError (401): the caller did not write the comment
        """
        try:
            post = await self._load_post(db, post_id)
            comments = list(post.comments or [])
            comment = next((c for c in comments if c.get("id") == comment_id), None)
            if comment is None:
                raise NotFoundError(
                    resource="comment",
                    resource_id=comment_id,
                    message="Comment not found",
                )
            if comment.get("user") != str(user_id):
                raise UnauthorizedError()
            post.comments = [c for c in comments if c.get("id") != comment_id]
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("delete_comment", e, post_id=str(post_id))

        logger.info("Comment %s removed from post %s", comment_id, post.id)
        return [CommentItem.model_validate(c) for c in post.comments]

    @staticmethod
    def _storage_error(operation: str, exc: Exception, **context: Any) -> DatabaseError:
        logger.error("Database error in %s: %s", operation, str(exc), exc_info=True)
        return DatabaseError(context={"operation": operation, "error_type": type(exc).__name__, **context})


post_service = PostService()
