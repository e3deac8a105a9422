"""
DevConnector Backend - Post Route Handlers
===========================================

What:  /api/posts endpoints: the feed, likes and comments.
How:   Every route requires a valid token. Handlers delegate to PostService
       and return its result unchanged.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth import get_current_user_id
from devconnector.database import get_db_session
from devconnector.schemas.common import ErrorResponse, MessageResponse
from devconnector.schemas.post import (
    CommentCreate,
    CommentItem,
    LikeItem,
    PostCreate,
    PostResponse,
)
from devconnector.services.post_service import post_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/api/posts",
    tags=["Posts"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)

_NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}


@router.post(
    "",
    response_model=PostResponse,
    responses={400: {"description": "Text is required", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    payload: PostCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db, user_id, payload)


@router.get(
    "",
    response_model=List[PostResponse],
    summary="List all posts, newest first",
)
async def list_posts(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.list_posts(db)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses=_NOT_FOUND,
    summary="Get a post by id",
)
async def get_post(
    post_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.get_post(db, post_id)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete one of your posts",
)
async def delete_post(
    post_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_post(db, user_id, post_id)
    return MessageResponse(msg="Post removed")


# ── Likes ─────────────────────────────────────────────────────────────────


@router.put(
    "/like/{post_id}",
    response_model=List[LikeItem],
    responses={**_NOT_FOUND, 400: {"description": "Post has already been liked", "model": ErrorResponse}},
    summary="Like a post",
)
async def like_post(
    post_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeItem]:
    return await post_service.like_post(db, user_id, post_id)


@router.put(
    "/unlike/{post_id}",
    response_model=List[LikeItem],
    responses={**_NOT_FOUND, 400: {"description": "Post has not yet been liked", "model": ErrorResponse}},
    summary="Remove your like from a post",
)
async def unlike_post(
    post_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeItem]:
    return await post_service.unlike_post(db, user_id, post_id)


# ── Comments ──────────────────────────────────────────────────────────────


@router.post(
    "/comment/{post_id}",
    response_model=List[CommentItem],
    responses={**_NOT_FOUND, 400: {"description": "Text is required", "model": ErrorResponse}},
    summary="Comment on a post",
)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentItem]:
    return await post_service.add_comment(db, user_id, post_id, payload)


@router.delete(
    "/comment/{post_id}/{comment_id}",
    response_model=List[CommentItem],
    responses={404: {"description": "Post or comment not found", "model": ErrorResponse}},
    summary="Delete one of your comments",
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentItem]:
    return await post_service.delete_comment(db, user_id, post_id, comment_id)
