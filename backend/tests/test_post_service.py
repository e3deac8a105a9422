"""
DevConnector Backend - Post Service Tests
==========================================

What we test:
    ✅ Author snapshot on create, newest-first listing
    ✅ Only the author may delete a post or a comment
    ✅ Like once, unlike only when liked
    ✅ Comment delete removes exactly the addressed comment
    ✅ Concurrent read-modify-write on one post: last commit wins
"""

from uuid import uuid4

import pytest
from sqlalchemy import update

from devconnector.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from devconnector.models import Post, User
from devconnector.schemas.post import CommentCreate, PostCreate
from devconnector.services.post_service import PostService


class TestPostCreate:
    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_create_snapshots_author(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hello"))

        assert post.text == "hello"
        assert post.name == "Alice"
        assert post.avatar == "//gravatar/alice"
        assert post.user == users.alice.id
        assert post.likes == []
        assert post.comments == []

    @pytest.mark.asyncio
    async def test_author_rename_does_not_touch_existing_posts(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hello"))

        await db_session.execute(update(User).where(User.id == users.alice.id).values(name="Alicia"))
        fetched = await self.service.get_post(db_session, post.id)

        assert fetched.name == "Alice"

    @pytest.mark.asyncio
    async def test_empty_text_is_rejected(self, db_session, users):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_post(db_session, users.alice.id, PostCreate(text=""))

        assert exc_info.value.errors == [{"msg": "Text is required", "param": "text", "location": "body"}]

    @pytest.mark.asyncio
    async def test_unknown_author_is_not_found(self, db_session, users):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_post(db_session, uuid4(), PostCreate(text="hello"))

        assert exc_info.value.message == "User not found"
        assert exc_info.value.status_code == 404


class TestPostReadAndDelete:
    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, db_session, users):
        first = await self.service.create_post(db_session, users.alice.id, PostCreate(text="first"))
        second = await self.service.create_post(db_session, users.bob.id, PostCreate(text="second"))

        posts = await self.service.list_posts(db_session)

        assert [p.id for p in posts] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_get_missing_and_malformed_ids(self, db_session, users):
        for post_id in (str(uuid4()), "not-a-uuid"):
            with pytest.raises(NotFoundError) as exc_info:
                await self.service.get_post(db_session, post_id)
            assert exc_info.value.message == "Post not found"
            assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_author_can_delete(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="bye"))

        await self.service.delete_post(db_session, users.alice.id, str(post.id))

        with pytest.raises(NotFoundError):
            await self.service.get_post(db_session, post.id)

    @pytest.mark.asyncio
    async def test_non_author_cannot_delete(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="mine"))

        with pytest.raises(UnauthorizedError) as exc_info:
            await self.service.delete_post(db_session, users.bob.id, str(post.id))

        assert exc_info.value.message == "User not authorized"
        assert (await self.service.get_post(db_session, post.id)).text == "mine"


class TestLikes:
    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_like_prepends(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))

        await self.service.like_post(db_session, users.bob.id, post.id)
        likes = await self.service.like_post(db_session, users.carol.id, post.id)

        assert [like.user for like in likes] == [users.carol.id, users.bob.id]

    @pytest.mark.asyncio
    async def test_double_like_is_conflict(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))
        await self.service.like_post(db_session, users.bob.id, post.id)

        with pytest.raises(ConflictError) as exc_info:
            await self.service.like_post(db_session, users.bob.id, post.id)

        assert exc_info.value.message == "Post has already been liked"
        assert exc_info.value.status_code == 400
        assert len((await self.service.get_post(db_session, post.id)).likes) == 1

    @pytest.mark.asyncio
    async def test_unlike_without_like_is_conflict(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))
        await self.service.like_post(db_session, users.carol.id, post.id)

        with pytest.raises(ConflictError) as exc_info:
            await self.service.unlike_post(db_session, users.bob.id, post.id)

        assert exc_info.value.message == "Post has not yet been liked"
        likes = (await self.service.get_post(db_session, post.id)).likes
        assert [like.user for like in likes] == [users.carol.id]

    @pytest.mark.asyncio
    async def test_unlike_removes_only_callers_like(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))
        await self.service.like_post(db_session, users.bob.id, post.id)
        await self.service.like_post(db_session, users.carol.id, post.id)

        likes = await self.service.unlike_post(db_session, users.bob.id, post.id)

        assert [like.user for like in likes] == [users.carol.id]

    @pytest.mark.asyncio
    async def test_like_missing_post(self, db_session, users):
        with pytest.raises(NotFoundError):
            await self.service.like_post(db_session, users.bob.id, str(uuid4()))

    @pytest.mark.asyncio
    async def test_unlike_missing_post(self, db_session, users):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.unlike_post(db_session, users.bob.id, str(uuid4()))

        assert exc_info.value.message == "Post not found"
        assert exc_info.value.status_code == 404


class TestComments:
    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_add_comment_snapshots_commenter(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))

        comments = await self.service.add_comment(db_session, users.bob.id, post.id, CommentCreate(text="nice"))

        assert len(comments) == 1
        assert comments[0].text == "nice"
        assert comments[0].name == "Bob"
        assert comments[0].avatar == "//gravatar/bob"
        assert comments[0].user == users.bob.id
        assert comments[0].id

    @pytest.mark.asyncio
    async def test_add_comment_requires_text(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))

        with pytest.raises(ValidationError):
            await self.service.add_comment(db_session, users.bob.id, post.id, CommentCreate())

    @pytest.mark.asyncio
    async def test_add_comment_to_missing_post(self, db_session, users):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.add_comment(db_session, users.bob.id, str(uuid4()), CommentCreate(text="?"))

        assert exc_info.value.message == "Post not found"

    @pytest.mark.asyncio
    async def test_delete_comment_removes_exactly_that_comment(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))
        await self.service.add_comment(db_session, users.bob.id, post.id, CommentCreate(text="first"))
        comments = await self.service.add_comment(db_session, users.bob.id, post.id, CommentCreate(text="second"))
        older = comments[1]
        assert older.text == "first"

        remaining = await self.service.delete_comment(db_session, users.bob.id, post.id, older.id)

        assert [c.text for c in remaining] == ["second"]

    @pytest.mark.asyncio
    async def test_delete_unknown_comment(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.delete_comment(db_session, users.bob.id, post.id, "nope")

        assert exc_info.value.message == "Comment not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_comment_on_missing_post(self, db_session, users):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.delete_comment(db_session, users.bob.id, str(uuid4()), "any")

        assert exc_info.value.message == "Post not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_only_comment_author_may_delete(self, db_session, users):
        post = await self.service.create_post(db_session, users.alice.id, PostCreate(text="hi"))
        comments = await self.service.add_comment(db_session, users.bob.id, post.id, CommentCreate(text="mine"))

        # Not even the post's author
        with pytest.raises(UnauthorizedError):
            await self.service.delete_comment(db_session, users.alice.id, post.id, comments[0].id)

        assert len((await self.service.get_post(db_session, post.id)).comments) == 1


class TestConcurrentWrites:
    """Two sessions editing the same post without coordination."""

    @pytest.mark.asyncio
    async def test_last_commit_wins(self, session_factory, users):
        service = PostService()
        async with session_factory() as setup:
            post = await service.create_post(setup, users.alice.id, PostCreate(text="race"))
            await setup.commit()

        async with session_factory() as first, session_factory() as second:
            # Both load the post while it has no likes
            await first.get(Post, post.id)
            await second.get(Post, post.id)

            await service.like_post(first, users.bob.id, post.id)
            await first.commit()

            await service.like_post(second, users.carol.id, post.id)
            await second.commit()

        async with session_factory() as check:
            final = await service.get_post(check, post.id)

        # Bob's like was overwritten by the stale copy Carol's request wrote
        assert [like.user for like in final.likes] == [users.carol.id]
