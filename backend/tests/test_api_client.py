"""
DevConnector Backend - API Client Tests
========================================

Drives DevConnectorClient against the in-process app, acting as several
users through with_token().
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport

from devconnector.auth import create_access_token
from devconnector.client import ApiClientError, DevConnectorClient


@pytest.fixture
def client_for(make_app):
    """Returns a factory building an API client for a given user."""
    transport = ASGITransport(app=make_app())
    anonymous = DevConnectorClient("http://test", transport=transport)

    def _client(user=None) -> DevConnectorClient:
        return anonymous.with_token(create_access_token(user.id) if user else None)

    return _client


class TestDeveloperJourney:
    @pytest.mark.asyncio
    async def test_profile_post_and_likes(self, client_for, users):
        alice = client_for(users.alice)
        bob = client_for(users.bob)
        carol = client_for(users.carol)

        async with alice:
            profile = await alice.upsert_profile(status="Developer", skills="html,css,js")
            assert profile["skills"] == ["html", "css", "js"]

            experience = {"title": "Engineer", "company": "Acme", "from": "2019-03-01"}
            profile = await alice.add_experience(experience)
            assert len(profile["experience"]) == 1
            stored = profile["experience"][0]
            assert {k: stored[k] for k in experience} == experience

            post = await alice.create_post("hello")
            assert post["name"] == "Alice"
            assert post["likes"] == []
            assert post["comments"] == []

        likes = await bob.like_post(post["id"])
        assert likes == [{"user": str(users.bob.id)}]

        with pytest.raises(ApiClientError) as exc_info:
            await bob.like_post(post["id"])
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Post has already been liked"

        with pytest.raises(ApiClientError) as exc_info:
            await carol.delete_post(post["id"])
        assert exc_info.value.status_code == 401

        assert (await alice.get_post(post["id"]))["text"] == "hello"

    @pytest.mark.asyncio
    async def test_profile_patch_keeps_unsent_fields(self, client_for, users):
        alice = client_for(users.alice)

        await alice.upsert_profile(status="Developer", skills="go", company="Acme", location="Oslo")
        patched = await alice.upsert_profile(company="Globex")

        assert patched["company"] == "Globex"
        assert patched["location"] == "Oslo"
        assert patched["skills"] == ["go"]
        assert (await alice.get_own_profile())["company"] == "Globex"

    @pytest.mark.asyncio
    async def test_comments_and_education(self, client_for, users):
        alice = client_for(users.alice)
        bob = client_for(users.bob)

        post = await alice.create_post("thoughts?")
        comments = await bob.add_comment(post["id"], "agreed")
        assert comments[0]["text"] == "agreed"
        assert await bob.delete_comment(post["id"], comments[0]["id"]) == []

        await bob.upsert_profile(status="Student", skills="c")
        profile = await bob.add_education(
            {"school": "MIT", "degree": "BSc", "fieldofstudy": "CS", "from": "2015-09-01"}
        )
        edu_id = profile["education"][0]["id"]
        assert (await bob.delete_education(edu_id))["education"] == []

        listed = await bob.list_profiles()
        assert [p["user"]["name"] for p in listed] == ["Bob"]
        assert (await bob.get_profile_by_user(str(users.bob.id)))["status"] == "Student"


class TestClientErrors:
    @pytest.mark.asyncio
    async def test_anonymous_call_to_protected_route(self, client_for, users):
        with pytest.raises(ApiClientError) as exc_info:
            await client_for().list_posts()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "No token, authorization denied"

    @pytest.mark.asyncio
    async def test_with_token_does_not_change_original(self, client_for, users):
        anonymous = client_for()
        alice = anonymous.with_token(create_access_token(users.alice.id))

        assert anonymous.token is None
        assert alice.token is not None
        assert await alice.list_posts() == []

    @pytest.mark.asyncio
    async def test_missing_profile(self, client_for, users):
        with pytest.raises(ApiClientError) as exc_info:
            await client_for().get_profile_by_user(str(uuid4()))

        assert exc_info.value.status_code == 400
        assert exc_info.value.body["msg"] == "Profile not found"

    @pytest.mark.asyncio
    async def test_account_delete(self, client_for, users):
        carol = client_for(users.carol)
        await carol.upsert_profile(status="Lead", skills="sql")

        assert await carol.delete_account() == {"msg": "User successfully deleted"}
        with pytest.raises(ApiClientError):
            await carol.get_own_profile()
