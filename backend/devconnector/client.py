"""
DevConnector Backend - Async API Client
========================================

What:  Python client for the DevConnector HTTP API.
How:   httpx.AsyncClient with the caller's token attached to every request.
       The token is passed in explicitly; `with_token()` derives a client for
       another user while sharing nothing mutable with the original.

Usage:
    async with DevConnectorClient("http://localhost:5000", token=token) as api:
        profile = await api.get_own_profile()
        await api.like_post(post_id)

Non-2xx answers raise ApiClientError with the status code and decoded body.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Raised for any non-2xx response."""

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body
        message = body.get("msg") if isinstance(body, dict) else None
        super().__init__(f"HTTP {status_code}: {message or body}")

    @property
    def message(self) -> Optional[str]:
        if isinstance(self.body, dict):
            return self.body.get("msg") or self.body.get("message")
        return None


class DevConnectorClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self.token = token
        self._transport = transport
        self._timeout = timeout
        self._http: Optional[httpx.AsyncClient] = None

    def with_token(self, token: Optional[str]) -> "DevConnectorClient":
        """Returns a new client for the same server acting as another user."""
        return DevConnectorClient(
            self.base_url,
            token=token,
            transport=self._transport,
            timeout=self._timeout,
        )

    async def __aenter__(self) -> "DevConnectorClient":
        self._http = self._build_http()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _build_http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self._timeout,
        )

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        http = self._http
        owned = http is None
        if owned:
            http = self._build_http()
        try:
            response = await http.request(method, path, json=json, headers=self._headers())
        finally:
            if owned:
                await http.aclose()

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_success:
            return body

        logger.debug("%s %s failed with %d", method, path, response.status_code)
        raise ApiClientError(response.status_code, body)

    # ── Profile ───────────────────────────────────────────────────────────

    async def get_own_profile(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/profile/me")

    async def upsert_profile(self, **fields: Any) -> Dict[str, Any]:
        """Only the keyword arguments given are sent; the rest stay as stored."""
        return await self._request("POST", "/api/profile", json=fields)

    async def list_profiles(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/profile")

    async def get_profile_by_user(self, user_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/api/profile/user/{user_id}")

    async def delete_account(self) -> Dict[str, Any]:
        return await self._request("DELETE", "/api/profile")

    async def add_experience(self, experience: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", "/api/profile/experience", json=experience)

    async def delete_experience(self, exp_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/profile/experience/{exp_id}")

    async def add_education(self, education: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", "/api/profile/education", json=education)

    async def delete_education(self, edu_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/profile/education/{edu_id}")

    async def get_github_repos(self, username: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/profile/github/{username}")

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create_post(self, text: str) -> Dict[str, Any]:
        return await self._request("POST", "/api/posts", json={"text": text})

    async def list_posts(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/posts")

    async def get_post(self, post_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/api/posts/{post_id}")

    async def delete_post(self, post_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/posts/{post_id}")

    async def like_post(self, post_id: str) -> List[Dict[str, Any]]:
        return await self._request("PUT", f"/api/posts/like/{post_id}")

    async def unlike_post(self, post_id: str) -> List[Dict[str, Any]]:
        return await self._request("PUT", f"/api/posts/unlike/{post_id}")

    async def add_comment(self, post_id: str, text: str) -> List[Dict[str, Any]]:
        return await self._request("POST", f"/api/posts/comment/{post_id}", json={"text": text})

    async def delete_comment(self, post_id: str, comment_id: str) -> List[Dict[str, Any]]:
        return await self._request("DELETE", f"/api/posts/comment/{post_id}/{comment_id}")
