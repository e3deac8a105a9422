"""
DevConnector Backend - GitHub Repository Proxy
===============================================

What:  Fetches a user's five earliest-created public repositories from the
       GitHub REST API for display on their profile.
How:   One GET per request through httpx.AsyncClient. The OAuth app
       credentials, when configured, are sent as query parameters to raise
       the anonymous rate limit.
Who:   Called by GET /api/profile/github/{username} and the health probe.

Failure Handling:
    Any non-200 answer (unknown user, rate limited, GitHub down) and any
    transport failure (timeout, DNS, refused connection) is reported the same
    way: UpstreamError, rendered as 404 "No github profile found". There are
    no retries; the client simply asks again.
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import httpx

from devconnector import __version__
from devconnector.config import settings
from devconnector.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class GitHubService:
    """Thin async client for the two GitHub endpoints this service needs."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # A custom transport lets tests answer requests without the network
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=settings.github_api_url,
            timeout=settings.github_timeout,
            headers={
                "User-Agent": f"devconnector/{__version__}",
                "Accept": "application/vnd.github+json",
            },
            transport=self._transport,
        )

    @staticmethod
    def _credentials() -> Dict[str, str]:
        if settings.github_client_id and settings.github_client_secret:
            return {
                "client_id": settings.github_client_id,
                "client_secret": settings.github_client_secret,
            }
        return {}

    def _repos_query(self) -> Dict[str, Any]:
        return {
            "per_page": settings.github_repos_per_page,
            "sort": "created:asc",
            **self._credentials(),
        }

    async def fetch_repos(self, username: str) -> List[Dict[str, Any]]:
        """
        Returns the repository list GitHub reports for `username`, unmodified.

        Raises:
            UpstreamError: GitHub answered non-200 or could not be reached
        """
        call_id = str(uuid.uuid4())[:8]
        start = time.perf_counter()

        try:
            async with self._client() as client:
                response = await client.get(f"/users/{username}/repos", params=self._repos_query())
        except httpx.HTTPError as e:
            logger.warning(
                "[%s] GitHub request for %s failed: %s: %s",
                call_id, username, type(e).__name__, str(e),
            )
            raise UpstreamError(username, context={"error_type": type(e).__name__})

        duration_ms = (time.perf_counter() - start) * 1000

        if response.status_code != 200:
            logger.info(
                "[%s] GitHub answered %d for %s in %.0fms",
                call_id, response.status_code, username, duration_ms,
            )
            raise UpstreamError(username, context={"upstream_status": response.status_code})

        try:
            repos = response.json()
        except ValueError:
            logger.warning("[%s] GitHub returned a non-JSON body for %s", call_id, username)
            raise UpstreamError(username, context={"error_type": "invalid_json"})

        logger.info(
            "[%s] Fetched %d repos for %s in %.0fms",
            call_id, len(repos), username, duration_ms,
        )
        return repos

    async def health_check(self) -> bool:
        """
        Checks that GitHub is reachable.

        Uses /rate_limit, which does not count against the quota.
        Returns False instead of raising.
        """
        try:
            async with self._client() as client:
                response = await client.get("/rate_limit", params=self._credentials())
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("GitHub health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
github_service = GitHubService()
