"""Async client for the GitHub REST API, the source of every ranking metric.

One GitHubClient (and one underlying httpx.AsyncClient) lives on app.state for
the lifetime of the process. Errors are normalized into two exceptions:

- GitHubNotFoundError: GitHub answered 404 for the identifier.
- GitHubAPIError: any other HTTP error status, a transport failure, or a
  response body that is not the JSON shape the endpoint documents.

get_user_total_stars is fail-soft: it logs and returns 0 instead of raising.
"""

import time
from typing import Any, Optional

import httpx
import structlog

from rankedin.config import settings
from rankedin.metrics import github_request_duration, github_requests

log = structlog.get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubError(Exception):
    """Base class for failures talking to GitHub."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class GitHubNotFoundError(GitHubError):
    """GitHub returned 404 for the requested resource."""


class GitHubAPIError(GitHubError):
    """GitHub returned an error status, or the request never completed."""


def _sum_stargazers(repos: Any) -> int:
    """Total stargazers_count over a list of repository objects.

    Raises GitHubAPIError when the payload is not shaped like one.
    """
    if not isinstance(repos, list):
        raise GitHubAPIError(f"Expected a list of repositories, got {type(repos).__name__}")
    total = 0
    for repo in repos:
        if not isinstance(repo, dict):
            raise GitHubAPIError("Malformed repository entry in GitHub response")
        stars = repo.get("stargazers_count") or 0
        if not isinstance(stars, int):
            raise GitHubAPIError("Malformed stargazers_count in GitHub response")
        total += stars
    return total


class GitHubClient:
    def __init__(
        self,
        token: str = "",
        base_url: str = "https://api.github.com",
        timeout: float = 10.0,
        repos_per_page: int = 100,
        max_star_pages: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": "rankedin",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.repos_per_page = repos_per_page
        self.max_star_pages = max_star_pages
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls) -> "GitHubClient":
        return cls(
            token=settings.github_token,
            base_url=settings.github_api_url,
            timeout=settings.github_timeout_seconds,
            repos_per_page=settings.github_repos_per_page,
            max_star_pages=settings.github_max_star_pages,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, endpoint: str, params: Optional[dict] = None) -> Any:
        """GET a JSON document, translating failures into GitHubError subclasses.

        endpoint is a low-cardinality label for metrics (e.g. "users.get").
        """
        start = time.monotonic()
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            github_requests.labels(endpoint=endpoint, status="transport_error").inc()
            log.warning("github_request_failed", endpoint=endpoint, error=str(e))
            raise GitHubAPIError(f"GitHub request failed: {e}") from e
        finally:
            github_request_duration.labels(endpoint=endpoint).observe(time.monotonic() - start)

        github_requests.labels(endpoint=endpoint, status=str(response.status_code)).inc()
        if response.status_code == 404:
            raise GitHubNotFoundError(f"GitHub resource not found: {path}", status_code=404)
        if response.status_code >= 400:
            log.warning(
                "github_request_failed",
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise GitHubAPIError(
                f"GitHub returned {response.status_code} for {path}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            log.warning("github_invalid_json", endpoint=endpoint, error=str(e))
            raise GitHubAPIError(f"GitHub returned a non-JSON body for {path}") from e

    async def _get_object(self, path: str, endpoint: str, params: Optional[dict] = None) -> dict:
        data = await self._get(path, endpoint, params)
        if not isinstance(data, dict):
            raise GitHubAPIError(f"Expected a JSON object from {path}, got {type(data).__name__}")
        return data

    async def get_user_details(self, username: str) -> dict:
        return await self._get_object(f"/users/{username}", "users.get")

    async def get_repository_details(self, owner: str, repo: str) -> dict:
        return await self._get_object(f"/repos/{owner}/{repo}", "repos.get")

    async def get_user_total_stars(self, username: str) -> int:
        """Sum stargazers_count across every repository the user owns.

        Walks /users/{username}/repos page by page until a short page or the
        configured page cap. Any GitHub failure yields 0 rather than raising.
        """
        total = 0
        try:
            for page in range(1, self.max_star_pages + 1):
                repos = await self._get(
                    f"/users/{username}/repos",
                    "repos.list_for_user",
                    params={"type": "owner", "per_page": self.repos_per_page, "page": page},
                )
                total += _sum_stargazers(repos)
                if len(repos) < self.repos_per_page:
                    break
        except GitHubError as e:
            log.warning("user_total_stars_failed", username=username, error=str(e))
            return 0
        return total

    async def get_topic_details(self, name: str) -> Optional[dict]:
        """Describe a topic from the top 100 repositories tagged with it.

        GitHub has no direct topic metrics endpoint, so the score is the sum of
        stargazers over the search results. Returns None when no repository
        carries the topic. GitHub failures propagate.
        """
        data = await self._get_object(
            "/search/repositories",
            "search.repos",
            params={"q": f"topic:{name}", "sort": "stars", "order": "desc", "per_page": 100},
        )
        total_count = data.get("total_count") or 0
        if not isinstance(total_count, int):
            raise GitHubAPIError("Malformed total_count in topic search response")
        if total_count == 0:
            return None

        score = _sum_stargazers(data.get("items") or [])
        return {
            "name": name,
            "display_name": name[:1].upper() + name[1:],
            "description": f"A collection of repositories related to {name}",
            "featured": False,
            "curated": False,
            "score": score,
            "repositories": total_count,
        }

    async def search_users(self, query: str, page: int = 1, per_page: int = 30) -> dict:
        return await self._get(
            "/search/users",
            "search.users",
            params={"q": query, "page": page, "per_page": per_page, "sort": "followers", "order": "desc"},
        )

    async def search_repositories(self, query: str, page: int = 1, per_page: int = 30) -> dict:
        return await self._get(
            "/search/repositories",
            "search.repos",
            params={"q": query, "page": page, "per_page": per_page, "sort": "stars", "order": "desc"},
        )

    async def search_topics(self, query: str) -> dict:
        return await self._get("/search/topics", "search.topics", params={"q": query})
