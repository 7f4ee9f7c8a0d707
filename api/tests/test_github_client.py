"""GitHubClient against a mocked transport: paging, error mapping and topic scoring."""

import httpx
import pytest

from rankedin.services.github import GitHubAPIError, GitHubClient, GitHubNotFoundError


def _client(handler, **kwargs) -> GitHubClient:
    return GitHubClient(
        token=kwargs.pop("token", ""),
        base_url="https://api.github.test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _repos(*stars):
    return [{"name": f"r{i}", "stargazers_count": s} for i, s in enumerate(stars)]


async def test_sends_github_headers_and_token():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={"login": "octocat"})

    client = _client(handler, token="s3cret")
    await client.get_user_details("octocat")
    await client.aclose()

    assert seen["authorization"] == "Bearer s3cret"
    assert seen["accept"] == "application/vnd.github+json"
    assert seen["x-github-api-version"] == "2022-11-28"


async def test_no_authorization_header_without_token():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={})

    client = _client(handler)
    await client.get_user_details("octocat")
    await client.aclose()

    assert "authorization" not in seen


async def test_404_maps_to_not_found():
    client = _client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

    with pytest.raises(GitHubNotFoundError) as exc_info:
        await client.get_repository_details("ghost", "nothing")
    await client.aclose()

    assert exc_info.value.status_code == 404


@pytest.mark.parametrize("status", [403, 422, 500, 502])
async def test_error_status_maps_to_api_error(status):
    client = _client(lambda request: httpx.Response(status, json={}))

    with pytest.raises(GitHubAPIError) as exc_info:
        await client.get_user_details("octocat")
    await client.aclose()

    assert exc_info.value.status_code == status


async def test_transport_failure_maps_to_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(GitHubAPIError):
        await client.get_user_details("octocat")
    await client.aclose()


class TestUserTotalStars:
    async def test_walks_pages_until_short_page(self):
        pages = {1: _repos(10, 20), 2: _repos(5, 5), 3: _repos(1)}
        requested = []

        def handler(request):
            page = int(request.url.params["page"])
            requested.append(page)
            assert request.url.params["type"] == "owner"
            assert request.url.params["per_page"] == "2"
            return httpx.Response(200, json=pages[page])

        client = _client(handler, repos_per_page=2)
        total = await client.get_user_total_stars("octocat")
        await client.aclose()

        assert total == 41
        assert requested == [1, 2, 3]

    async def test_stops_at_page_cap(self):
        requested = []

        def handler(request):
            requested.append(int(request.url.params["page"]))
            return httpx.Response(200, json=_repos(1, 1))

        client = _client(handler, repos_per_page=2, max_star_pages=3)
        total = await client.get_user_total_stars("octocat")
        await client.aclose()

        assert total == 6
        assert requested == [1, 2, 3]

    async def test_missing_star_counts_count_as_zero(self):
        client = _client(
            lambda request: httpx.Response(200, json=[{"name": "a"}, {"stargazers_count": None}])
        )
        assert await client.get_user_total_stars("octocat") == 0
        await client.aclose()

    async def test_failure_is_soft(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(200, json=_repos(7, 7))
            return httpx.Response(500, json={})

        client = _client(handler, repos_per_page=2)
        total = await client.get_user_total_stars("octocat")
        await client.aclose()

        assert total == 0


class TestTopicDetails:
    async def test_score_is_sum_of_stars_in_search_results(self):
        def handler(request):
            assert request.url.path == "/search/repositories"
            assert request.url.params["q"] == "topic:python"
            assert request.url.params["per_page"] == "100"
            return httpx.Response(
                200,
                json={"total_count": 4200, "items": _repos(1000, 250, 50)},
            )

        client = _client(handler)
        details = await client.get_topic_details("python")
        await client.aclose()

        assert details == {
            "name": "python",
            "display_name": "Python",
            "description": "A collection of repositories related to python",
            "featured": False,
            "curated": False,
            "score": 1300,
            "repositories": 4200,
        }

    async def test_no_tagged_repositories_returns_none(self):
        client = _client(lambda request: httpx.Response(200, json={"total_count": 0, "items": []}))
        assert await client.get_topic_details("nothing-here") is None
        await client.aclose()

    async def test_failures_propagate(self):
        client = _client(lambda request: httpx.Response(503, json={}))
        with pytest.raises(GitHubAPIError):
            await client.get_topic_details("python")
        await client.aclose()


class TestMalformedResponses:
    async def test_non_json_body_is_api_error(self):
        client = _client(lambda request: httpx.Response(200, text="<html>upstream error</html>"))

        with pytest.raises(GitHubAPIError):
            await client.get_user_details("octocat")
        await client.aclose()

    @pytest.mark.parametrize("payload", [[], "octocat", None])
    async def test_details_must_be_an_object(self, payload):
        client = _client(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(GitHubAPIError):
            await client.get_repository_details("o", "r")
        await client.aclose()

    @pytest.mark.parametrize(
        "body",
        [
            {"text": "<html>upstream error</html>"},
            {"json": {"message": "not a list"}},
            {"json": ["not-a-repo"]},
            {"json": [{"stargazers_count": "many"}]},
        ],
    )
    async def test_total_stars_fails_soft_on_malformed_pages(self, body):
        client = _client(lambda request: httpx.Response(200, **body))

        assert await client.get_user_total_stars("torvalds") == 0
        await client.aclose()

    @pytest.mark.parametrize(
        "body",
        [
            {"text": "<html>upstream error</html>"},
            {"json": ["not", "an", "object"]},
            {"json": {"total_count": "lots", "items": []}},
            {"json": {"total_count": 3, "items": {"not": "a list"}}},
            {"json": {"total_count": 3, "items": [42]}},
        ],
    )
    async def test_topic_details_raise_api_error_on_malformed_search(self, body):
        client = _client(lambda request: httpx.Response(200, **body))

        with pytest.raises(GitHubAPIError):
            await client.get_topic_details("python")
        await client.aclose()
