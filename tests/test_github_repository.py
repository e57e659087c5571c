import unittest

import httpx

from portfolio_repos.config.settings import Settings
from portfolio_repos.exceptions import UpstreamError
from portfolio_repos.repository.github_repository import GitHubRepository


def repo_payload(repo_id: int, stars: int = 0) -> dict:
    return {
        "id": repo_id,
        "name": f"repo-{repo_id}",
        "full_name": f"octocat/repo-{repo_id}",
        "description": None,
        "html_url": f"https://github.com/octocat/repo-{repo_id}",
        "homepage": None,
        "stargazers_count": stars,
        "forks_count": 1,
        "language": None,
        "topics": ["demo"],
        "updated_at": "2024-05-01T00:00:00Z",
    }


class TestGitHubRepository(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = Settings(_env_file=None, github_token=None)
        self.requests: list[httpx.Request] = []

    def make_repo(self, handler) -> GitHubRepository:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(
            base_url=self.settings.github_api_url,
            transport=httpx.MockTransport(recording_handler),
        )
        return GitHubRepository(self.settings, client=client)

    async def test_updated_uses_user_repos_endpoint(self):
        github = self.make_repo(
            lambda request: httpx.Response(200, json=[repo_payload(1), repo_payload(2)])
        )

        repos = await github.fetch_repositories("octocat", "updated", 4)
        await github.close()

        request = self.requests[0]
        self.assertEqual(request.url.path, "/users/octocat/repos")
        self.assertEqual(request.url.params["sort"], "updated")
        self.assertEqual(request.url.params["per_page"], "4")
        self.assertEqual([repo.id for repo in repos], [1, 2])
        self.assertEqual(repos[0].topics, ["demo"])
        self.assertIsNone(repos[0].description)

    async def test_stars_uses_search_endpoint(self):
        payload = {"total_count": 2, "items": [repo_payload(7, 90), repo_payload(3, 10)]}
        github = self.make_repo(lambda request: httpx.Response(200, json=payload))

        repos = await github.fetch_repositories("octocat", "stars", 4)

        request = self.requests[0]
        self.assertEqual(request.url.path, "/search/repositories")
        self.assertEqual(request.url.params["q"], "user:octocat")
        self.assertEqual(request.url.params["sort"], "stars")
        self.assertEqual(request.url.params["order"], "desc")
        self.assertEqual([repo.stargazers_count for repo in repos], [90, 10])

    async def test_results_are_capped_at_page_size(self):
        github = self.make_repo(
            lambda request: httpx.Response(200, json=[repo_payload(i) for i in range(10)])
        )

        repos = await github.fetch_repositories("octocat", "updated", 3)
        self.assertEqual(len(repos), 3)

    async def test_error_status_raises_upstream_error_with_status(self):
        github = self.make_repo(
            lambda request: httpx.Response(403, json={"message": "API rate limit exceeded"})
        )

        with self.assertRaises(UpstreamError) as ctx:
            await github.fetch_repositories("octocat", "updated", 4)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(len(self.requests), 1)

    async def test_transport_error_raises_upstream_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        github = self.make_repo(handler)

        with self.assertRaises(UpstreamError) as ctx:
            await github.fetch_repositories("octocat", "stars", 4)
        self.assertIsNone(ctx.exception.status_code)

    async def test_unexpected_payload_raises_upstream_error(self):
        cases = [
            httpx.Response(200, text="<html>oops</html>"),
            httpx.Response(200, json={"message": "not a list"}),
            httpx.Response(200, json=[{"id": 1}]),
        ]
        for response in cases:
            with self.subTest(body=response.text):
                github = self.make_repo(lambda request, response=response: response)
                with self.assertRaises(UpstreamError):
                    await github.fetch_repositories("octocat", "updated", 4)


class TestGitHubHeaders(unittest.TestCase):
    def test_token_is_sent_as_bearer(self):
        settings = Settings(_env_file=None, github_token="secret")
        github = GitHubRepository(settings)
        self.assertEqual(github.client.headers["Authorization"], "Bearer secret")
        self.assertEqual(github.client.headers["Accept"], "application/vnd.github+json")

    def test_no_authorization_without_token(self):
        settings = Settings(_env_file=None, github_token=None)
        github = GitHubRepository(settings)
        self.assertNotIn("Authorization", github.client.headers)


if __name__ == "__main__":
    unittest.main()
