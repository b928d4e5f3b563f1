import httpx
import pytest

from skill_ninja.catalog.github import GitHubFetcher, TreeEntry, raw_file_url
from skill_ninja.core.exceptions import RemoteAuthError, RemoteHTTPError, RemoteNotFoundError


def make_fetcher(handler, token: str | None = None) -> GitHubFetcher:
    return GitHubFetcher(token=token, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_tree_request_and_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "tree": [
                    {"path": "pdf", "type": "tree"},
                    {"path": "pdf/SKILL.md", "type": "blob"},
                    {"type": "blob"},
                ]
            },
        )

    tree = await make_fetcher(handler, token="secret").get_tree("org", "skills", "main")

    assert tree == [TreeEntry("pdf", "tree"), TreeEntry("pdf/SKILL.md", "blob")]
    (request,) = seen
    assert request.url.path == "/repos/org/skills/git/trees/main"
    assert request.url.params["recursive"] == "1"
    assert request.headers["Authorization"] == "token secret"
    assert request.headers["Accept"] == "application/vnd.github.v3+json"


@pytest.mark.asyncio
async def test_no_authorization_header_without_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(200, text="body")

    url = "https://raw.githubusercontent.com/a/b/main/x"
    assert await make_fetcher(handler).get_text(url) == "body"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "error"),
    [
        (404, RemoteNotFoundError),
        (401, RemoteAuthError),
        (403, RemoteAuthError),
        (429, RemoteAuthError),
        (500, RemoteHTTPError),
    ],
)
async def test_status_mapping(status: int, error: type[Exception]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status)

    with pytest.raises(error):
        await make_fetcher(handler).get_tree("org", "skills", "main")


@pytest.mark.asyncio
async def test_rate_limit_error_carries_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403)

    with pytest.raises(RemoteAuthError) as exc_info:
        await make_fetcher(handler).get_text("https://raw.githubusercontent.com/a/b/main/x")

    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_default_branch() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/repos/org/skills":
            return httpx.Response(200, json={"default_branch": "trunk"})
        return httpx.Response(404)

    fetcher = make_fetcher(handler)

    assert await fetcher.get_default_branch("org", "skills") == "trunk"
    assert await fetcher.get_default_branch("org", "missing") is None


@pytest.mark.asyncio
async def test_default_branch_on_connection_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    assert await make_fetcher(handler).get_default_branch("org", "skills") is None


def test_raw_file_url() -> None:
    assert (
        raw_file_url("org", "skills", "main", "/pdf/SKILL.md")
        == "https://raw.githubusercontent.com/org/skills/main/pdf/SKILL.md"
    )
