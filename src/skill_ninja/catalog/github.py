"""
Remote fetcher for GitHub repositories.

Only three calls are needed by the catalog: the repository's default
branch, its recursive file tree and the raw text of single files. Anything
implementing ``RepositoryFetcher`` can stand in for ``GitHubFetcher``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx

from skill_ninja.constants import GITHUB_API_URL, GITHUB_RAW_URL
from skill_ninja.core.exceptions import (
    RemoteAuthError,
    RemoteHTTPError,
    RemoteNotFoundError,
)
from skill_ninja.core.logging.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "skill-ninja"


@dataclass(frozen=True)
class TreeEntry:
    path: str
    type: str
    """``blob`` for files, ``tree`` for directories"""


class RepositoryFetcher(Protocol):
    async def get_default_branch(self, owner: str, repo: str) -> str | None: ...

    async def get_tree(self, owner: str, repo: str, branch: str) -> list[TreeEntry]: ...

    async def get_text(self, url: str) -> str: ...


def raw_file_url(owner: str, repo: str, branch: str, path: str) -> str:
    return f"{GITHUB_RAW_URL}/{owner}/{repo}/{branch}/{path.lstrip('/')}"


def raise_for_status(response: httpx.Response) -> None:
    """Map HTTP failures onto the remote error hierarchy."""
    if response.is_success:
        return
    status = response.status_code
    url = str(response.request.url) if response.request else ""
    if status == 404:
        raise RemoteNotFoundError(f"Not found: {url}")
    if status in (401, 403, 429):
        raise RemoteAuthError(status)
    raise RemoteHTTPError(status, url)


class GitHubFetcher:
    """Fetches repository data from the GitHub REST API."""

    def __init__(
        self,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers=self._headers(),
            transport=self._transport,
            follow_redirects=True,
        )

    async def get_default_branch(self, owner: str, repo: str) -> str | None:
        """The repository's default branch, or ``None`` when it cannot be determined."""
        url = f"{GITHUB_API_URL}/repos/{owner}/{repo}"
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.TransportError as exc:
            logger.warning("Failed to query repository", data={"url": url, "error": str(exc)})
            return None
        if not response.is_success:
            return None
        branch = response.json().get("default_branch")
        return branch if isinstance(branch, str) and branch else None

    async def get_tree(self, owner: str, repo: str, branch: str) -> list[TreeEntry]:
        """
        Recursive file tree of ``branch``.

        Raises:
            RemoteNotFoundError: Repository or branch does not exist
            RemoteAuthError: Rate limited or credentials rejected
            RemoteHTTPError: Any other failure status
        """
        url = f"{GITHUB_API_URL}/repos/{owner}/{repo}/git/trees/{branch}"
        async with self._client() as client:
            response = await client.get(url, params={"recursive": "1"})
        raise_for_status(response)
        payload = response.json()
        entries = payload.get("tree", []) if isinstance(payload, dict) else []
        return [
            TreeEntry(path=entry["path"], type=entry.get("type", ""))
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("path"), str)
        ]

    async def get_text(self, url: str) -> str:
        async with self._client() as client:
            response = await client.get(url)
        raise_for_status(response)
        return response.text
