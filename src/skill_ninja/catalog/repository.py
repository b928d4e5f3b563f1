"""
Building catalog entries from remote repositories and mutating the persisted catalog.

Every mutation reads the current snapshot from the store, computes the
next snapshot in full and saves it in one write.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable

from skill_ninja.catalog.github import RepositoryFetcher, raw_file_url
from skill_ninja.catalog.models import CatalogSnapshot, SkillRecord, SourceRecord, today_iso
from skill_ninja.catalog.store import CatalogStore
from skill_ninja.constants import SKILL_FILE_NAME
from skill_ninja.core.exceptions import (
    InvalidRepositoryUrlError,
    RemoteAuthError,
    RemoteError,
    RemoteNotFoundError,
    SourceNotFoundError,
)
from skill_ninja.core.logging.logger import get_logger
from skill_ninja.skills.descriptor import directory_name_for, parse_descriptor

logger = get_logger(__name__)

_GITHUB_REPO = re.compile(r"github\.com[/:]([^/]+)/([^/#?]+)")


@dataclass(frozen=True)
class RepositoryScan:
    source: SourceRecord
    skills: list[SkillRecord]
    branch: str


@dataclass
class RefreshResult:
    snapshot: CatalogSnapshot
    succeeded: int = 0
    failed: dict[str, str] = field(default_factory=dict)
    """Source id -> error message for sources whose refresh failed"""


def parse_github_repo(url: str) -> tuple[str, str]:
    """``(owner, repo)`` from a GitHub URL."""
    if not isinstance(url, str) or not url:
        raise InvalidRepositoryUrlError(str(url))
    match = _GITHUB_REPO.search(url)
    if not match:
        raise InvalidRepositoryUrlError(url)
    owner, repo = match.groups()
    return owner, re.sub(r"\.git$", "", repo)


def source_id_for(owner: str, repo: str) -> str:
    return f"{owner}-{repo}"


def is_skill_file(path: str) -> bool:
    lower = path.lower()
    return lower == "skill.md" or lower.endswith("/skill.md")


def _skill_directory(path: str) -> str:
    parent = str(PurePosixPath(path).parent)
    return "" if parent == "." else parent


async def scan_repository(
    repo_url: str,
    fetcher: RepositoryFetcher,
    preferred_branch: str | None = None,
) -> RepositoryScan:
    """
    Catalog every SKILL.md in a repository.

    The branch is ``preferred_branch``, else the remote default, else ``main``.
    Without a preferred branch a missing tree is retried once on the other
    conventional default (``main`` <-> ``master``).

    Raises:
        InvalidRepositoryUrlError: ``repo_url`` does not name a GitHub repository
        RemoteNotFoundError: Repository or branch does not exist
        RemoteAuthError: Rate limited or credentials rejected
    """
    owner, repo = parse_github_repo(repo_url)

    branch = preferred_branch or await fetcher.get_default_branch(owner, repo) or "main"
    try:
        tree = await fetcher.get_tree(owner, repo, branch)
    except RemoteNotFoundError:
        if preferred_branch:
            raise
        fallback = "master" if branch == "main" else "main"
        logger.debug(
            "Tree not found, trying fallback branch",
            data={"repo": f"{owner}/{repo}", "branch": branch, "fallback": fallback},
        )
        try:
            tree = await fetcher.get_tree(owner, repo, fallback)
        except RemoteNotFoundError as exc:
            raise RemoteNotFoundError(
                f"Repository or branch not found: {owner}/{repo} (branch: {branch})"
            ) from exc
        branch = fallback

    source_id = source_id_for(owner, repo)
    clean_url = re.sub(r"\.git$", "", repo_url.rstrip("/"))
    skills: list[SkillRecord] = []

    for entry in tree:
        if entry.type != "blob" or not is_skill_file(entry.path):
            continue
        raw_url = raw_file_url(owner, repo, branch, entry.path)
        try:
            content = await fetcher.get_text(raw_url)
        except RemoteAuthError:
            raise
        except RemoteError as exc:
            logger.warning("Failed to fetch skill", data={"path": entry.path, "error": str(exc)})
            continue

        metadata = parse_descriptor(content, directory_name_for(entry.path))
        skill_dir = _skill_directory(entry.path)
        skills.append(
            SkillRecord(
                name=metadata.name,
                source=source_id,
                path=skill_dir,
                categories=list(metadata.categories),
                description=metadata.description,
                url=f"{clean_url}/tree/{branch}/{skill_dir}".rstrip("/"),
                raw_url=raw_url,
                owner=owner,
            )
        )

    source = SourceRecord(
        id=source_id,
        name=repo,
        url=clean_url,
        type="user-added",
        branch=branch,
        description=f"User added repository: {owner}/{repo}",
    )
    logger.info(
        "Scanned repository",
        data={"repo": f"{owner}/{repo}", "branch": branch, "skills": len(skills)},
    )
    return RepositoryScan(source=source, skills=skills, branch=branch)


async def add_source(
    store: CatalogStore, repo_url: str, fetcher: RepositoryFetcher
) -> tuple[CatalogSnapshot, int]:
    """
    Add (or re-add) a repository as a source. Returns the new snapshot and
    the number of skills found.

    Raises:
        ValueError: If the repository contains no skills
    """
    scan = await scan_repository(repo_url, fetcher)
    if not scan.skills:
        raise ValueError("No skills found in repository")

    current = store.load()
    sources = list(current.sources)
    existing = next((i for i, s in enumerate(sources) if s.id == scan.source.id), None)
    if existing is None:
        sources.append(scan.source)
    else:
        sources[existing] = scan.source

    skills = [skill for skill in current.skills if skill.source != scan.source.id]
    skills.extend(scan.skills)

    updated = current.model_copy(
        update={"sources": sources, "skills": skills, "last_updated": today_iso()}
    )
    store.save(updated)
    return updated, len(scan.skills)


def remove_source(store: CatalogStore, source_id: str) -> tuple[CatalogSnapshot, int]:
    """
    Remove a source and its skills. Returns the new snapshot and the number
    of skills removed.

    Raises:
        SourceNotFoundError: If no source has ``source_id``
    """
    current = store.load()
    if current.find_source(source_id) is None:
        raise SourceNotFoundError(source_id)

    removed = len(current.skills_for_source(source_id))
    updated = current.model_copy(
        update={
            "sources": [s for s in current.sources if s.id != source_id],
            "skills": [s for s in current.skills if s.source != source_id],
            "last_updated": today_iso(),
        }
    )
    store.save(updated)
    return updated, removed


async def refresh_from_sources(
    store: CatalogStore,
    fetcher: RepositoryFetcher,
    *,
    progress: Callable[[SourceRecord, int, int], None] | None = None,
) -> RefreshResult:
    """
    Rescan every source and rebuild the skill list.

    Existing descriptions and localized text are kept for skills that are
    still present. A source that fails to refresh keeps its previous skills.
    A rate-limit or authentication failure aborts the whole refresh without
    saving anything.
    """
    current = store.load()
    existing = {skill.key: skill for skill in current.skills}
    result = RefreshResult(snapshot=current)
    skills: list[SkillRecord] = []
    total = len(current.sources)

    for index, source in enumerate(current.sources, start=1):
        if progress is not None:
            progress(source, index, total)
        try:
            scan = await scan_repository(source.url, fetcher, source.branch)
        except RemoteAuthError:
            raise
        except (RemoteError, InvalidRepositoryUrlError) as exc:
            logger.warning(
                "Failed to update source",
                data={"source": source.id, "error": str(exc)},
            )
            result.failed[source.id] = str(exc)
            skills.extend(current.skills_for_source(source.id))
            continue

        for scanned in scan.skills:
            skill = scanned.model_copy(update={"source": source.id})
            previous = existing.get(skill.key)
            if previous is not None:
                skill = skill.model_copy(
                    update={
                        "description": previous.description or skill.description,
                        "description_localized": previous.description_localized
                        or skill.description_localized,
                    }
                )
            skills.append(skill)
        result.succeeded += 1

    result.snapshot = current.model_copy(update={"skills": skills, "last_updated": today_iso()})
    store.save(result.snapshot)
    return result


def skill_github_url(skill: SkillRecord, sources: list[SourceRecord]) -> str | None:
    source = next((s for s in sources if s.id == skill.source), None)
    if source is None:
        return None
    return f"{source.url.rstrip('/')}/tree/{source.branch or 'main'}/{skill.path}"


def skill_raw_url(
    skill: SkillRecord,
    sources: list[SourceRecord],
    file_name: str = SKILL_FILE_NAME,
) -> str | None:
    source = next((s for s in sources if s.id == skill.source), None)
    if source is None:
        return None
    try:
        owner, repo = parse_github_repo(source.url)
    except InvalidRepositoryUrlError:
        return None
    path = f"{skill.path}/{file_name}" if skill.path else file_name
    return raw_file_url(owner, repo, source.branch or "main", path)
