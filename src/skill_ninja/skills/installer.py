"""
Installing catalog skills into the workspace and removing them again.

An install downloads the skill's files from its source repository into
``<install directory>/<sanitized name>/`` and writes ``.skill-meta.json``
next to them. Everything is fetched before anything is written, so a failed
download never leaves a half-populated skill directory behind.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Sequence

from skill_ninja.catalog.github import RepositoryFetcher, raw_file_url
from skill_ninja.catalog.models import SkillRecord, SourceRecord
from skill_ninja.catalog.repository import parse_github_repo
from skill_ninja.catalog.store import write_text_atomic
from skill_ninja.config import get_settings
from skill_ninja.constants import SKILL_FILE_NAME
from skill_ninja.core.exceptions import (
    InvalidRepositoryUrlError,
    RemoteAuthError,
    RemoteError,
)
from skill_ninja.core.logging.logger import get_logger
from skill_ninja.skills.descriptor import parse_descriptor, shorten_description
from skill_ninja.skills.installed import (
    InstalledSkill,
    InstalledSkillMeta,
    find_installed_skill,
    install_root,
    write_skill_meta,
)

if TYPE_CHECKING:
    from skill_ninja.config import Settings

logger = get_logger(__name__)


def sanitize_skill_name(name: str) -> str:
    """Directory-safe form of a skill name (``"PDF Tools (beta)"`` -> ``"pdf-tools-beta"``)."""
    value = name.lower()
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"[()\[\]{}]", "", value)
    value = re.sub(r"[^a-z0-9\-_]", "-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def fallback_skill_file(record: SkillRecord) -> str:
    return f"# {record.name}\n\n{record.description}\n\nSource: {record.source}\n"


async def _resolve_location(
    record: SkillRecord,
    sources: Sequence[SourceRecord],
    fetcher: RepositoryFetcher,
) -> tuple[str, str, str] | None:
    source = next((s for s in sources if s.id == record.source), None)
    if source is None:
        return None
    try:
        owner, repo = parse_github_repo(source.url)
    except InvalidRepositoryUrlError:
        return None
    branch = source.branch or await fetcher.get_default_branch(owner, repo) or "main"
    return owner, repo, branch


async def download_skill_files(
    record: SkillRecord,
    fetcher: RepositoryFetcher,
    sources: Sequence[SourceRecord] = (),
) -> dict[str, str]:
    """
    Fetch a skill's files keyed by path relative to the skill directory.

    A skill whose catalog path is a single ``.md`` file, or whose source is
    unknown, is fetched from its raw URL and stored as SKILL.md. Otherwise
    every file under the skill's directory in the repository tree is fetched.

    Raises:
        RemoteAuthError: Rate limited or credentials rejected
        RemoteError: Any other download failure
    """
    location = await _resolve_location(record, sources, fetcher)
    skill_path = record.path.strip("/")

    if location is None or skill_path.endswith(".md") or not skill_path:
        url = record.raw_url
        if url is None and location is not None:
            owner, repo, branch = location
            file_path = skill_path if skill_path.endswith(".md") else SKILL_FILE_NAME
            url = raw_file_url(owner, repo, branch, file_path)
        if url is None:
            return {}
        return {SKILL_FILE_NAME: await fetcher.get_text(url)}

    owner, repo, branch = location
    prefix = f"{skill_path}/"
    files: dict[str, str] = {}
    for entry in await fetcher.get_tree(owner, repo, branch):
        if entry.type != "blob" or not entry.path.startswith(prefix):
            continue
        relative = entry.path[len(prefix) :]
        if ".." in PurePosixPath(relative).parts:
            continue
        files[relative] = await fetcher.get_text(raw_file_url(owner, repo, branch, entry.path))
    return files


def _write_skill_directory(skill_dir: Path, files: dict[str, str], *, replace: bool) -> None:
    if replace and skill_dir.exists():
        shutil.rmtree(skill_dir)
    skill_dir.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        write_text_atomic(skill_dir / relative, content)


async def install_skill(
    root: Path,
    record: SkillRecord,
    fetcher: RepositoryFetcher,
    settings: "Settings | None" = None,
    *,
    sources: Sequence[SourceRecord] = (),
    overwrite: bool = False,
) -> InstalledSkill:
    """
    Install a catalog skill into the workspace's install directory.

    Download failures other than rate limits fall back to a generated SKILL.md
    carrying the catalog description, so the skill is still listed.

    Raises:
        FileExistsError: The skill directory exists and ``overwrite`` is false
        RemoteAuthError: Rate limited or credentials rejected
        DocumentWriteError: A file could not be written
    """
    resolved_settings = settings or get_settings()
    destination_root = install_root(root, resolved_settings)
    skill_dir = destination_root / sanitize_skill_name(record.name)
    if skill_dir.exists() and not overwrite:
        raise FileExistsError(f"Skill already exists: {skill_dir}")

    try:
        files = await download_skill_files(record, fetcher, sources)
    except RemoteAuthError:
        raise
    except RemoteError as exc:
        logger.warning(
            "Failed to download skill, writing fallback SKILL.md",
            data={"skill": record.name, "error": str(exc)},
        )
        files = {}

    if SKILL_FILE_NAME not in files:
        files[SKILL_FILE_NAME] = fallback_skill_file(record)

    meta = InstalledSkillMeta.from_record(record)
    extracted = parse_descriptor(files[SKILL_FILE_NAME], skill_dir.name).description
    if extracted:
        meta.description = shorten_description(extracted)

    await asyncio.to_thread(_write_skill_directory, skill_dir, files, replace=overwrite)
    write_skill_meta(skill_dir, meta)
    logger.info(
        "Installed skill",
        data={"skill": record.name, "path": str(skill_dir), "files": len(files)},
    )
    return InstalledSkill(
        meta=meta,
        directory=skill_dir,
        relative_path=skill_dir.relative_to(root).as_posix(),
    )


def remove_skill_directory(skill_dir: Path, *, destination_root: Path) -> None:
    skill_dir = skill_dir.resolve()
    destination_root = destination_root.resolve()
    if destination_root not in skill_dir.parents:
        raise ValueError("Skill path is outside of the managed skills directory.")
    if not skill_dir.is_dir():
        raise FileNotFoundError(f"Skill directory not found: {skill_dir}")
    shutil.rmtree(skill_dir)


def uninstall_skill(root: Path, name: str, settings: "Settings | None" = None) -> Path:
    """
    Remove an installed skill by name or directory name.

    Raises:
        FileNotFoundError: If no installed skill matches
    """
    resolved_settings = settings or get_settings()
    destination_root = install_root(root, resolved_settings)
    skill = find_installed_skill(root, name, resolved_settings)
    skill_dir = skill.directory if skill else destination_root / sanitize_skill_name(name)
    remove_skill_directory(skill_dir, destination_root=destination_root)
    logger.info("Uninstalled skill", data={"skill": name, "path": str(skill_dir)})
    return skill_dir


def uninstall_skill_by_path(root: Path, relative_path: str) -> Path:
    """Remove the skill directory holding ``relative_path`` (``folder/SKILL.md`` or ``folder``)."""
    folder = re.sub(r"/?skill\.md$", "", relative_path.replace("\\", "/"), flags=re.IGNORECASE)
    skill_dir = root / folder
    remove_skill_directory(skill_dir, destination_root=root)
    logger.info("Removed skill directory", data={"path": str(skill_dir)})
    return skill_dir
