"""
Workspace skill scanner.

Finds SKILL.md files anywhere in the workspace, parses each into a
``LocalSkillDescriptor`` and marks which ones the instruction document
already references.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from skill_ninja.config import get_settings
from skill_ninja.constants import LOCAL_SOURCE_ID, SKILL_FILE_NAME
from skill_ninja.core.exceptions import OperationCancelledError
from skill_ninja.core.logging.logger import get_logger
from skill_ninja.skills.descriptor import directory_name_for, parse_descriptor
from skill_ninja.skills.registration import detect_registrations

if TYPE_CHECKING:
    from skill_ninja.config import Settings

logger = get_logger(__name__)


@dataclass
class LocalSkillDescriptor:
    """A skill discovered on disk. Recomputed on every scan, never persisted."""

    name: str
    description: str
    relative_path: str
    """Workspace-relative skill directory, POSIX separators"""
    full_path: Path
    """Absolute path of the SKILL.md file"""
    categories: list[str] = field(default_factory=list)
    is_installed: bool = False
    is_registered: bool = False
    registration_file: str | None = None
    source: str = LOCAL_SOURCE_ID


def find_descriptor_files(
    root: Path,
    *,
    exclude: Sequence[str] = (),
    limit: int | None = None,
) -> list[Path]:
    """SKILL.md files under ``root`` in sorted walk order, skipping excluded directory names."""
    excluded = set(exclude)
    found: list[Path] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in excluded)
        if SKILL_FILE_NAME in filenames:
            found.append(Path(current) / SKILL_FILE_NAME)
            if limit is not None and len(found) >= limit:
                break
    return found


def is_under_directory(relative_path: str, directory: str) -> bool:
    directory = directory.strip("/")
    return relative_path == directory or relative_path.startswith(f"{directory}/")


def parse_descriptor_file(path: Path, root: Path, install_directory: str) -> LocalSkillDescriptor:
    text = path.read_text(encoding="utf-8")
    relative_file = path.relative_to(root).as_posix()
    metadata = parse_descriptor(text, directory_name_for(relative_file))
    relative_dir = path.parent.relative_to(root).as_posix()
    return LocalSkillDescriptor(
        name=metadata.name,
        description=metadata.description,
        categories=list(metadata.categories),
        relative_path=relative_dir,
        full_path=path,
        is_installed=is_under_directory(relative_file, install_directory),
    )


async def read_instruction_document(path: Path) -> str | None:
    if not path.is_file():
        return None
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "Failed to read instruction file",
            data={"path": str(path), "error": str(exc)},
        )
        return None


async def scan_local_skills(
    root: Path,
    *,
    include_installed: bool = False,
    settings: "Settings | None" = None,
    instruction_file: str | None = None,
    cancel_event: asyncio.Event | None = None,
) -> list[LocalSkillDescriptor]:
    """
    Scan the workspace for skill descriptors.

    Args:
        root: Workspace root
        include_installed: Also return skills inside the install directory
        settings: Settings to use (defaults to the global settings)
        instruction_file: Workspace-relative document checked for registrations
            (defaults to the configured instruction file)
        cancel_event: Checked between files; when set the scan stops and
            nothing is returned

    Raises:
        OperationCancelledError: If ``cancel_event`` was set during the scan
    """
    resolved_settings = settings or get_settings()
    skills_settings = resolved_settings.skills
    root = root.resolve()

    files = await asyncio.to_thread(
        find_descriptor_files,
        root,
        exclude=skills_settings.exclude_patterns,
        limit=skills_settings.max_scan_results,
    )

    descriptors: list[LocalSkillDescriptor] = []
    for path in files:
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError("Workspace scan cancelled")
        relative_file = path.relative_to(root).as_posix()
        if not include_installed and is_under_directory(
            relative_file, skills_settings.install_directory
        ):
            continue
        try:
            descriptor = await asyncio.to_thread(
                parse_descriptor_file, path, root, skills_settings.install_directory
            )
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.warning(
                "Failed to parse skill descriptor",
                data={"path": str(path), "error": str(exc)},
            )
            continue
        descriptors.append(descriptor)

    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError("Workspace scan cancelled")

    document_path = instruction_file or resolved_settings.instructions.instruction_file
    content = await read_instruction_document(root / document_path)
    detect_registrations(descriptors, content, document_path)

    logger.debug(
        "Scanned workspace skills",
        data={"root": str(root), "found": len(files), "returned": len(descriptors)},
    )
    return descriptors
