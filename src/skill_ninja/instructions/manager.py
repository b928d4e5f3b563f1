"""
Instruction Document Manager - keeps the workspace's instruction document in sync.

This module provides functionality to:
- Reconcile installed skills with skills authored elsewhere in the workspace
- Render them in the dialect the workspace's assistant expects
- Rewrite the managed section of the instruction document as a whole file
- Remove the managed section again
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from skill_ninja.catalog.store import write_text_atomic
from skill_ninja.config import get_settings
from skill_ninja.core.logging.logger import get_logger
from skill_ninja.instructions.dialects import OutputFormat, RenderableSkill
from skill_ninja.instructions.document import remove_managed_section, synchronize
from skill_ninja.skills.installed import InstalledSkill, list_installed_skills
from skill_ninja.skills.scanner import (
    LocalSkillDescriptor,
    read_instruction_document,
    scan_local_skills,
)
from skill_ninja.tools.detector import resolve_output_format

if TYPE_CHECKING:
    from skill_ninja.config import Settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one synchronization pass."""

    path: Path
    output_format: OutputFormat
    installed_count: int
    local_count: int
    changed: bool

    @property
    def skill_count(self) -> int:
        return self.installed_count + self.local_count


def reconcile_skills(
    installed: Sequence[InstalledSkill],
    local: Sequence[LocalSkillDescriptor],
) -> list[RenderableSkill]:
    """
    Installed skills first, then local skills not shadowed by an installed one.

    A local skill with the same name as an installed skill is treated as installed.
    """
    reconciled = [
        RenderableSkill(name=skill.name, path=skill.relative_path, text=skill.display_text)
        for skill in installed
    ]
    installed_names = {skill.name for skill in installed}
    for descriptor in local:
        if descriptor.is_installed or descriptor.name in installed_names:
            continue
        reconciled.append(
            RenderableSkill(
                name=descriptor.name,
                path=descriptor.relative_path,
                text=descriptor.description,
            )
        )
    return reconciled


async def update_instruction_file(
    root: Path,
    *,
    settings: "Settings | None" = None,
    cancel_event: asyncio.Event | None = None,
) -> SyncResult:
    """
    Rewrite the managed section of the workspace's instruction document.

    The document is read whole, the next state computed in memory and written
    whole; if the write fails the previous document is left untouched.

    Raises:
        DocumentWriteError: If the document could not be written
        OperationCancelledError: If ``cancel_event`` was set during the scan
    """
    resolved_settings = settings or get_settings()
    root = root.resolve()
    output_format, instruction_file = resolve_output_format(root, resolved_settings)

    installed = await asyncio.to_thread(list_installed_skills, root, resolved_settings)
    local: list[LocalSkillDescriptor] = []
    if resolved_settings.skills.include_local_skills:
        local = await scan_local_skills(
            root,
            include_installed=False,
            settings=resolved_settings,
            instruction_file=instruction_file,
            cancel_event=cancel_event,
        )

    skills = reconcile_skills(installed, local)
    document_path = root / instruction_file
    existing = await read_instruction_document(document_path) or ""
    updated = synchronize(existing, skills, output_format)

    changed = updated != existing
    if changed:
        await asyncio.to_thread(write_text_atomic, document_path, updated)
        logger.info(
            "Updated instruction file",
            data={"path": str(document_path), "format": output_format.value, "skills": len(skills)},
        )

    return SyncResult(
        path=document_path,
        output_format=output_format,
        installed_count=len(installed),
        local_count=len(skills) - len(installed),
        changed=changed,
    )


async def remove_skill_section(root: Path, *, settings: "Settings | None" = None) -> bool:
    """Strip the managed section from the instruction document. Returns whether it changed."""
    resolved_settings = settings or get_settings()
    root = root.resolve()
    _, instruction_file = resolve_output_format(root, resolved_settings)
    document_path = root / instruction_file

    existing = await read_instruction_document(document_path)
    if existing is None:
        return False
    updated = remove_managed_section(existing)
    if updated == existing:
        return False
    await asyncio.to_thread(write_text_atomic, document_path, updated)
    logger.info("Removed skill section", data={"path": str(document_path)})
    return True
