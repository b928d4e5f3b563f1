"""
Metadata for skills installed into the workspace's install directory.

Each installed skill directory may carry a ``.skill-meta.json`` written at
install time. Older installs without one fall back to the SKILL.md
metadata block.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from skill_ninja.catalog.models import SkillRecord
from skill_ninja.catalog.store import write_text_atomic
from skill_ninja.config import get_settings
from skill_ninja.constants import SKILL_FILE_NAME, SKILL_META_FILE_NAME, UNKNOWN_SOURCE_ID
from skill_ninja.core.logging.logger import get_logger
from skill_ninja.skills.descriptor import parse_descriptor, shorten_description

if TYPE_CHECKING:
    from skill_ninja.config import Settings

logger = get_logger(__name__)


class InstalledSkillMeta(BaseModel):
    """Contents of ``.skill-meta.json``."""

    name: str
    source: str = UNKNOWN_SOURCE_ID
    description: str = ""
    description_localized: str | None = Field(
        default=None, validation_alias=AliasChoices("description_localized", "description_ja")
    )
    categories: list[str] = Field(default_factory=list)
    installed_at: str = Field(default="", alias="installedAt")
    when_to_use: str | None = Field(default=None, alias="whenToUse")
    """Hint tailored to the assistant tool, when the skill ships one"""
    custom_when_to_use: str | None = Field(default=None, alias="customWhenToUse")
    """User override for the text shown in the instruction document"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @classmethod
    def from_record(cls, record: SkillRecord) -> "InstalledSkillMeta":
        return cls(
            name=record.name,
            source=record.source,
            description=record.description,
            description_localized=record.description_localized,
            categories=list(record.categories),
            installed_at=datetime.now(timezone.utc).isoformat(),
        )


@dataclass(frozen=True)
class InstalledSkill:
    """An installed skill: its directory plus the metadata describing it."""

    meta: InstalledSkillMeta
    directory: Path
    relative_path: str
    """Workspace-relative skill directory, POSIX separators"""

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def display_text(self) -> str:
        """Text shown in the instruction document: override, then hint, then description."""
        return (
            self.meta.custom_when_to_use
            or self.meta.when_to_use
            or self.meta.description
            or ""
        )


def install_root(root: Path, settings: "Settings | None" = None) -> Path:
    resolved_settings = settings or get_settings()
    return root / resolved_settings.skills.install_directory


def read_skill_meta(skill_dir: Path) -> InstalledSkillMeta | None:
    meta_path = skill_dir / SKILL_META_FILE_NAME
    if not meta_path.is_file():
        return None
    try:
        return InstalledSkillMeta.model_validate_json(meta_path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        logger.warning(
            "Failed to read skill metadata",
            data={"path": str(meta_path), "error": str(exc)},
        )
        return None


def write_skill_meta(skill_dir: Path, meta: InstalledSkillMeta) -> Path:
    meta_path = skill_dir / SKILL_META_FILE_NAME
    payload = meta.model_dump(mode="json", by_alias=True, exclude_none=True)
    write_text_atomic(meta_path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return meta_path


def meta_from_descriptor(skill_dir: Path) -> InstalledSkillMeta:
    """Build metadata for an install that predates ``.skill-meta.json``."""
    skill_file = skill_dir / SKILL_FILE_NAME
    try:
        text = skill_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return InstalledSkillMeta(name=skill_dir.name)
    metadata = parse_descriptor(text, skill_dir.name)
    return InstalledSkillMeta(
        name=metadata.name,
        description=shorten_description(metadata.description),
        categories=list(metadata.categories),
    )


def list_installed_skills(root: Path, settings: "Settings | None" = None) -> list[InstalledSkill]:
    """Installed skills in directory-name order. A missing install directory yields ``[]``."""
    directory = install_root(root, settings)
    if not directory.is_dir():
        return []

    installed: list[InstalledSkill] = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_dir():
            continue
        meta = read_skill_meta(entry) or meta_from_descriptor(entry)
        installed.append(
            InstalledSkill(
                meta=meta,
                directory=entry,
                relative_path=entry.relative_to(root).as_posix(),
            )
        )
    return installed


def find_installed_skill(
    root: Path, name: str, settings: "Settings | None" = None
) -> InstalledSkill | None:
    name_lower = name.lower()
    for skill in list_installed_skills(root, settings):
        if skill.name.lower() == name_lower or skill.directory.name.lower() == name_lower:
            return skill
    return None


def set_custom_when_to_use(
    root: Path,
    name: str,
    text: str,
    settings: "Settings | None" = None,
) -> InstalledSkillMeta:
    """
    Store the user's override for an installed skill; empty text clears it.

    Raises:
        FileNotFoundError: If no installed skill has that name
    """
    skill = find_installed_skill(root, name, settings)
    if skill is None:
        raise FileNotFoundError(f"Installed skill not found: {name}")

    value = text.strip()
    meta = skill.meta.model_copy(update={"custom_when_to_use": value or None})
    write_skill_meta(skill.directory, meta)
    logger.info(
        "Updated skill description override",
        data={"skill": meta.name, "cleared": not value},
    )
    return meta
