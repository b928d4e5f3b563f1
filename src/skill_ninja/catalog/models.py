"""Pydantic models for the persisted skill catalog (skill-index.json)."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from skill_ninja.constants import DEFAULT_CATALOG_VERSION

_LOCALIZED_ALIASES = AliasChoices("description_localized", "description_ja")


def today_iso() -> str:
    """Date-only ISO stamp used for ``lastUpdated``."""
    return date.today().isoformat()


class CatalogModel(BaseModel):
    # Unknown keys written by other tools are carried through a load/save cycle.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SkillRecord(CatalogModel):
    name: str
    source: str
    path: str = ""
    categories: list[str] = Field(default_factory=list)
    description: str = ""
    description_localized: str | None = Field(default=None, validation_alias=_LOCALIZED_ALIASES)
    url: str | None = None
    raw_url: str | None = Field(default=None, alias="rawUrl")
    stars: int | None = None
    owner: str | None = None
    is_org: bool | None = Field(default=None, alias="isOrg")

    @property
    def key(self) -> tuple[str, str]:
        """Merge key: a skill name is only unique within its source."""
        return (self.source, self.name)


class SourceRecord(CatalogModel):
    id: str
    name: str
    url: str
    # Older bundled indexes use "official"/"community"/"awesome-list" here.
    type: str = "user-added"
    branch: str | None = None
    description: str = ""
    description_localized: str | None = Field(default=None, validation_alias=_LOCALIZED_ALIASES)


class Category(CatalogModel):
    id: str
    name: str
    description: str = ""


class CatalogSnapshot(CatalogModel):
    version: str = DEFAULT_CATALOG_VERSION
    last_updated: str = Field(default_factory=today_iso, alias="lastUpdated")
    sources: list[SourceRecord] = Field(default_factory=list)
    skills: list[SkillRecord] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @classmethod
    def empty(cls) -> "CatalogSnapshot":
        return cls()

    def find_source(self, source_id: str) -> SourceRecord | None:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None

    def skills_for_source(self, source_id: str) -> list[SkillRecord]:
        return [skill for skill in self.skills if skill.source == source_id]

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def localized_description(
    record: SkillRecord | SourceRecord, language: str = "en"
) -> str:
    """Pick the localized text when the language asks for it and it is populated."""
    if language == "ja" and record.description_localized:
        return record.description_localized
    return record.description or record.description_localized or ""
