"""
Merging an incoming (bundled or remote) catalog into the locally persisted one.

The merge is additive: nothing present locally is ever dropped, and text is
only replaced by non-empty incoming text so localized descriptions survive
upstream updates that do not carry them.
"""

from __future__ import annotations

import re
from typing import TypeVar

from skill_ninja.catalog.models import CatalogSnapshot, SkillRecord, SourceRecord
from skill_ninja.core.logging.logger import get_logger

logger = get_logger(__name__)

_Described = TypeVar("_Described", SkillRecord, SourceRecord)

_VERSION_PART = re.compile(r"\d+")


def parse_version(version: str | int | float | None) -> tuple[int, ...]:
    """Turn ``"1.2.10"`` into ``(1, 2, 10)``; non-numeric parts are ignored."""
    if version is None:
        return (0,)
    parts = tuple(int(part) for part in _VERSION_PART.findall(str(version)))
    return parts or (0,)


def is_newer_version(candidate: str | None, current: str | None) -> bool:
    """True when ``candidate`` is strictly newer than ``current``."""
    left, right = parse_version(candidate), parse_version(current)
    width = max(len(left), len(right))
    return left + (0,) * (width - len(left)) > right + (0,) * (width - len(right))


def _refresh_text(local: _Described, incoming: _Described | None) -> _Described:
    """Copy non-empty description fields from ``incoming`` onto ``local``."""
    if incoming is None:
        return local.model_copy(deep=True)

    update: dict[str, str] = {}
    if incoming.description and incoming.description != local.description:
        update["description"] = incoming.description
    if (
        incoming.description_localized
        and incoming.description_localized != local.description_localized
    ):
        update["description_localized"] = incoming.description_localized
    return local.model_copy(update=update, deep=True)


def merge_catalogs(local: CatalogSnapshot, incoming: CatalogSnapshot) -> CatalogSnapshot:
    """
    Merge ``incoming`` into ``local`` without discarding local data.

    - Local sources keep their ``id`` and ``type``; descriptions are refreshed
      from the incoming source with the same id.
    - Sources only present in ``incoming`` are appended, along with all of
      their skills.
    - Local skills are refreshed from the incoming skill with the same
      ``(source, name)``; skills absent from ``incoming`` are kept as-is.
    - The result carries the newer of the two versions.
    """
    incoming_sources = {source.id: source for source in incoming.sources}
    local_source_ids = {source.id for source in local.sources}

    merged_sources = [
        _refresh_text(source, incoming_sources.get(source.id)) for source in local.sources
    ]
    new_source_ids: set[str] = set()
    for source in incoming.sources:
        if source.id in local_source_ids or source.id in new_source_ids:
            continue
        merged_sources.append(source.model_copy(deep=True))
        new_source_ids.add(source.id)

    incoming_skills = {skill.key: skill for skill in incoming.skills}
    merged_skills = [_refresh_text(skill, incoming_skills.get(skill.key)) for skill in local.skills]
    seen_keys = {skill.key for skill in merged_skills}
    for skill in incoming.skills:
        if skill.source in new_source_ids and skill.key not in seen_keys:
            merged_skills.append(skill.model_copy(deep=True))
            seen_keys.add(skill.key)

    merged_categories = [category.model_copy(deep=True) for category in local.categories]
    category_ids = {category.id for category in merged_categories}
    for category in incoming.categories:
        if category.id not in category_ids:
            merged_categories.append(category.model_copy(deep=True))
            category_ids.add(category.id)

    version = incoming.version
    if is_newer_version(local.version, incoming.version):
        version = local.version

    logger.debug(
        "Merged catalog",
        data={
            "local_version": local.version,
            "incoming_version": incoming.version,
            "new_sources": len(new_source_ids),
            "skills": len(merged_skills),
        },
    )

    return local.model_copy(
        update={
            "version": version,
            "last_updated": max(local.last_updated, incoming.last_updated),
            "sources": merged_sources,
            "skills": merged_skills,
            "categories": merged_categories,
        }
    )


def merge_or_adopt(
    local: CatalogSnapshot | None, incoming: CatalogSnapshot | None
) -> CatalogSnapshot:
    """Merge when both snapshots exist; otherwise adopt whichever one does."""
    if local is None and incoming is None:
        return CatalogSnapshot.empty()
    if local is None:
        return incoming.model_copy(deep=True)  # type: ignore[union-attr]
    if incoming is None:
        return local.model_copy(deep=True)
    return merge_catalogs(local, incoming)
