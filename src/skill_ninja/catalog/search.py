"""Keyword search over the catalog."""

from __future__ import annotations

from dataclasses import dataclass

from skill_ninja.catalog.models import CatalogSnapshot, SkillRecord
from skill_ninja.constants import MAX_SEARCH_RESULTS

SOURCE_TYPE_PRIORITY: dict[str, int] = {
    "official": 0,
    "awesome-list": 1,
    "community": 2,
}
_OTHER_SOURCE_PRIORITY = len(SOURCE_TYPE_PRIORITY)


@dataclass(frozen=True)
class SearchHit:
    skill: SkillRecord
    score: int


def score_skill(skill: SkillRecord, keywords: list[str]) -> int:
    """Sum of per-keyword scores; each keyword counts its best name match once."""
    name = skill.name.lower()
    description = skill.description.lower()
    localized = (skill.description_localized or "").lower()
    categories = [category.lower() for category in skill.categories]
    source = skill.source.lower()

    score = 0
    for keyword in keywords:
        if name == keyword:
            score += 100
        elif name.startswith(keyword):
            score += 50
        elif keyword in name:
            score += 30

        if any(keyword in category for category in categories):
            score += 20
        if keyword in description or keyword in localized:
            score += 10
        if keyword in source:
            score += 5
    return score


def search_skills(
    snapshot: CatalogSnapshot,
    query: str,
    limit: int = MAX_SEARCH_RESULTS,
) -> list[SearchHit]:
    """
    Rank catalog skills against whitespace-separated keywords.

    Skills from higher-priority source types come first, then higher scores,
    then names alphabetically. An empty query lists everything in that order.
    """
    source_types = {source.id: source.type for source in snapshot.sources}
    keywords = [word for word in query.lower().split() if word]

    hits: list[SearchHit] = []
    for skill in snapshot.skills:
        score = score_skill(skill, keywords) if keywords else 0
        if keywords and score == 0:
            continue
        hits.append(SearchHit(skill=skill, score=score))

    def sort_key(hit: SearchHit) -> tuple[int, int, str]:
        priority = SOURCE_TYPE_PRIORITY.get(
            source_types.get(hit.skill.source, ""), _OTHER_SOURCE_PRIORITY
        )
        return (priority, -hit.score, hit.skill.name.lower())

    hits.sort(key=sort_key)
    return hits[:limit]
