from skill_ninja.catalog.models import CatalogSnapshot, SkillRecord, SourceRecord
from skill_ninja.catalog.search import score_skill, search_skills


def _catalog() -> CatalogSnapshot:
    return CatalogSnapshot(
        sources=[
            SourceRecord(
                id="community-hub", name="Hub", url="https://github.com/x/hub", type="community"
            ),
            SourceRecord(
                id="anthropic", name="Official", url="https://github.com/x/o", type="official"
            ),
            SourceRecord(id="mine", name="Mine", url="https://github.com/me/mine"),
        ],
        skills=[
            SkillRecord(name="pdf", source="community-hub", description="Read PDF files"),
            SkillRecord(name="pdf-forms", source="anthropic", description="Fill forms"),
            SkillRecord(name="docx", source="anthropic", description="Word documents"),
            SkillRecord(
                name="excel",
                source="mine",
                categories=["spreadsheets"],
                description_localized="表計算",
            ),
        ],
    )


def test_score_components() -> None:
    skill = SkillRecord(
        name="pdf", source="docs-hub", categories=["documents"], description="pdf and docs"
    )

    assert score_skill(skill, ["pdf"]) == 100 + 10
    assert score_skill(skill, ["pd"]) == 50 + 10
    assert score_skill(skill, ["df"]) == 30 + 10
    assert score_skill(skill, ["doc"]) == 20 + 10 + 5
    assert score_skill(skill, ["pdf", "doc"]) == 110 + 35


def test_search_orders_by_source_priority_then_score() -> None:
    hits = search_skills(_catalog(), "pdf")

    assert [hit.skill.name for hit in hits] == ["pdf-forms", "pdf"]
    assert [hit.score for hit in hits] == [50, 110]


def test_search_matches_localized_description_and_category() -> None:
    catalog = _catalog()

    assert [hit.skill.name for hit in search_skills(catalog, "表計算")] == ["excel"]
    assert [hit.skill.name for hit in search_skills(catalog, "SPREAD")] == ["excel"]


def test_search_without_match_is_empty() -> None:
    assert search_skills(_catalog(), "nothing-like-this") == []


def test_empty_query_lists_everything_in_priority_order() -> None:
    hits = search_skills(_catalog(), "   ")

    assert [hit.skill.name for hit in hits] == ["docx", "pdf-forms", "pdf", "excel"]


def test_search_limit() -> None:
    assert len(search_skills(_catalog(), "", limit=2)) == 2
