import json
from pathlib import Path
from unittest.mock import patch

import pytest

from skill_ninja.catalog.models import CatalogSnapshot, SkillRecord, SourceRecord
from skill_ninja.catalog.store import CatalogStore, read_snapshot
from skill_ninja.config import CatalogSettings
from skill_ninja.core.exceptions import DocumentWriteError


def write_index(path: Path, version: str, sources: list[dict], skills: list[dict]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "version": version,
                "lastUpdated": "2025-01-01",
                "sources": sources,
                "skills": skills,
            },
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path


SOURCE_A = {"id": "a", "name": "A", "url": "https://github.com/org/a", "type": "official"}


def test_load_without_any_file_returns_empty(tmp_path: Path) -> None:
    store = CatalogStore(tmp_path / "skill-index.json")

    snapshot = store.load()

    assert snapshot.version == "1.0.0"
    assert snapshot.sources == []
    assert not store.path.exists()


def test_load_seeds_local_copy_from_bundled(tmp_path: Path) -> None:
    bundled = write_index(tmp_path / "bundled.json", "1.0.0", [SOURCE_A], [])
    store = CatalogStore(tmp_path / "home" / "skill-index.json", bundled_path=bundled)

    snapshot = store.load()

    assert [s.id for s in snapshot.sources] == ["a"]
    assert store.path.is_file()


def test_load_is_cached_until_invalidated(tmp_path: Path) -> None:
    path = write_index(tmp_path / "skill-index.json", "1.0.0", [SOURCE_A], [])
    store = CatalogStore(path)
    first = store.load()

    write_index(path, "1.0.0", [], [])
    assert store.load() is first

    store.invalidate()
    assert store.load().sources == []


def test_save_writes_camel_case_json(tmp_path: Path) -> None:
    store = CatalogStore(tmp_path / "skill-index.json")
    snapshot = CatalogSnapshot(
        version="1.1.0",
        last_updated="2025-02-02",
        sources=[SourceRecord(id="a", name="A", url="https://github.com/org/a")],
        skills=[
            SkillRecord(
                name="pdf",
                source="a",
                raw_url="https://raw.githubusercontent.com/org/a/main/pdf/SKILL.md",
                description_localized="PDF操作",
            )
        ],
    )

    store.save(snapshot)

    text = store.path.read_text(encoding="utf-8")
    data = json.loads(text)
    assert data["lastUpdated"] == "2025-02-02"
    assert data["skills"][0]["rawUrl"].endswith("/SKILL.md")
    assert data["skills"][0]["description_localized"] == "PDF操作"
    assert "PDF操作" in text
    assert text.endswith("\n")
    assert read_snapshot(store.path) == snapshot


def test_legacy_localized_key_and_numeric_version_are_accepted(tmp_path: Path) -> None:
    path = write_index(
        tmp_path / "skill-index.json",
        "1.0.0",
        [dict(SOURCE_A, description_ja="公式")],
        [{"name": "pdf", "source": "a", "description_ja": "PDF操作", "isOrg": True}],
    )
    data = json.loads(path.read_text(encoding="utf-8"))
    data["version"] = 2
    path.write_text(json.dumps(data), encoding="utf-8")

    snapshot = read_snapshot(path)

    assert snapshot.version == "2"
    assert snapshot.sources[0].description_localized == "公式"
    assert snapshot.skills[0].description_localized == "PDF操作"
    assert snapshot.skills[0].is_org is True


def test_corrupt_file_reads_as_missing(tmp_path: Path) -> None:
    path = tmp_path / "skill-index.json"
    path.write_text("{broken", encoding="utf-8")

    assert read_snapshot(path) is None


def test_merge_with_bundled_persists_only_newer_versions(tmp_path: Path) -> None:
    local_path = write_index(
        tmp_path / "skill-index.json",
        "1.0.0",
        [SOURCE_A],
        [{"name": "pdf", "source": "a", "description": "PDF"}],
    )
    bundled = write_index(
        tmp_path / "bundled.json",
        "1.0.0",
        [SOURCE_A],
        [{"name": "pdf", "source": "a", "description": "PDF", "description_localized": "PDF操作"}],
    )
    store = CatalogStore(local_path, bundled_path=bundled)
    before = local_path.read_text(encoding="utf-8")

    merged = store.merge_with_bundled()

    # Backfilled in memory, but the same version is not written
    assert merged.skills[0].description_localized == "PDF操作"
    assert local_path.read_text(encoding="utf-8") == before
    assert store.load() is merged

    write_index(
        bundled,
        "1.1.0",
        [SOURCE_A],
        [{"name": "pdf", "source": "a", "description_localized": "PDF操作"}],
    )
    merged = store.merge_with_bundled()

    persisted = read_snapshot(local_path)
    assert persisted.version == "1.1.0"
    assert persisted.skills[0].description_localized == "PDF操作"
    assert merged == persisted


def test_merge_with_bundled_adopts_when_no_local(tmp_path: Path) -> None:
    bundled = write_index(tmp_path / "bundled.json", "1.0.0", [SOURCE_A], [])
    store = CatalogStore(tmp_path / "skill-index.json", bundled_path=bundled)

    merged = store.merge_with_bundled()

    assert [s.id for s in merged.sources] == ["a"]
    assert store.path.is_file()


def test_failed_save_keeps_previous_catalog(tmp_path: Path) -> None:
    path = write_index(tmp_path / "skill-index.json", "1.0.0", [SOURCE_A], [])
    store = CatalogStore(path)
    before = path.read_text(encoding="utf-8")

    with patch("skill_ninja.catalog.store.os.replace", side_effect=OSError("read-only")):
        with pytest.raises(DocumentWriteError):
            store.save(CatalogSnapshot.empty())

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["skill-index.json"]


def test_from_settings(tmp_path: Path) -> None:
    settings = CatalogSettings(
        storage_directory=str(tmp_path / "store"), bundled_index=str(tmp_path / "b.json")
    )

    store = CatalogStore.from_settings(settings)

    assert store.path == tmp_path / "store" / "skill-index.json"
