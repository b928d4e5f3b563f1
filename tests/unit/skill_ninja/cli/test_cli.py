from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

import httpx
import pytest
from click.utils import strip_ansi
from typer.testing import CliRunner

import skill_ninja.cli.main as cli_main
from skill_ninja.catalog.github import GitHubFetcher
from skill_ninja.catalog.models import CatalogSnapshot, SkillRecord, SourceRecord
from skill_ninja.catalog.store import CatalogStore, read_snapshot
from skill_ninja.cli.main import app
from skill_ninja.config import get_settings
from skill_ninja.constants import MARKER_START

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


def write_skill(directory: Path, name: str, description: str = "desc") -> Path:
    skill_dir = directory / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {name}\ndescription: {description}\n---\nBody\n",
        encoding="utf-8",
    )
    return skill_dir


def seed_catalog() -> CatalogStore:
    store = CatalogStore.from_settings(get_settings().catalog)
    store.save(
        CatalogSnapshot(
            version="1.2.0",
            sources=[
                SourceRecord(
                    id="anthropic-skills",
                    name="skills",
                    url="https://github.com/anthropic/skills",
                    type="official",
                ),
            ],
            skills=[
                SkillRecord(name="pdf", source="anthropic-skills", description="PDF files"),
                SkillRecord(name="docx", source="anthropic-skills", description="Word"),
            ],
        )
    )
    return store


def test_sync_writes_instruction_document(tmp_path: Path) -> None:
    write_skill(tmp_path / ".github" / "skills", "pdf", "PDF files")

    result = runner.invoke(app, ["sync", "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "Updated" in strip_ansi(result.stdout)
    content = (tmp_path / "AGENTS.md").read_text(encoding="utf-8")
    assert MARKER_START in content
    assert "| [pdf](.github/skills/pdf/SKILL.md) | PDF files |" in content

    again = runner.invoke(app, ["sync", "--root", str(tmp_path)])
    assert "Up to date" in strip_ansi(again.stdout)


def test_sync_remove(tmp_path: Path) -> None:
    runner.invoke(app, ["sync", "--root", str(tmp_path)])

    result = runner.invoke(app, ["sync", "--root", str(tmp_path), "--remove"])

    assert result.exit_code == 0
    assert MARKER_START not in (tmp_path / "AGENTS.md").read_text(encoding="utf-8")


def test_scan_lists_workspace_skills(tmp_path: Path) -> None:
    write_skill(tmp_path / "tools", "lint")
    write_skill(tmp_path / ".github" / "skills", "pdf")

    default = runner.invoke(app, ["scan", "--root", str(tmp_path)])
    everything = runner.invoke(app, ["scan", "--root", str(tmp_path), "--all"])

    assert default.exit_code == 0
    assert "lint" in default.stdout
    assert "pdf" not in default.stdout
    assert "pdf" in everything.stdout


def test_detect(tmp_path: Path) -> None:
    (tmp_path / ".windsurfrules").write_text("", encoding="utf-8")

    result = runner.invoke(app, ["detect", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "Windsurf" in result.stdout
    assert "windsurf-rules" in result.stdout


def test_catalog_show_and_search() -> None:
    seed_catalog()

    shown = runner.invoke(app, ["catalog", "show"])
    found = runner.invoke(app, ["catalog", "search", "pdf"])

    assert shown.exit_code == 0
    assert "anthropic-skills" in shown.stdout
    assert "1.2.0" in shown.stdout
    assert found.exit_code == 0
    assert "pdf" in found.stdout
    assert "docx" not in found.stdout


def test_catalog_remove() -> None:
    store = seed_catalog()

    result = runner.invoke(app, ["catalog", "remove", "anthropic-skills"])
    missing = runner.invoke(app, ["catalog", "remove", "anthropic-skills"])

    assert result.exit_code == 0
    assert "2 skill(s)" in result.stdout
    assert read_snapshot(store.path).sources == []
    assert missing.exit_code == 1


def test_catalog_merge_requires_bundled_index() -> None:
    result = runner.invoke(app, ["catalog", "merge"])

    assert result.exit_code == 1


def test_when_to_use_sets_override_and_syncs(tmp_path: Path) -> None:
    skill_dir = write_skill(tmp_path / ".github" / "skills", "pdf", "PDF files")

    result = runner.invoke(app, ["when-to-use", "pdf", "Filling forms", "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    meta = json.loads((skill_dir / ".skill-meta.json").read_text(encoding="utf-8"))
    assert meta["customWhenToUse"] == "Filling forms"
    content = (tmp_path / "AGENTS.md").read_text(encoding="utf-8")
    assert "| [pdf](.github/skills/pdf/SKILL.md) | Filling forms |" in content

    shown = runner.invoke(app, ["when-to-use", "pdf", "--root", str(tmp_path)])
    assert "Filling forms" in shown.stdout


def test_when_to_use_unknown_skill(tmp_path: Path) -> None:
    result = runner.invoke(app, ["when-to-use", "ghost", "--root", str(tmp_path)])

    assert result.exit_code == 1


def serve_pdf_skill(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/repos/anthropic/skills":
        return httpx.Response(200, json={"default_branch": "main"})
    if request.url.host == "api.github.com":
        return httpx.Response(200, json={"tree": [{"path": "pdf/SKILL.md", "type": "blob"}]})
    if request.url.path == "/anthropic/skills/main/pdf/SKILL.md":
        return httpx.Response(200, text="---\nname: pdf\ndescription: Fill PDF forms\n---\n")
    return httpx.Response(404)


@pytest.fixture
def mock_fetcher(monkeypatch: pytest.MonkeyPatch) -> None:
    fetcher = GitHubFetcher(transport=httpx.MockTransport(serve_pdf_skill))
    monkeypatch.setattr(cli_main, "_fetcher", lambda settings: fetcher)


def test_install_and_uninstall(tmp_path: Path, mock_fetcher: None) -> None:
    store = seed_catalog()
    snapshot = store.load()
    skills = [skill.model_copy(update={"path": skill.name}) for skill in snapshot.skills]
    store.save(snapshot.model_copy(update={"skills": skills}))

    result = runner.invoke(app, ["install", "PDF", "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    skill_md = tmp_path / ".github" / "skills" / "pdf" / "SKILL.md"
    assert "Fill PDF forms" in skill_md.read_text(encoding="utf-8")
    content = (tmp_path / "AGENTS.md").read_text(encoding="utf-8")
    assert "| [pdf](.github/skills/pdf/SKILL.md) | Fill PDF forms |" in content

    again = runner.invoke(app, ["install", "pdf", "--root", str(tmp_path)])
    assert again.exit_code == 1
    assert "--force" in again.output

    removed = runner.invoke(app, ["uninstall", "pdf", "--root", str(tmp_path)])
    assert removed.exit_code == 0, removed.output
    assert not skill_md.parent.exists()
    assert "[pdf]" not in (tmp_path / "AGENTS.md").read_text(encoding="utf-8")


def test_install_unknown_or_ambiguous_skill(tmp_path: Path, mock_fetcher: None) -> None:
    store = seed_catalog()
    snapshot = store.load()
    store.save(
        snapshot.model_copy(
            update={
                "skills": [
                    *snapshot.skills,
                    SkillRecord(name="pdf", source="someone-else", description="Other"),
                ]
            }
        )
    )

    missing = runner.invoke(app, ["install", "ghost", "--root", str(tmp_path)])
    ambiguous = runner.invoke(app, ["install", "pdf", "--root", str(tmp_path)])

    assert missing.exit_code == 1
    assert ambiguous.exit_code == 1
    assert "--source" in ambiguous.output


def test_uninstall_unknown_skill(tmp_path: Path) -> None:
    result = runner.invoke(app, ["uninstall", "ghost", "--root", str(tmp_path)])

    assert result.exit_code == 1


def test_catalog_show_reports_write_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    bundled = tmp_path / "bundled.json"
    bundled.write_text(json.dumps({"version": "1.0.0", "sources": [], "skills": []}), "utf-8")
    monkeypatch.setenv("SKILL_NINJA_CATALOG__BUNDLED_INDEX", str(bundled))

    with patch("skill_ninja.catalog.store.os.replace", side_effect=OSError("disk full")):
        result = runner.invoke(app, ["catalog", "show"])

    assert result.exit_code == 1
    assert "Failed to write" in result.output
    assert not isinstance(result.exception, OSError)
