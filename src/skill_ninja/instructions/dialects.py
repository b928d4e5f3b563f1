"""
Rendering the managed section in each supported document dialect.

Every dialect is a ``Dialect`` descriptor (heading, empty-state text, per
skill template) fed through one ``render_section`` function. All templates
emit the literal ``<path>/SKILL.md`` so the registration scan always finds
what was rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Sequence

from skill_ninja.constants import MARKER_END, MARKER_START, SKILL_FILE_NAME


class OutputFormat(StrEnum):
    MARKDOWN = "markdown"
    CURSOR_RULES = "cursor-rules"
    WINDSURF_RULES = "windsurf-rules"
    CLINE_RULES = "cline-rules"


@dataclass(frozen=True)
class RenderableSkill:
    """One reconciled skill as the renderers see it."""

    name: str
    path: str
    """Workspace-relative skill directory"""
    text: str = ""

    @property
    def skill_file(self) -> str:
        return f"{self.path.rstrip('/')}/{SKILL_FILE_NAME}"


@dataclass(frozen=True)
class Dialect:
    format: OutputFormat
    header: str
    empty: str
    entry: str
    """Template with ``{name}``, ``{file}`` and ``{text}`` placeholders"""
    entry_without_text: str
    entry_separator: str = "\n"
    header_gap: str = "\n\n"
    """Text between the header and the first entry"""
    escape_pipes: bool = False


_EMPTY_HINT = "Run `skill-ninja catalog search` to find skills to install."

DIALECTS: dict[OutputFormat, Dialect] = {
    OutputFormat.MARKDOWN: Dialect(
        format=OutputFormat.MARKDOWN,
        header=(
            "## Agent Skills\n"
            "\n"
            "The following skills are available in this workspace. "
            "Read a skill's SKILL.md before using it.\n"
            "\n"
            "| Skill | When to use |\n"
            "| ----- | ----------- |"
        ),
        empty=f"## Agent Skills\n\nNo skills installed yet. {_EMPTY_HINT}",
        entry="| [{name}]({file}) | {text} |",
        entry_without_text="| [{name}]({file}) |  |",
        header_gap="\n",
        escape_pipes=True,
    ),
    OutputFormat.CURSOR_RULES: Dialect(
        format=OutputFormat.CURSOR_RULES,
        header=(
            "## Agent Skills\n"
            "\n"
            "When a task matches one of these skills, read the referenced file first:"
        ),
        empty=f"## Agent Skills\n\nNo skills installed yet. {_EMPTY_HINT}",
        entry="@{file} - {text}",
        entry_without_text="@{file}",
    ),
    OutputFormat.WINDSURF_RULES: Dialect(
        format=OutputFormat.WINDSURF_RULES,
        header=(
            "# Agent Skills\n"
            "\n"
            "Before working on a matching task, read the skill's instructions."
        ),
        empty=f"# Agent Skills\n\nNo skills installed yet. {_EMPTY_HINT}",
        entry="### {name}\n{text}\nRead: {file}",
        entry_without_text="### {name}\nRead: {file}",
        entry_separator="\n\n",
    ),
    OutputFormat.CLINE_RULES: Dialect(
        format=OutputFormat.CLINE_RULES,
        header=(
            "# Agent Skills\n"
            "\n"
            "Use these skills when relevant. Open the file listed for each skill before using it."
        ),
        empty=f"# Agent Skills\n\nNo skills installed yet. {_EMPTY_HINT}",
        entry="- **{name}**: {text}\n  File: {file}",
        entry_without_text="- **{name}**\n  File: {file}",
    ),
}


def get_dialect(output_format: OutputFormat | str) -> Dialect:
    try:
        return DIALECTS[OutputFormat(output_format)]
    except ValueError as exc:
        supported = ", ".join(fmt.value for fmt in OutputFormat)
        raise ValueError(
            f"Unsupported output format '{output_format}'. Supported: {supported}"
        ) from exc


def _single_line(text: str) -> str:
    return " ".join(text.split())


def render_entry(skill: RenderableSkill, dialect: Dialect) -> str:
    text = _single_line(skill.text)
    name = skill.name
    if dialect.escape_pipes:
        text = text.replace("|", "\\|")
        name = name.replace("|", "\\|")
    template = dialect.entry if text else dialect.entry_without_text
    return template.format(name=name, file=skill.skill_file, text=text)


def render_section(skills: Sequence[RenderableSkill], output_format: OutputFormat | str) -> str:
    """Managed section text, markers included, without a trailing newline."""
    dialect = get_dialect(output_format)
    if not skills:
        body = dialect.empty
    else:
        entries = dialect.entry_separator.join(render_entry(skill, dialect) for skill in skills)
        body = f"{dialect.header}{dialect.header_gap}{entries}"
    return f"{MARKER_START}\n{body}\n\n{MARKER_END}"
