"""
Splicing the managed section into an instruction document.

A document is modelled as three segments: the user-owned prefix, the
managed section (markers included) and the user-owned suffix. Updates only
ever replace the middle segment; prefix and suffix are carried through
byte for byte.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from skill_ninja.constants import (
    LEGACY_MARKER_END,
    LEGACY_MARKER_START,
    MARKER_END,
    MARKER_START,
)
from skill_ninja.instructions.dialects import OutputFormat, RenderableSkill, render_section


def locate_section(
    content: str,
    start_marker: str = MARKER_START,
    end_marker: str = MARKER_END,
) -> tuple[int, int] | None:
    """
    ``(start, end)`` slice bounds covering both markers, or ``None``.

    Each end marker is paired with the closest start marker before it, so a
    stray start marker earlier in the document never swallows user text.
    """
    end = content.find(end_marker)
    while end != -1:
        start = content.rfind(start_marker, 0, end)
        if start != -1:
            return start, end + len(end_marker)
        end = content.find(end_marker, end + len(end_marker))
    return None


def strip_markers(content: str, *markers: str) -> str:
    for marker in markers:
        content = content.replace(marker, "")
    return content


@dataclass(frozen=True)
class ManagedDocument:
    prefix: str
    section: str | None
    suffix: str

    @classmethod
    def parse(cls, content: str) -> "ManagedDocument":
        bounds = locate_section(content)
        if bounds is None:
            return cls(prefix=content, section=None, suffix="")
        start, end = bounds
        return cls(prefix=content[:start], section=content[start:end], suffix=content[end:])

    @property
    def has_section(self) -> bool:
        return self.section is not None

    def with_section(self, section: str) -> str:
        """Document text with the managed section replaced, or appended when absent."""
        if self.section is not None:
            return f"{self.prefix}{section}{self.suffix}"
        # Unpaired markers would pair with the appended section next time
        prefix = strip_markers(self.prefix, MARKER_START, MARKER_END)
        if prefix.strip():
            return f"{prefix.rstrip()}\n\n{section}\n"
        return f"{section}\n"

    def without_section(self) -> str:
        if self.section is None:
            return self.prefix
        return _join_around_gap(self.prefix, self.suffix).strip()


def _join_around_gap(before: str, after: str) -> str:
    """Join two segments left after an excision with exactly one blank line."""
    head = before.rstrip("\n")
    tail = after.lstrip("\n")
    if head and tail:
        return f"{head}\n\n{tail}"
    if head:
        return f"{head}\n"
    return tail


def migrate_legacy_markers(content: str) -> str:
    """Remove every block delimited by the previous release's markers."""
    while True:
        bounds = locate_section(content, LEGACY_MARKER_START, LEGACY_MARKER_END)
        if bounds is None:
            break
        start, end = bounds
        content = _join_around_gap(content[:start], content[end:])

    # Orphaned markers would otherwise survive forever
    return strip_markers(content, LEGACY_MARKER_START, LEGACY_MARKER_END)


def synchronize(
    existing_content: str,
    skills: Sequence[RenderableSkill],
    output_format: OutputFormat | str,
) -> str:
    """
    Return ``existing_content`` with the managed section rendered for ``skills``.

    Legacy blocks are removed first, even when nothing is installed. Calling
    this again on its own output with the same skills returns it unchanged.
    """
    migrated = migrate_legacy_markers(existing_content)
    section = render_section(skills, output_format)
    return ManagedDocument.parse(migrated).with_section(section)


def remove_managed_section(content: str) -> str:
    return ManagedDocument.parse(content).without_section()
