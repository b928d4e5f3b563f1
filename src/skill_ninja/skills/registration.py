"""
Detecting which workspace skills are already referenced by the instruction document.

Only text inside the managed section counts. A reference is a plain
substring match of the skill's relative path, its ``./`` variant or its
bare name, so a short name that happens to appear in unrelated text inside
the section is reported as registered. Paths written by the renderers are
always found.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from skill_ninja.instructions.document import locate_section

if TYPE_CHECKING:
    from skill_ninja.skills.scanner import LocalSkillDescriptor


def extract_managed_section(content: str) -> str | None:
    """Text from the start marker through the end marker, or ``None`` without both."""
    bounds = locate_section(content)
    if bounds is None:
        return None
    start, end = bounds
    return content[start:end]


def reference_patterns(descriptor: "LocalSkillDescriptor") -> list[str]:
    return [descriptor.relative_path, f"./{descriptor.relative_path}", descriptor.name]


def detect_registrations(
    descriptors: Iterable["LocalSkillDescriptor"],
    content: str | None,
    registration_file: str,
) -> None:
    """Set ``is_registered``/``registration_file`` on each descriptor in place."""
    if not content:
        return
    section = extract_managed_section(content)
    if section is None:
        return

    for descriptor in descriptors:
        for pattern in reference_patterns(descriptor):
            if pattern and pattern in section:
                descriptor.is_registered = True
                descriptor.registration_file = registration_file
                break
