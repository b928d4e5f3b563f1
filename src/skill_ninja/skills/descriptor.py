"""
Parsing SKILL.md descriptor files.

Only the leading ``---`` metadata block is inspected, and fields are pulled
out line by line so that a block which is not valid YAML still yields
whatever fields can be recognised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from frontmatter.default_handlers import YAMLHandler

from skill_ninja.constants import DESCRIPTION_MAX_LENGTH

_HANDLER = YAMLHandler()

_NAME_PATTERN = re.compile(r"^name:[ \t]*(.+)$", re.MULTILINE)
_DESCRIPTION_DOUBLE = re.compile(r'^description:[ \t]*"([^"]*(?:""[^"]*)*)"', re.MULTILINE)
_DESCRIPTION_SINGLE = re.compile(r"^description:[ \t]*'([^']*(?:''[^']*)*)'", re.MULTILINE)
_DESCRIPTION_PLAIN = re.compile(r"^description:[ \t]*(.+)$", re.MULTILINE)
_CATEGORIES_PATTERN = re.compile(r"^categories:[ \t]*\[([^\]]*)\]", re.MULTILINE)


@dataclass(frozen=True)
class DescriptorMetadata:
    """Fields recovered from a descriptor's metadata block."""

    name: str
    description: str = ""
    categories: list[str] = field(default_factory=list)


def split_metadata_block(text: str) -> tuple[str | None, str]:
    """Return ``(metadata_block, body)``; the block is ``None`` when absent or unterminated."""
    normalized = text.replace("\r\n", "\n")
    if not _HANDLER.detect(normalized):
        return None, normalized
    try:
        block, body = _HANDLER.split(normalized)
    except ValueError:
        return None, normalized
    return block.strip("\n"), body


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1].strip()
    return value.strip("\"'").strip()


def extract_description(block: str) -> str:
    """Description in double quotes, single quotes, or bare on one line."""
    match = _DESCRIPTION_DOUBLE.search(block)
    if match:
        return match.group(1).replace('""', '"').strip()
    match = _DESCRIPTION_SINGLE.search(block)
    if match:
        return match.group(1).replace("''", "'").strip()
    match = _DESCRIPTION_PLAIN.search(block)
    if match:
        value = match.group(1).strip()
        # YAML block scalars (">" / "|") carry the text on following lines
        if value in {">", "|", ">-", "|-"}:
            return ""
        return value
    return ""


def extract_categories(block: str) -> list[str]:
    match = _CATEGORIES_PATTERN.search(block)
    if not match:
        return []
    categories = []
    for raw in match.group(1).split(","):
        value = raw.strip().replace('"', "").replace("'", "")
        if value and value not in categories:
            categories.append(value)
    return categories


def parse_descriptor(text: str, fallback_name: str) -> DescriptorMetadata:
    """
    Parse descriptor text. ``fallback_name`` (the parent directory name) is
    used when there is no metadata block or it has no ``name`` field.
    """
    block, _ = split_metadata_block(text)
    if block is None:
        return DescriptorMetadata(name=fallback_name)

    name = ""
    match = _NAME_PATTERN.search(block)
    if match:
        name = _strip_quotes(match.group(1))

    return DescriptorMetadata(
        name=name or fallback_name,
        description=extract_description(block),
        categories=extract_categories(block),
    )


def directory_name_for(path: str) -> str:
    """Parent directory name of a descriptor path (``skills/foo/SKILL.md`` -> ``foo``)."""
    parent = PurePosixPath(path.replace("\\", "/")).parent.name
    return parent or "Unknown"


def shorten_description(description: str, max_length: int = DESCRIPTION_MAX_LENGTH) -> str:
    """Cut long text at the first sentence end, or hard-cut with an ellipsis."""
    if len(description) <= max_length:
        return description

    period = description.find("。")
    dot = description.find(". ")
    if period != -1 and period < max_length:
        cut = period + 1
    elif dot != -1 and dot < max_length:
        cut = dot + 1
    else:
        cut = max_length

    shortened = description[:cut].strip()
    if cut == max_length:
        shortened += "..."
    return shortened
