"""
Detecting which AI coding assistants a workspace is set up for.

Detection only looks for configuration fingerprints; it never writes. The
result is advisory input for choosing the instruction document dialect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from skill_ninja.config import get_settings
from skill_ninja.constants import DEFAULT_INSTRUCTION_FILE
from skill_ninja.core.logging.logger import get_logger
from skill_ninja.instructions.dialects import OutputFormat

if TYPE_CHECKING:
    from skill_ninja.config import Settings

logger = get_logger(__name__)

Confidence = Literal["high", "medium", "low"]


class AITool(StrEnum):
    GITHUB_COPILOT = "github-copilot"
    CLAUDE_CODE = "claude-code"
    CURSOR = "cursor"
    WINDSURF = "windsurf"
    CLINE = "cline"


TOOL_DISPLAY_NAMES: dict[AITool, str] = {
    AITool.GITHUB_COPILOT: "GitHub Copilot",
    AITool.CLAUDE_CODE: "Claude Code",
    AITool.CURSOR: "Cursor",
    AITool.WINDSURF: "Windsurf",
    AITool.CLINE: "Cline",
}


@dataclass(frozen=True)
class DetectionRule:
    pattern: str
    """A workspace-relative file, or ``<dir>/**`` for any file below a directory"""
    tool: AITool
    format: OutputFormat
    instruction_file: str
    confidence: Confidence


@dataclass(frozen=True)
class DetectedTool:
    tool: AITool
    config_path: Path
    confidence: Confidence
    suggested_format: OutputFormat
    suggested_instruction_file: str

    @property
    def display_name(self) -> str:
        return TOOL_DISPLAY_NAMES[self.tool]


@dataclass(frozen=True)
class ToolDetectionResult:
    detected_tools: list[DetectedTool] = field(default_factory=list)
    recommended_format: OutputFormat = OutputFormat.MARKDOWN
    recommended_instruction_file: str = DEFAULT_INSTRUCTION_FILE


DETECTION_RULES: tuple[DetectionRule, ...] = (
    DetectionRule(".cursor/rules/**", AITool.CURSOR, OutputFormat.CURSOR_RULES, ".cursor/rules/skills.mdc", "high"),
    DetectionRule(".cursorrules", AITool.CURSOR, OutputFormat.CURSOR_RULES, ".cursor/rules/skills.mdc", "high"),
    DetectionRule(".windsurfrules", AITool.WINDSURF, OutputFormat.WINDSURF_RULES, ".windsurfrules", "high"),
    DetectionRule(".windsurf/**", AITool.WINDSURF, OutputFormat.WINDSURF_RULES, ".windsurfrules", "high"),
    DetectionRule(".clinerules", AITool.CLINE, OutputFormat.CLINE_RULES, ".clinerules", "high"),
    DetectionRule(".cline/**", AITool.CLINE, OutputFormat.CLINE_RULES, ".clinerules", "high"),
    DetectionRule("CLAUDE.md", AITool.CLAUDE_CODE, OutputFormat.MARKDOWN, "CLAUDE.md", "high"),
    DetectionRule(".claude/**", AITool.CLAUDE_CODE, OutputFormat.MARKDOWN, "CLAUDE.md", "medium"),
    DetectionRule(
        ".github/copilot-instructions.md",
        AITool.GITHUB_COPILOT,
        OutputFormat.MARKDOWN,
        ".github/copilot-instructions.md",
        "high",
    ),
    DetectionRule(
        ".github/instructions/**",
        AITool.GITHUB_COPILOT,
        OutputFormat.MARKDOWN,
        ".github/instructions/SkillList.instructions.md",
        "high",
    ),
    DetectionRule("AGENTS.md", AITool.GITHUB_COPILOT, OutputFormat.MARKDOWN, "AGENTS.md", "medium"),
)

# Most editor-specific first, most generic last
PRIORITY_ORDER: tuple[AITool, ...] = (
    AITool.CURSOR,
    AITool.WINDSURF,
    AITool.CLINE,
    AITool.CLAUDE_CODE,
    AITool.GITHUB_COPILOT,
)


def find_first_match(root: Path, pattern: str) -> Path | None:
    """First file matching ``pattern`` below ``root``; stops at the first hit."""
    if pattern.endswith("/**"):
        base = root / pattern[: -len("/**")]
        if not base.is_dir():
            return None
        for candidate in base.rglob("*"):
            if candidate.is_file():
                return candidate
        return None
    candidate = root / pattern
    return candidate if candidate.is_file() else None


def detect_ai_tools(
    root: Path, rules: tuple[DetectionRule, ...] = DETECTION_RULES
) -> ToolDetectionResult:
    detected: list[DetectedTool] = []
    seen: set[AITool] = set()

    for rule in rules:
        if rule.tool in seen:
            continue
        match = find_first_match(root, rule.pattern)
        if match is None:
            continue
        seen.add(rule.tool)
        detected.append(
            DetectedTool(
                tool=rule.tool,
                config_path=match,
                confidence=rule.confidence,
                suggested_format=rule.format,
                suggested_instruction_file=rule.instruction_file,
            )
        )

    by_tool = {tool.tool: tool for tool in detected}
    for tool in PRIORITY_ORDER:
        if tool in by_tool:
            recommended = by_tool[tool]
            return ToolDetectionResult(
                detected_tools=detected,
                recommended_format=recommended.suggested_format,
                recommended_instruction_file=recommended.suggested_instruction_file,
            )

    return ToolDetectionResult(detected_tools=detected)


def resolve_output_format(
    root: Path, settings: "Settings | None" = None
) -> tuple[OutputFormat, str]:
    """
    The dialect and document path to synchronize.

    An explicit ``output_format`` setting wins. With ``auto``, the detector's
    recommendation is used when it found something and detection is enabled;
    otherwise markdown and the configured instruction file.
    """
    instructions = (settings or get_settings()).instructions

    if instructions.output_format != "auto":
        return OutputFormat(instructions.output_format), instructions.instruction_file

    if instructions.enable_tool_detection:
        result = detect_ai_tools(root)
        if result.detected_tools:
            logger.debug(
                "Resolved output format from detected tools",
                data={
                    "tools": ",".join(tool.tool.value for tool in result.detected_tools),
                    "format": result.recommended_format.value,
                },
            )
            return result.recommended_format, result.recommended_instruction_file

    return OutputFormat.MARKDOWN, instructions.instruction_file
