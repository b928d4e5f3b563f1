"""AI assistant detection."""

from .detector import AITool, DetectedTool, ToolDetectionResult, detect_ai_tools, resolve_output_format

__all__ = [
    "AITool",
    "DetectedTool",
    "ToolDetectionResult",
    "detect_ai_tools",
    "resolve_output_format",
]
