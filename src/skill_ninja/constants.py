"""
Global constants for skill_ninja with minimal dependencies to avoid circular imports.
"""

MARKER_START = "<!-- skill-ninja-START -->"
MARKER_END = "<!-- skill-ninja-END -->"
"""Sentinels delimiting the managed section of an instruction document."""

LEGACY_MARKER_START = "<!-- SKILL-FINDER-START -->"
LEGACY_MARKER_END = "<!-- SKILL-FINDER-END -->"
"""Sentinels written by the previous release; removed on sight."""

SKILL_FILE_NAME = "SKILL.md"
SKILL_META_FILE_NAME = ".skill-meta.json"

DEFAULT_SKILLS_DIRECTORY = ".github/skills"
DEFAULT_INSTRUCTION_FILE = "AGENTS.md"
DEFAULT_STORAGE_DIRECTORY = "~/.skill-ninja"
CATALOG_FILE_NAME = "skill-index.json"

DEFAULT_CATALOG_VERSION = "1.0.0"

DEFAULT_EXCLUDE_PATTERNS = ["node_modules", ".git"]

MAX_SCAN_RESULTS = 100
"""Upper bound on descriptor files enumerated per workspace scan."""

MAX_SEARCH_RESULTS = 100

DESCRIPTION_MAX_LENGTH = 80
"""Installed-skill descriptions taken from SKILL.md are shortened to this length."""

LOCAL_SOURCE_ID = "local"
UNKNOWN_SOURCE_ID = "unknown"

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
