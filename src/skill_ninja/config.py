"""
Reading settings from environment variables and the skill-ninja.yaml file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skill_ninja.constants import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INSTRUCTION_FILE,
    DEFAULT_SKILLS_DIRECTORY,
    DEFAULT_STORAGE_DIRECTORY,
    MAX_SCAN_RESULTS,
)

CONFIG_FILE_NAMES = ("skill-ninja.yaml", "skill-ninja.yml")

OutputFormatSetting = Literal["auto", "markdown", "cursor-rules", "windsurf-rules", "cline-rules"]


class SkillsSettings(BaseModel):
    """Where installed skills live and how the workspace is scanned."""

    install_directory: str = DEFAULT_SKILLS_DIRECTORY
    """Workspace-relative directory that holds installed skills"""

    include_local_skills: bool = True
    """Include skills authored elsewhere in the workspace in the instruction document"""

    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    """Directory names skipped while scanning for SKILL.md files"""

    max_scan_results: int = MAX_SCAN_RESULTS

    model_config = ConfigDict(extra="ignore")

    @field_validator("install_directory")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/") or DEFAULT_SKILLS_DIRECTORY


class InstructionSettings(BaseModel):
    """Which document the managed section is written to, and in which dialect."""

    output_format: OutputFormatSetting = "auto"
    instruction_file: str = DEFAULT_INSTRUCTION_FILE
    enable_tool_detection: bool = True
    auto_update: bool = True

    model_config = ConfigDict(extra="ignore")


class CatalogSettings(BaseModel):
    """Location of the persisted catalog and the bundled snapshot it is seeded from."""

    storage_directory: str = DEFAULT_STORAGE_DIRECTORY
    bundled_index: str | None = None
    github_token: str | None = None
    """Passed through to the remote fetcher as-is"""

    language: Literal["en", "ja"] = "en"

    model_config = ConfigDict(extra="ignore")

    @property
    def storage_path(self) -> Path:
        return Path(self.storage_directory).expanduser()


class LoggerSettings(BaseModel):
    level: Literal["debug", "info", "warning", "error"] = "warning"
    show_path: bool = False

    model_config = ConfigDict(extra="ignore")


class Settings(BaseSettings):
    """
    Settings class for skill-ninja. Values from the YAML file are passed as
    constructor arguments and win over SKILL_NINJA_* environment variables.
    """

    skills: SkillsSettings = Field(default_factory=SkillsSettings)
    instructions: InstructionSettings = Field(default_factory=InstructionSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    logger: LoggerSettings = Field(default_factory=LoggerSettings)

    _config_file: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="SKILL_NINJA_",
        env_nested_delimiter="__",
        extra="ignore",
    )


# Global settings object
_settings: Settings | None = None


def find_config_file(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` looking for a skill-ninja.yaml file."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def get_settings(config_path: str | Path | None = None) -> Settings:
    """Get settings instance, loading the YAML file on first use."""
    global _settings

    # If we have a specific config path, always reload settings.
    if _settings is not None and config_path is None:
        return _settings

    resolved = Path(config_path) if config_path else find_config_file()
    file_values: dict[str, Any] = {}
    if resolved is not None and resolved.exists():
        file_values = _load_yaml(resolved)

    settings = Settings(**file_values)
    if resolved is not None:
        settings._config_file = str(resolved)
    _settings = settings
    return settings


def reset_settings() -> None:
    global _settings
    _settings = None
