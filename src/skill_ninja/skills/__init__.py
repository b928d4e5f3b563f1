"""Workspace skill discovery and installed-skill metadata."""

from .descriptor import DescriptorMetadata, parse_descriptor
from .installed import (
    InstalledSkill,
    InstalledSkillMeta,
    list_installed_skills,
    set_custom_when_to_use,
)
from .scanner import LocalSkillDescriptor, scan_local_skills

__all__ = [
    "DescriptorMetadata",
    "parse_descriptor",
    "InstalledSkill",
    "InstalledSkillMeta",
    "list_installed_skills",
    "set_custom_when_to_use",
    "LocalSkillDescriptor",
    "scan_local_skills",
]
