"""
Instruction document rendering and synchronization.

The manager is resolved lazily because it depends on the skills package,
which itself imports the document helpers from here.
"""

from .dialects import OutputFormat, RenderableSkill
from .document import ManagedDocument, remove_managed_section, synchronize


def __getattr__(name: str):
    if name in ("SyncResult", "remove_skill_section", "update_instruction_file"):
        from . import manager

        return getattr(manager, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ManagedDocument",
    "OutputFormat",
    "RenderableSkill",
    "SyncResult",
    "remove_managed_section",
    "remove_skill_section",
    "synchronize",
    "update_instruction_file",
]
