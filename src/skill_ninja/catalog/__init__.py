"""Skill catalog: persisted snapshot, merging and search."""

from .merge import is_newer_version, merge_catalogs, merge_or_adopt
from .models import CatalogSnapshot, Category, SkillRecord, SourceRecord, localized_description
from .search import SearchHit, search_skills
from .store import CatalogStore

__all__ = [
    # Models
    "CatalogSnapshot",
    "Category",
    "SkillRecord",
    "SourceRecord",
    "localized_description",
    # Merge
    "is_newer_version",
    "merge_catalogs",
    "merge_or_adopt",
    # Store
    "CatalogStore",
    # Search
    "SearchHit",
    "search_skills",
]
