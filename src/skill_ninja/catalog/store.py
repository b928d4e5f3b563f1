"""
Persisted catalog handle.

A ``CatalogStore`` owns one catalog file. It loads lazily, keeps the result
until ``invalidate()`` is called and always writes whole files, so a failed
write leaves the previous catalog in place.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from skill_ninja.catalog.merge import is_newer_version, merge_or_adopt
from skill_ninja.catalog.models import CatalogSnapshot
from skill_ninja.constants import CATALOG_FILE_NAME
from skill_ninja.core.exceptions import DocumentWriteError
from skill_ninja.core.logging.logger import get_logger

if TYPE_CHECKING:
    from skill_ninja.config import CatalogSettings

logger = get_logger(__name__)


def read_snapshot(path: Path) -> CatalogSnapshot | None:
    """Read a catalog file. Missing or unreadable files yield ``None``."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return CatalogSnapshot.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.warning(
            "Failed to read catalog file",
            data={"path": str(path), "error": str(exc)},
        )
        return None


def write_text_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` in one step."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise DocumentWriteError(f"Failed to write {path}", str(exc)) from exc


class CatalogStore:
    """Explicitly owned replacement for a process-wide catalog cache."""

    def __init__(self, path: Path, *, bundled_path: Path | None = None) -> None:
        self._path = path
        self._bundled_path = bundled_path
        self._cached: CatalogSnapshot | None = None

    @classmethod
    def from_settings(cls, settings: "CatalogSettings") -> "CatalogStore":
        bundled = Path(settings.bundled_index).expanduser() if settings.bundled_index else None
        return cls(settings.storage_path / CATALOG_FILE_NAME, bundled_path=bundled)

    @property
    def path(self) -> Path:
        return self._path

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next ``load()`` reads from disk."""
        self._cached = None

    def load(self) -> CatalogSnapshot:
        """
        Return the catalog, reading it on a cache miss.

        Order: local file, then the bundled snapshot (copied to the local
        path), then an empty catalog.
        """
        if self._cached is not None:
            return self._cached

        snapshot = read_snapshot(self._path)
        if snapshot is None:
            bundled = self._read_bundled()
            if bundled is not None:
                self.save(bundled)
                return bundled
            logger.info("No skill index found, using empty index", data={"path": str(self._path)})
            snapshot = CatalogSnapshot.empty()

        self._cached = snapshot
        return snapshot

    def save(self, snapshot: CatalogSnapshot) -> None:
        content = json.dumps(snapshot.to_json_dict(), indent=2, ensure_ascii=False) + "\n"
        write_text_atomic(self._path, content)
        self._cached = snapshot

    def merge_with_bundled(self) -> CatalogSnapshot:
        """
        Fold the bundled snapshot into the local one.

        The merged value is always returned so localized text is backfilled,
        but it is only persisted when the bundled version is strictly newer.
        """
        local = read_snapshot(self._path)
        bundled = self._read_bundled()
        merged = merge_or_adopt(local, bundled)

        if local is None:
            if bundled is not None:
                self.save(merged)
            else:
                self._cached = merged
            return merged

        if bundled is not None and is_newer_version(bundled.version, local.version):
            logger.info(
                "Bundled catalog is newer, persisting merge",
                data={"local": local.version, "bundled": bundled.version},
            )
            self.save(merged)
        else:
            self._cached = merged
        return merged

    def _read_bundled(self) -> CatalogSnapshot | None:
        if self._bundled_path is None:
            return None
        return read_snapshot(self._bundled_path)
