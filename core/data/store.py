"""Snapshot file storage.

The event store itself never touches disk. This is the persistence
collaborator: it writes the store's snapshot as JSON under the home
directory and reads it back on startup.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from core.models.events import Snapshot

logger = logging.getLogger(__name__)


class SnapshotFile:
    """Reads and writes one snapshot JSON file.

    All paths are relative to the home directory (~/.eventindex/).
    """

    def __init__(self, home: Path, filename: str = "snapshot.json") -> None:
        self._home = home
        self._path = home / filename

    @property
    def path(self) -> Path:
        return self._path

    def save(self, snapshot: Snapshot) -> Path:
        """Write the snapshot, replacing the previous file in one rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(snapshot.model_dump_json(indent=2))
        os.replace(tmp, self._path)
        logger.debug("Saved snapshot (%d events) to %s", len(snapshot.events), self._path)
        return self._path

    def load(self) -> dict[str, Any] | None:
        """Return the raw snapshot mapping, or None if missing/unreadable.

        The mapping is handed to EventStore.import_snapshot unvalidated so
        that individual bad entries are skipped rather than failing the
        whole load.
        """
        if not self._path.exists():
            logger.debug("No snapshot at %s", self._path)
            return None
        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read %s", self._path)
            return None
        if not isinstance(data, dict):
            logger.warning("Snapshot at %s is not an object, ignoring", self._path)
            return None
        return data

    def delete(self) -> bool:
        """Delete the snapshot file. Returns True if it existed."""
        if self._path.exists():
            self._path.unlink()
            return True
        return False

    def exists(self) -> bool:
        return self._path.exists()
