"""eventindex wiring -- builds a store from config and restores its snapshot.

Usage:
    python main.py list --source db
    python main.py --config /path/to/config.yaml stats
"""

from __future__ import annotations

import logging

from core.config import AppConfig
from core.data.store import SnapshotFile
from eventindex.store import EventStore

logger = logging.getLogger("eventindex")


def setup_logging(level: str) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_store(config: AppConfig) -> tuple[EventStore, SnapshotFile]:
    """Create a store from config and restore the last saved snapshot."""
    store = EventStore(
        default_filter=config.store.default_filter(),
        snapshot_limit=config.store.snapshot_limit,
        max_events=config.store.max_events,
    )
    snapshot_file = SnapshotFile(config.home_path, config.store.snapshot_file)

    data = snapshot_file.load()
    if data is not None:
        store.import_snapshot(data)
        logger.info("Restored %d event(s) from %s", len(store), snapshot_file.path)
    return store, snapshot_file


def save_store(store: EventStore, snapshot_file: SnapshotFile) -> None:
    """Persist the store's bounded snapshot."""
    path = snapshot_file.save(store.export())
    logger.debug("Snapshot written to %s", path)


if __name__ == "__main__":
    from cli.main import main
    main()
