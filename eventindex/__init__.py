"""Indexed in-memory event store."""

from eventindex.store import EventStore

__all__ = ["EventStore"]
