"""Render events as JSON or CSV for download/hand-off."""

from __future__ import annotations

import csv
import io
import json
from typing import Iterable, Literal

from core.models.events import Event

ExportFormat = Literal["json", "csv"]

CSV_HEADERS = [
    "ID",
    "Title",
    "Description",
    "Type",
    "Severity",
    "Source",
    "Timestamp",
    "Acknowledged",
]


def export_events(events: Iterable[Event], fmt: ExportFormat = "json") -> str:
    if fmt == "json":
        return json.dumps([e.model_dump(mode="json") for e in events], indent=2)
    if fmt == "csv":
        return _to_csv(events)
    raise ValueError(f"Unsupported export format: {fmt!r}")


def _to_csv(events: Iterable[Event]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for e in events:
        writer.writerow([
            e.id,
            e.title,
            e.description,
            e.type,
            e.severity,
            e.source,
            e.timestamp.isoformat(),
            "true" if e.acknowledged else "false",
        ])
    return buf.getvalue()


def export_filename(fmt: ExportFormat, day: str) -> str:
    """Default download name, e.g. events-2026-10-19.csv."""
    return f"events-{day}.{fmt}"
