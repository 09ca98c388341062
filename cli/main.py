"""eventindex CLI -- the `eventindex` command.

Usage:
    eventindex add --type error --severity high --source db "DB down"
    eventindex list [--type T] [--severity S] [--source SRC]
                    [--acknowledged | --unacknowledged] [--lookback 24h] [--reset]
    eventindex stats              Summary counts over all events
    eventindex ack <id>...        Acknowledge one or more events
    eventindex rm <id>            Remove an event
    eventindex export --format csv
    eventindex clear              Remove every event

Every command restores the saved snapshot first and writes it back after
a mutation.
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone

from core.config import load_config
from core.duration import format_duration
from core.models.events import EVENT_TYPES, SEVERITIES, Event
from eventindex.export import export_events, export_filename
from eventindex.store import EventStore


def _print_events(events: list[Event]) -> None:
    if not events:
        print("  No events.")
        return
    for e in events:
        mark = " " if e.acknowledged else "*"
        stamp = e.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        print(f"  {mark} {stamp}  {e.id}  [{e.type}/{e.severity}] {e.source}: {e.title}")


def _describe_filter(store: EventStore) -> str:
    f = store.filter
    parts = [f"{name}={value}" for name, value in f.selectors().items()]
    parts.append(f"lookback={format_duration(f.lookback)}")
    return ", ".join(parts)


def cmd_add(store: EventStore, args: argparse.Namespace) -> bool:
    """Add a single event."""
    event = store.add_event({
        "type": args.type,
        "severity": args.severity,
        "source": args.source,
        "title": args.title,
        "description": args.description,
        "tags": args.tag or [],
    })
    print(f"  Added {event.id}" if event else "  Event evicted at once by store.max_events")
    return True


def cmd_list(store: EventStore, args: argparse.Namespace) -> bool:
    """Show the visible set, optionally changing the filter first."""
    changed = False
    if args.reset:
        store.clear_filters()
        changed = True

    changes: dict = {}
    for name in ("type", "severity", "source", "lookback"):
        value = getattr(args, name)
        if value is not None:
            changes[name] = None if value == "all" else value
    if args.acknowledged is not None:
        changes["acknowledged"] = args.acknowledged
    if changes:
        store.set_filter(**changes)
        changed = True

    print(f"  Filter: {_describe_filter(store)}")
    _print_events(store.get_filtered_events())
    print(f"\n  {store.get_unacknowledged_count()} unacknowledged of {len(store)}")
    return changed


def cmd_stats(store: EventStore, args: argparse.Namespace) -> bool:
    """Show summary counts."""
    stats = store.stats
    print(f"  Total:          {stats.total}")
    print(f"  Unacknowledged: {stats.unacknowledged}")
    print("  By type:")
    for name in EVENT_TYPES:
        if name in stats.by_type:
            print(f"    {name:<10} {stats.by_type[name]}")
    print("  By severity:")
    for name in SEVERITIES:
        if name in stats.by_severity:
            print(f"    {name:<10} {stats.by_severity[name]}")
    return False


def cmd_ack(store: EventStore, args: argparse.Namespace) -> bool:
    """Acknowledge events."""
    changed = store.acknowledge_events(args.ids)
    print(f"  Acknowledged {len(changed)} event(s)")
    return bool(changed)


def cmd_rm(store: EventStore, args: argparse.Namespace) -> bool:
    """Remove an event."""
    removed = store.remove_event(args.id)
    print(f"  Removed {args.id}" if removed else f"  No event {args.id}")
    return removed is not None


def cmd_export(store: EventStore, args: argparse.Namespace) -> bool:
    """Export the visible set as JSON or CSV."""
    content = export_events(store.get_filtered_events(), args.format)
    if args.output == "-":
        sys.stdout.write(content)
    else:
        output = args.output or export_filename(
            args.format, datetime.now(timezone.utc).strftime("%Y-%m-%d")
        )
        with open(output, "w") as f:
            f.write(content)
        print(f"  Wrote {output}")
    return False


def cmd_clear(store: EventStore, args: argparse.Namespace) -> bool:
    """Remove every event."""
    count = len(store)
    store.clear_all()
    print(f"  Removed {count} event(s)")
    return True


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="eventindex",
        description="eventindex -- indexed operational event store",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--env", type=str, default=None, help="Path to .env file")

    sub = parser.add_subparsers(dest="command")

    # add
    add_parser = sub.add_parser("add", help="Add an event")
    add_parser.add_argument("title", type=str)
    add_parser.add_argument("--type", choices=EVENT_TYPES, default="info")
    add_parser.add_argument("--severity", choices=SEVERITIES, default="low")
    add_parser.add_argument("--source", type=str, required=True)
    add_parser.add_argument("--description", type=str, default="")
    add_parser.add_argument("--tag", action="append", help="Repeatable")

    # list
    list_parser = sub.add_parser("list", help="List events matching the filter")
    list_parser.add_argument("--type", choices=(*EVENT_TYPES, "all"), default=None)
    list_parser.add_argument("--severity", choices=(*SEVERITIES, "all"), default=None)
    list_parser.add_argument("--source", type=str, default=None, help="Source name or 'all'")
    list_parser.add_argument("--lookback", type=str, default=None, help="e.g. 1h, 24h, 7d, or 'all'")
    ack_group = list_parser.add_mutually_exclusive_group()
    ack_group.add_argument("--acknowledged", dest="acknowledged", action="store_true", default=None)
    ack_group.add_argument("--unacknowledged", dest="acknowledged", action="store_false")
    list_parser.add_argument("--reset", action="store_true", help="Clear filters first")

    # stats
    sub.add_parser("stats", help="Show summary counts")

    # ack
    ack_parser = sub.add_parser("ack", help="Acknowledge events")
    ack_parser.add_argument("ids", nargs="+")

    # rm
    rm_parser = sub.add_parser("rm", help="Remove an event")
    rm_parser.add_argument("id")

    # export
    export_parser = sub.add_parser("export", help="Export visible events")
    export_parser.add_argument("--format", choices=("json", "csv"), default="json")
    export_parser.add_argument("--output", "-o", type=str, default=None, help="File path or '-' for stdout")

    # clear
    sub.add_parser("clear", help="Remove every event")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    commands = {
        "add": cmd_add,
        "list": cmd_list,
        "stats": cmd_stats,
        "ack": cmd_ack,
        "rm": cmd_rm,
        "export": cmd_export,
        "clear": cmd_clear,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return

    from main import build_store, save_store, setup_logging

    config = load_config(config_path=args.config, env_path=args.env)
    setup_logging(config.logging.level)

    try:
        store, snapshot_file = build_store(config)
        if handler(store, args):
            save_store(store, snapshot_file)
    except ValueError as e:
        print(f"  Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
