"""CLI entry point for slotlink."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from . import __version__


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def _load(args: argparse.Namespace):
    from .config import load_config

    try:
        return load_config(args.config, env_path=args.env)
    except (FileNotFoundError, ValueError) as e:
        print(f"[FAIL] Config: {e}")
        sys.exit(1)


def _build_client(config):
    from .provider.calendly import CalendlyClient

    return CalendlyClient(config.provider, timezone=config.booking.timezone, retry=config.retry)


def cmd_check(args: argparse.Namespace) -> None:
    """Check configuration and the Calendly credential."""
    from .errors import SlotLinkError

    print(f"slotlink v{__version__}: connection check\n")
    config = _load(args)
    print(f"[OK] Config loaded{f' from {args.config}' if args.config else ' from environment'}")

    if not config.provider.has_token:
        print("[FAIL] CALENDLY_TOKEN not set")
        sys.exit(1)
    print("[OK] Calendly token configured")

    try:
        identity = asyncio.run(_build_client(config).fetch_identity())
    except SlotLinkError as e:
        print(f"[FAIL] Calendly: {e}")
        sys.exit(1)
    print(f"[OK] Authenticated as {identity.name} <{identity.email}>")
    print(f"     {identity.uri}")


def cmd_event_types(args: argparse.Namespace) -> None:
    """List the account's active event types."""
    from .errors import SlotLinkError

    config = _load(args)
    client = _build_client(config)

    async def show():
        identity = await client.fetch_identity()
        event_types = await client.list_event_types(identity.uri)
        if not event_types:
            print("No active event types.")
            return
        for et in event_types:
            print(f"  {et.name} ({et.duration} min) slug={et.slug}")
            print(f"    {et.uri}")

    try:
        asyncio.run(show())
    except SlotLinkError as e:
        print(f"[FAIL] {type(e).__name__}: {e}")
        sys.exit(1)


def cmd_slots(args: argparse.Namespace) -> None:
    """Display available slots for one day."""
    from zoneinfo import ZoneInfo

    from .core.booking import SlotLinkOrchestrator
    from .errors import SlotLinkError
    from .window import resolve_day

    config = _load(args)
    client = _build_client(config)
    try:
        day = resolve_day(args.date, ZoneInfo(config.booking.timezone))
    except ValueError:
        print(f"[FAIL] Invalid date: {args.date}")
        sys.exit(2)

    async def show():
        event_type_uri = args.event_type
        if not event_type_uri:
            target = await SlotLinkOrchestrator(client, config.booking).resolve_event_type()
            event_type_uri = target.uri
            print(f"Event type: {target.name} ({target.uri})")
        times = await client.list_available_times(event_type_uri, day)
        if not times:
            print(f"No available slots on {day}.")
            return
        print(f"Available slots on {day}:\n")
        for i, t in enumerate(times, 1):
            print(f"  {i}. {t.start_time}")
        print(f"\nTotal: {len(times)} slots")

    try:
        asyncio.run(show())
    except SlotLinkError as e:
        print(f"[FAIL] {type(e).__name__}: {e}")
        sys.exit(1)


def cmd_link(args: argparse.Namespace) -> None:
    """Create a single-use deep link for one slot."""
    from .core.booking import SlotLinkOrchestrator
    from .errors import SlotLinkError, ValidationError
    from .models import BookingRequest

    config = _load(args)
    try:
        request = BookingRequest.from_payload({
            "date": args.date,
            "time": args.time,
            "invitee": {"name": args.name, "email": args.email},
        })
    except ValidationError as e:
        print(f"[FAIL] {e}")
        sys.exit(2)

    orchestrator = SlotLinkOrchestrator(_build_client(config), config.booking)
    try:
        result = asyncio.run(orchestrator.create_booking_link(request))
    except SlotLinkError as e:
        print(f"[FAIL] {type(e).__name__}: {e}")
        sys.exit(1)
    print(result.booking_url)
    print(f"Expires at {result.expires_at}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP API."""
    import uvicorn

    from .web import create_app

    _setup_logging(args.verbose)
    config = _load(args)
    if args.host:
        config.web.host = args.host
    if args.port:
        config.web.port = args.port
    if not config.provider.has_token:
        logging.getLogger(__name__).warning(
            "CALENDLY_TOKEN not set: booking endpoints will answer 500 until it is configured"
        )

    app = create_app(config)
    uvicorn.run(app, host=config.web.host, port=config.web.port, log_level="info")


def main():
    parser = argparse.ArgumentParser(
        prog="slotlink",
        description="Single-use, slot-pinned Calendly booking links",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("-c", "--config", default=None, help="Config file path (YAML)")
        p.add_argument("--env", default=None, help=".env file path")
        p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # check
    check_parser = subparsers.add_parser("check", help="Check config and Calendly credential")
    add_common(check_parser)

    # event-types
    et_parser = subparsers.add_parser("event-types", help="List active event types")
    add_common(et_parser)

    # slots
    slots_parser = subparsers.add_parser("slots", help="Show available slots for a day")
    add_common(slots_parser)
    slots_parser.add_argument("--date", required=True, help="Day to query (YYYY-MM-DD)")
    slots_parser.add_argument("--event-type", default=None, help="Event type URI (default: auto-select)")

    # link
    link_parser = subparsers.add_parser("link", help="Create a pre-filled single-use booking link")
    add_common(link_parser)
    link_parser.add_argument("--date", required=True, help="Selected day (YYYY-MM-DD)")
    link_parser.add_argument("--time", required=True, help="Slot start (ISO-8601)")
    link_parser.add_argument("--name", required=True, help="Invitee name")
    link_parser.add_argument("--email", required=True, help="Invitee email")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    add_common(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.command != "serve":
        _setup_logging(args.verbose)

    commands = {
        "check": cmd_check,
        "event-types": cmd_event_types,
        "slots": cmd_slots,
        "link": cmd_link,
        "serve": cmd_serve,
    }
    commands[args.command](args)
