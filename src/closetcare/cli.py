"""``closetcare`` command line.

Each subcommand maps onto one client operation.  Commands that touch
items first restore the cached session; run ``closetcare login`` once and
the token is reused until it expires.  Any :class:`ClosetcareError` is
printed as ``error: <message>`` and the process exits with status 1.
"""

from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path
from typing import Any

from closetcare.client import ClosetcareClient
from closetcare.config import ClosetcareConfig
from closetcare.errors import ClosetcareAuthError, ClosetcareError
from closetcare.models import ClothingItem, ItemsByType
from closetcare.observability import set_level
from closetcare.schedule import (
    DEFAULT_INTERVAL_DAYS,
    describe_status,
    format_date,
    interval_days,
    item_status,
)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a whole number: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="closetcare",
        description="Track clothing items and when they need cleaning.",
    )
    parser.add_argument("--api-url", help="Backend base URL (env: CLOSETCARE_API_URL)")
    parser.add_argument("--session-file", help="Token cache file (env: CLOSETCARE_SESSION_FILE)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests to stderr")
    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    p = sub.add_parser("login", help="Log in and cache the token")
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted for when omitted")

    p = sub.add_parser("signup", help="Create an account")
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted for when omitted")

    sub.add_parser("logout", help="Forget the cached token")
    sub.add_parser("whoami", help="Show the logged-in user")

    p = sub.add_parser("list", help="List items grouped by type")
    p.add_argument("--archived", action="store_true", help="List archived items instead")

    p = sub.add_parser("type", help="List the items of one type")
    p.add_argument("item_type", metavar="TYPE")

    p = sub.add_parser("show", help="Show one item")
    p.add_argument("item_id", metavar="ID")

    p = sub.add_parser("add", help="Add an item, optionally with a photo")
    p.add_argument("--name", required=True)
    p.add_argument("--type", dest="item_type", required=True)
    p.add_argument(
        "--interval-days", type=_positive_int, default=DEFAULT_INTERVAL_DAYS,
        help=f"Days between cleanings (default {DEFAULT_INTERVAL_DAYS})",
    )
    p.add_argument("--image", type=Path, help="Photo to upload")

    p = sub.add_parser("set-interval", help="Change one item's cleaning interval")
    p.add_argument("item_id", metavar="ID")
    p.add_argument("days", type=_positive_int, metavar="DAYS")

    p = sub.add_parser("set-type-interval", help="Change the interval of every item of a type")
    p.add_argument("item_type", metavar="TYPE")
    p.add_argument("days", type=_positive_int, metavar="DAYS")

    p = sub.add_parser("archive", help="Archive an item")
    p.add_argument("item_id", metavar="ID")

    p = sub.add_parser("unarchive", help="Restore an archived item")
    p.add_argument("item_id", metavar="ID")

    p = sub.add_parser("prepare-image", help="Run the photo pipeline without uploading")
    p.add_argument("path", type=Path, metavar="PATH")
    p.add_argument("--output", "-o", type=Path, required=True)

    return parser


def make_client(args: argparse.Namespace) -> ClosetcareClient:
    overrides: dict[str, Any] = {}
    if args.api_url:
        overrides["base_url"] = args.api_url
    if args.session_file:
        overrides["session_file"] = args.session_file
    return ClosetcareClient(ClosetcareConfig.from_env(**overrides))


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _status_label(item: ClothingItem) -> str:
    if item.is_archived:
        return "archived"
    status = item_status(item)
    if status is None:
        return "-"
    return describe_status(status[1])


def _item_line(item: ClothingItem) -> str:
    return f"  {item.id}  {item.name}  [{_status_label(item)}]"


def _print_grouped(grouped: ItemsByType) -> None:
    if not any(grouped.values()):
        print("No items.")
        return
    for item_type in sorted(grouped):
        items = grouped[item_type]
        if not items:
            continue
        print(f"{item_type} ({len(items)})")
        for item in items:
            print(_item_line(item))


def _print_item(item: ClothingItem) -> None:
    days = interval_days(item.cleaning_interval_seconds)
    print(f"id:             {item.id}")
    print(f"name:           {item.name}")
    print(f"type:           {item.clothing_item_type}")
    print(f"interval:       every {days} days")
    print(f"last cleaned:   {format_date(item.last_cleaned)}")
    print(f"next cleaning:  {format_date(item.next_cleaning_date)}")
    print(f"status:         {_status_label(item)}")
    if item.image:
        print(f"image:          {item.image}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _require_login(client: ClosetcareClient) -> None:
    if client.restore_session() is None:
        raise ClosetcareAuthError(
            message="Not logged in; run 'closetcare login' first",
            context={"operation": "restore_session"},
        )


def _password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


def run(client: ClosetcareClient, args: argparse.Namespace) -> None:
    """Execute the parsed command against *client*."""
    command = args.command

    if command == "login":
        user = client.login(args.email, _password(args))
        print(f"Logged in as {user.name} <{user.email}>")
        return
    if command == "signup":
        user = client.signup(args.name, args.email, _password(args))
        print(f"Signed up as {user.name} <{user.email}>")
        return
    if command == "logout":
        client.logout()
        print("Logged out")
        return
    if command == "prepare-image":
        processed = client.prepare_image(args.path)
        args.output.write_bytes(processed.data)
        print(f"Wrote {args.output} ({processed.width}x{processed.height}, {processed.size_bytes} bytes)")
        return

    _require_login(client)

    if command == "whoami":
        user = client.me()
        print(f"{user.name} <{user.email}>")
    elif command == "list":
        _print_grouped(client.list_items(archived=args.archived))
    elif command == "type":
        items = client.list_by_type(args.item_type)
        if not items:
            print(f"No items of type {args.item_type!r}.")
        for item in items:
            print(_item_line(item))
    elif command == "show":
        _print_item(client.get_item(args.item_id))
    elif command == "add":
        item = client.add_item(args.name, args.item_type, args.interval_days, image=args.image)
        print(f"Added {item.name} ({item.id})")
    elif command == "set-interval":
        item = client.set_interval(args.item_id, args.days)
        print(f"{item.name}: every {interval_days(item.cleaning_interval_seconds)} days")
    elif command == "set-type-interval":
        update = client.set_type_interval(args.item_type, args.days)
        print(update.message or f"Updated {update.modified_count} items")
    elif command == "archive":
        item = client.archive_item(args.item_id)
        print(f"Archived {item.name}")
    elif command == "unarchive":
        item = client.unarchive_item(args.item_id)
        print(f"Unarchived {item.name}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_level("DEBUG")

    try:
        client = make_client(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        with client:
            run(client, args)
    except ClosetcareError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
