"""Command-line interface for the rentals service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Install the project with `pip install -e .`."
    ) from exc

from rentals.config import STORAGE_BACKENDS, Settings, load_settings
from rentals.context import Stores, build_stores

logger = logging.getLogger("rentals.main")

_DEFAULT_SERVICE_URL = "http://localhost:8000"


_GLOBAL_VALUE_OPTIONS = ("--storage", "--db")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--storage",
        choices=STORAGE_BACKENDS,
        default=None,
        help="Storage backend (default: from configuration, else sqlite)",
    )
    common.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to RENTALS_DB_PATH or data/rentals.sqlite3)",
    )

    parser = argparse.ArgumentParser(description="Rentals record service utilities")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", parents=[common], help="Initialise the record database")

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=None, help="Port for the API (default: 8000)")

    admin_parser = subparsers.add_parser(
        "admin", parents=[common], help="Launch the interactive administration console"
    )
    admin_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running rentals service (default: {_DEFAULT_SERVICE_URL})",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "admin", "init-db"}

    if args_list and args_list[0] in ("-h", "--help"):
        return parser.parse_args(args_list)

    # The subcommand may appear after the storage options; move it to the
    # front. Without one, every argument belongs to ``serve``.
    index = 0
    while index < len(args_list):
        token = args_list[index]
        if token in known_commands:
            return parser.parse_args([token, *args_list[:index], *args_list[index + 1:]])
        has_value = index + 1 < len(args_list) and not args_list[index + 1].startswith("-")
        index += 2 if token in _GLOBAL_VALUE_OPTIONS and has_value else 1

    return parser.parse_args(["serve", *args_list])


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    overrides = {}
    if args.storage:
        overrides["storage"] = args.storage
    if args.db_path:
        overrides["database_path"] = args.db_path
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    if not overrides:
        return settings
    merged = {
        "storage": settings.storage,
        "database_path": str(settings.database_path) if settings.database_path else None,
        "host": settings.host,
        "port": settings.port,
        **overrides,
    }
    return Settings.from_dict(merged, base_path=None)


def _initialise_stores(settings: Settings) -> Stores:
    backend = settings.open_backend()
    if settings.storage == "sqlite":
        logger.info("Database initialised at %s", settings.resolved_database_path())
    else:
        logger.info("Using in-memory storage; records will not survive a restart")
    return build_stores(backend)


def _serve(*, stores: Stores, settings: Settings) -> None:
    from rentals.api import create_app
    import uvicorn

    logger.info("Starting rentals API on http://%s:%s", settings.host, settings.port)
    app = create_app(stores=stores)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


def _run_admin_cli(stores: Stores, *, default_service_url: str | None = None) -> None:
    """Provide an interactive console over the local stores."""

    service_url = default_service_url or os.getenv("RENTALS_SERVICE_URL") or _DEFAULT_SERVICE_URL

    print("Rentals Administration Console")
    print("Press Ctrl+C at any time to exit.\n")

    try:
        while True:
            print("Select an option:")
            print("  1) List all users")
            print("  2) Add a new user")
            print("  3) List all items")
            print("  4) List all slots")
            print("  5) Show status of a running service")
            print("  6) Exit")

            choice = input("Enter choice [1-6]: ").strip()

            if choice == "1":
                _list_users(stores)
            elif choice == "2":
                _add_user(stores)
            elif choice == "3":
                _list_items(stores)
            elif choice == "4":
                _list_slots(stores)
            elif choice == "5":
                _show_service_status(service_url)
            elif choice == "6":
                print("Goodbye!")
                return
            else:
                print("Invalid selection. Please choose a number from the menu.\n")

            print()
    except KeyboardInterrupt:
        print("\nExiting administration console.")


def _list_users(stores: Stores) -> None:
    users = stores.users.list()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<36}  {'Pseudo':<20}  Name")
    print("-" * 80)
    for user in users:
        print(f"{user.id:<36}  {user.pseudo:<20}  {user.name}")


def _add_user(stores: Stores) -> None:
    print("\nCreate a new user (leave the pseudo blank to cancel).")
    pseudo = input("Pseudo: ").strip()
    if not pseudo:
        print("User creation cancelled.")
        return

    if stores.users.exists_by_pseudo(pseudo):
        confirm = input(f"The pseudo '{pseudo}' is already taken. Create anyway? [y/N]: ")
        if confirm.strip().lower() not in {"y", "yes"}:
            print("User creation cancelled.")
            return

    name = input("Name: ").strip()
    user = stores.users.add({"pseudo": pseudo, "name": name})
    print(f"Created user {user.id}: {user.pseudo} ({user.name or 'no name set'})")


def _list_items(stores: Stores) -> None:
    items = stores.items.list()
    if not items:
        print("No items are currently registered.")
        return

    print(f"{len(items)} item(s) found:")
    for item in items:
        print(f"- {item.id} owned by {item.owner_id}: {item.description}")


def _list_slots(stores: Stores) -> None:
    slots = stores.slots.list()
    if not slots:
        print("No slots are currently registered.")
        return

    print(f"{len(slots)} slot(s) found:")
    for slot in slots:
        state = "available" if slot.available else "taken"
        print(
            f"- {slot.id} item={slot.item_id} renter={slot.owner_id} "
            f"[{slot.begin_at} -> {slot.end_at}] {state}"
        )


def _show_service_status(base_url: str) -> None:
    endpoint = base_url.rstrip("/")

    try:
        health = httpx.get(endpoint + "/health", timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact rentals service: {exc}")
        return

    if health.status_code != 200:
        print(f"Service responded with {health.status_code}: {health.text.strip()}")
        return

    print(f"Service at {endpoint} is healthy.")
    for collection in ("users", "items", "slots"):
        try:
            response = httpx.get(f"{endpoint}/{collection}", timeout=10.0)
            records = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            print(f"  {collection}: unavailable ({exc})")
            continue
        print(f"  {collection}: {len(records)}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    try:
        settings = _resolve_settings(args)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc
    stores = _initialise_stores(settings)

    if args.command == "serve":
        _serve(stores=stores, settings=settings)
    elif args.command == "admin":
        _run_admin_cli(stores, default_service_url=args.service_url)
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
