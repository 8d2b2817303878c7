import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rentals.context import build_stores
from rentals.database import Database, resolve_database_path


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a rentals user")
    parser.add_argument("pseudo", help="Display handle for the user")
    parser.add_argument("name", help="Full name of the user")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to RENTALS_DB_PATH or data/rentals.sqlite3)",
    )
    parser.add_argument(
        "--allow-duplicate-pseudo",
        action="store_true",
        help="Create the user even if another user already has this pseudo",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    pseudo = args.pseudo.strip()
    if not pseudo:
        print("Error: pseudo must not be empty", file=sys.stderr)
        return 1

    db_env = args.db_path or os.getenv("RENTALS_DB_PATH")
    database = Database(resolve_database_path(db_env))
    database.initialize()
    stores = build_stores(database)

    if stores.users.exists_by_pseudo(pseudo) and not args.allow_duplicate_pseudo:
        print(
            f"Error: a user with pseudo '{pseudo}' already exists "
            "(pass --allow-duplicate-pseudo to create it anyway)",
            file=sys.stderr,
        )
        return 1

    user = stores.users.add({"pseudo": pseudo, "name": args.name.strip()})
    print(f"Created user {user.id}: {user.pseudo} ({user.name})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
