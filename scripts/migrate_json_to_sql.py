"""One-off migration script: JSON document (database.json) -> SQL database."""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Make the troq package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from troq.core.config import get_settings
from troq.db.create_tables import create_all
from troq.db.models import Offer, User
from troq.db.session import get_session
from troq.repositories.base import parse_timestamp
from troq.repositories.json_storage import load


def migrate(data_file: Path) -> tuple[int, int]:
    if not data_file.exists():
        raise SystemExit(f"File not found: {data_file}")
    db = load(data_file)
    create_all()
    with get_session() as session:
        for meta in db["users"]:
            session.merge(
                User(
                    id=meta["id"],
                    fullname=meta.get("fullname") or "",
                    email=meta["email"],
                    password=meta.get("password") or "",
                    avatar_url=meta.get("avatar_url"),
                    created_at=parse_timestamp(meta.get("created_at")),
                )
            )
        session.flush()
        for meta in db["offers"]:
            session.merge(
                Offer(
                    id=meta["id"],
                    user_id=meta["user_id"],
                    offer_type=meta.get("offer_type") or "",
                    title=meta.get("title") or "",
                    category=meta.get("category"),
                    description=meta.get("description"),
                    image_url=meta.get("image_url"),
                    phone=meta.get("phone"),
                    address=meta.get("address"),
                    created_at=parse_timestamp(meta.get("created_at")),
                )
            )
        session.commit()
    return len(db["users"]), len(db["offers"])


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--data-file", type=Path, default=get_settings().data_file)
    args = parser.parse_args(argv)
    users, offers = migrate(args.data_file)
    print(f"Migrated {users} user(s) and {offers} offer(s) to the SQL database.")


if __name__ == "__main__":
    main()
