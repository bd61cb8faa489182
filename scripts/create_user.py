"""Register a user from the command line using the configured storage backend."""
from __future__ import annotations

import argparse
import getpass
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from troq.repositories import DuplicateEmailError, get_repository
from troq.services.auth_service import AuthService
from troq.services.errors import ValidationError


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--fullname", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Prompted when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    service = AuthService(get_repository())
    try:
        user_id = service.register(args.fullname, args.email, password)
    except ValidationError as exc:
        raise SystemExit(f"ERROR: {exc.message}")
    except DuplicateEmailError:
        raise SystemExit(f"ERROR: e-mail already registered: {args.email}")
    print("OK: user registered")
    print(f"  ID: {user_id}")
    print(f"  Email: {args.email}")


if __name__ == "__main__":
    main()
