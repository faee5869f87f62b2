"""
auth/cli.py -- Generate the secrets the back-office API needs.

Usage:
  backoffice-secrets
  backoffice-secrets --with-keys
  backoffice-secrets --rounds 13

Prompts twice for the admin password (input is not echoed), hashes it with
bcrypt and prints a line ready to paste into .env:

  ADMIN_PASSWORD_HASH=$2b$12$...

With --with-keys it also prints fresh random values for JWT_SECRET and
FORM_HMAC_SECRET. Nothing is written to disk and the plaintext password is
never printed.
"""

from __future__ import annotations

import argparse
import getpass
import secrets
import sys
from typing import Optional

from auth.tokens import hash_password

MIN_PASSWORD_LENGTH = 8


def _read_password() -> Optional[str]:
    password = getpass.getpass("Admin password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"  [!] Password must be at least {MIN_PASSWORD_LENGTH} characters.", file=sys.stderr)
        return None
    if getpass.getpass("Confirm password: ") != password:
        print("  [!] Passwords do not match.", file=sys.stderr)
        return None
    return password


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="backoffice-secrets",
        description="Generate ADMIN_PASSWORD_HASH and, optionally, signing secrets for .env.",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=12,
        metavar="N",
        help="bcrypt cost factor (default: 12)",
    )
    parser.add_argument(
        "--with-keys",
        action="store_true",
        help="Also print random JWT_SECRET and FORM_HMAC_SECRET values",
    )
    args = parser.parse_args(argv)

    if not 4 <= args.rounds <= 31:
        parser.error("--rounds must be between 4 and 31")

    password = _read_password()
    if password is None:
        return 1

    print(f"ADMIN_PASSWORD_HASH={hash_password(password, rounds=args.rounds)}")
    if args.with_keys:
        print(f"JWT_SECRET={secrets.token_hex(32)}")
        print(f"FORM_HMAC_SECRET={secrets.token_hex(32)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
