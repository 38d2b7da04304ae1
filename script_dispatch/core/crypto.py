"""Operator credential hashing.

Operators are configured as ``SECURITY__OPERATORS='{"alice": "<bcrypt hash>"}'``;
run ``script-dispatch-hash-password`` to produce the hash for a new entry.
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from typing import Optional, Sequence

import bcrypt

DEFAULT_ROUNDS = 12


def hash_password(password: str, *, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check an operator password; malformed stored hashes never match."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def operator_entry(username: str, password: str, *, rounds: int = DEFAULT_ROUNDS) -> str:
    """Render one ``operators`` mapping as JSON, ready for the environment."""
    return json.dumps({username: hash_password(password, rounds=rounds)})


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate an operator entry for SECURITY__OPERATORS")
    parser.add_argument("username")
    parser.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS, help="bcrypt cost factor")
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if not password:
        print("Password must not be empty", file=sys.stderr)
        return 1
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match", file=sys.stderr)
        return 1
    print(operator_entry(args.username, password, rounds=args.rounds))
    return 0


__all__ = ["hash_password", "operator_entry", "verify_password"]


if __name__ == "__main__":
    sys.exit(main())
