#!/usr/bin/env python3
"""
TokenGate -- admin CLI for the bearer-token authentication service.

Usage:
  python main.py hash-password
  python main.py hash-password --password s3cret
  python main.py add-user alice
  python main.py decode-token eyJhbGciOi...

Environment variables (see core/config.py):
  SECRET_KEY          Signing key, at least 32 characters (or DEBUG=true).
  CREDENTIAL_DB_URL   SQLAlchemy URL of the credential database (add-user).
  BCRYPT_ROUNDS       bcrypt cost factor for hash-password / add-user.
"""

import argparse
import getpass
import json
import sys
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.errors import PasswordTooLong, TokenExpired, TokenInvalid
from auth.models import Credential
from auth.passwords import PasswordHasher
from auth.store import SqlCredentialStore
from auth.tokens import TokenCodec
from core.config import get_settings


def _read_password(given: Optional[str]) -> Optional[str]:
    """Return the password from --password or an interactive prompt (typed twice)."""
    if given:
        return given
    first = getpass.getpass("Password: ")
    second = getpass.getpass("Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.", file=sys.stderr)
        return None
    if not first:
        print("  [!] Password must not be empty.", file=sys.stderr)
        return None
    return first


def cmd_hash_password(args: argparse.Namespace) -> int:
    password = _read_password(args.password)
    if password is None:
        return 1
    hasher = PasswordHasher(rounds=get_settings().bcrypt_rounds)
    try:
        hashed = hasher.hash(password)
    except PasswordTooLong as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        return 1
    print(hashed)
    return 0


def cmd_add_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    if not settings.credential_db_url:
        print("  [!] CREDENTIAL_DB_URL is not set; the in-memory store is read-only.", file=sys.stderr)
        print('      Add the user to SEED_USERS instead: {"%s": "<hash>"}' % args.username, file=sys.stderr)
        return 1
    password = _read_password(args.password)
    if password is None:
        return 1

    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    try:
        hashed = hasher.hash(password)
    except PasswordTooLong as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        return 1

    store = SqlCredentialStore(settings.credential_db_url)
    try:
        store.add(Credential(username=args.username, password_hash=hashed))
    except IntegrityError:
        print(f"  [!] User '{args.username}' already exists.", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(f"  Added user '{args.username}'.")
    return 0


def cmd_decode_token(args: argparse.Namespace) -> int:
    settings = get_settings()
    codec = TokenCodec(secret_key=settings.secret_key, ttl_seconds=settings.token_expire_seconds)
    try:
        identity = codec.verify(args.token)
    except TokenExpired:
        result = {"valid": False, "reason": "expired"}
    except TokenInvalid:
        result = {"valid": False, "reason": "invalid"}
    else:
        result = {"valid": True, "username": identity.username}

    if args.json:
        print(json.dumps(result))
    elif result["valid"]:
        print(f"  Valid token for '{result['username']}'.")
    else:
        print(f"  [!] Token is {result['reason']}.")
    return 0 if result["valid"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tokengate",
        description="Admin tasks for the TokenGate authentication service.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py hash-password
  SEED_USERS='{"farhan": "<hash from hash-password>"}' uvicorn asgi:app
  CREDENTIAL_DB_URL=sqlite:///credentials.db python main.py add-user farhan
  python main.py decode-token "$TOKEN" --json
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p_hash = sub.add_parser("hash-password", help="Print a bcrypt hash for SEED_USERS")
    p_hash.add_argument("--password", metavar="PASSWORD", help="Password to hash (prompted if omitted)")
    p_hash.set_defaults(func=cmd_hash_password)

    p_add = sub.add_parser("add-user", help="Insert a user into the credential database")
    p_add.add_argument("username", metavar="USERNAME")
    p_add.add_argument("--password", metavar="PASSWORD", help="Password (prompted if omitted)")
    p_add.set_defaults(func=cmd_add_user)

    p_decode = sub.add_parser("decode-token", help="Verify a token and print its subject")
    p_decode.add_argument("token", metavar="TOKEN")
    p_decode.add_argument("--json", action="store_true", help="Output structured JSON")
    p_decode.set_defaults(func=cmd_decode_token)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
