#!/usr/bin/env python3
"""CLI management tool for the local account registry and session.

Provides commands to:
- Register an account (and log it in)
- Log in / log out
- Show who is currently logged in
- List registered accounts
"""

import argparse
import asyncio
import getpass
import logging
import sys

from trattoria.auth import Account, AuthProvider, HostFrame, SQLiteKeyValueStore
from trattoria.config import DEFAULT_CONFIG_PATH, LOG_LEVELS, load_config


async def register(args, provider: AuthProvider) -> int:
    """Register a new account with optional password prompt."""
    auth = provider.use_auth()

    if args.password:
        password = args.password
    else:
        password = getpass.getpass(f"Password for {args.username}: ")
        if not password:
            print("Error: Password cannot be empty", file=sys.stderr)
            return 1

    account = Account(
        id=args.id,
        username=args.username,
        password=password,
        name=args.name or args.username,
    )
    await auth.register(account)

    print(f"✓ Registered {account.id} ({account.username}), now logged in")
    return 0


async def login(args, provider: AuthProvider) -> int:
    auth = provider.use_auth()

    password = args.password or getpass.getpass(f"Password for {args.username}: ")
    if not await auth.login(args.username, password):
        print("Error: Invalid credentials", file=sys.stderr)
        return 1

    print(f"✓ Logged in as {auth.user.username} ({auth.user.id})")
    return 0


async def logout(args, provider: AuthProvider) -> int:
    auth = provider.use_auth()
    auth.logout()
    print("✓ Logged out")
    return 0


async def whoami(args, provider: AuthProvider) -> int:
    """Print the current session, if any."""
    auth = provider.use_auth()
    if auth.error:
        print(f"Warning: {auth.error}", file=sys.stderr)

    if not auth.is_authenticated:
        print("Not logged in")
        return 1

    user = auth.user
    print(f"{user.username} ({user.id}) {user.name}, last login {user.last_login}")
    return 0


async def list_users(args, provider: AuthProvider) -> int:
    """List all registered accounts in registration order."""
    accounts = provider.accounts

    if not accounts:
        print("No users found")
        return 0

    print(f"{'ID':<10} {'Username':<20} {'Name':<20}")
    print("-" * 50)

    for account in accounts:
        print(f"{account.id:<10} {account.username:<20} {account.name:<20}")

    return 0


COMMANDS = {
    "register": register,
    "login": login,
    "logout": logout,
    "whoami": whoami,
    "list-users": list_users,
}


async def run(args, config) -> int:
    store = SQLiteKeyValueStore(db_path=config.db_path)
    try:
        async with AuthProvider(store, HostFrame.top_level(), config) as provider:
            await provider.wait_ready()
            return await COMMANDS[args.command](args, provider)
    finally:
        store.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trattoria-auth",
        description="Manage Trattoria local accounts and session",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to config.json (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--db-path",
        help="Path to SQLite storage (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        choices=LOG_LEVELS,
        help="Logging level (default: log_level from config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    register_parser = subparsers.add_parser("register", help="Register an account")
    register_parser.add_argument("--id", required=True, help="Account ID")
    register_parser.add_argument("--username", required=True, help="Username")
    register_parser.add_argument("--password", help="Password (prompted if omitted)")
    register_parser.add_argument("--name", help="Display name (default: username)")

    login_parser = subparsers.add_parser("login", help="Log in")
    login_parser.add_argument("--username", required=True, help="Username")
    login_parser.add_argument("--password", help="Password (prompted if omitted)")

    subparsers.add_parser("logout", help="Log out")
    subparsers.add_parser("whoami", help="Show the current session")
    subparsers.add_parser("list-users", help="List registered accounts")

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = load_config(args.config)
    if args.db_path:
        config.db_path = args.db_path

    logging.basicConfig(
        level=getattr(logging, args.log_level or config.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    return asyncio.run(run(args, config))


if __name__ == "__main__":
    sys.exit(main())
