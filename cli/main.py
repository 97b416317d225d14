#!/usr/bin/env python3
"""
Mona CLI - run the server and inspect boards from a terminal.
"""

import argparse
import sys

from mona import config, paths
from mona.errors import MonaError
from mona.observability import configure_logging
from mona.store import get_store
from mona.workspace import Workspace


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [max(len(str(row[i])) for row in [headers] + rows) for i in range(len(headers))]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def _workspace(username: str) -> Workspace:
    workspace = Workspace(username, get_store())
    workspace.load()
    return workspace


def cmd_serve(args):
    """Run the API server."""
    p = argparse.ArgumentParser(prog="mona serve")
    p.add_argument("--host", default=config.HOST)
    p.add_argument("--port", type=int, default=config.PORT)
    opts = p.parse_args(args)

    from api.server import main as run_server

    run_server(opts.host, opts.port)


def cmd_init(args):
    """Create the data directory and the configured store."""
    store = get_store()
    print_header("Mona initialized")
    print(f"  Home:     {paths.app_home()}")
    print(f"  Backend:  {store.backend_name}")
    if store.backend_name == "document":
        print(f"  Database: {paths.db_path()}")
    else:
        print(f"  Data dir: {paths.data_dir()}")


def cmd_users(args):
    """List accounts."""
    users = get_store().list_users()
    if not users:
        print("No users yet. Create one with: create-user <name>")
        return
    print_header(f"Users ({len(users)})")
    print_table(
        ["Username", "Password"],
        [[u["username"], "yes" if u["hasPassword"] else "no"] for u in users],
    )


def cmd_create_user(args):
    """Create an account."""
    p = argparse.ArgumentParser(prog="mona create-user")
    p.add_argument("username")
    p.add_argument("--password", default=None)
    opts = p.parse_args(args)

    get_store().create_user(opts.username, opts.password)
    print(f"✓ Created user {opts.username}")


def cmd_upcoming(args):
    """Show open dated tasks, soonest first."""
    p = argparse.ArgumentParser(prog="mona upcoming")
    p.add_argument("username")
    p.add_argument("--assignee", default=None)
    p.add_argument("-n", "--limit", type=int, default=20)
    opts = p.parse_args(args)

    tasks = _workspace(opts.username).upcoming(opts.assignee)
    if not tasks:
        print("Nothing upcoming.")
        return
    print_header(f"Upcoming for {opts.assignee or opts.username}")
    print_table(
        ["Due", "Client", "Task", "Assignees"],
        [
            [t["due"], t["clientName"], t["taskName"], ", ".join(t["assignees"])]
            for t in tasks[: opts.limit]
        ],
        [6, 20, 30, 20],
    )


def cmd_buckets(args):
    """Show the bucket board."""
    p = argparse.ArgumentParser(prog="mona buckets")
    p.add_argument("username")
    p.add_argument("--search", default=None)
    opts = p.parse_args(args)

    board = _workspace(opts.username).buckets(opts.search)
    for bucket, deliverables in board.items():
        print_header(f"{bucket} ({len(deliverables)})")
        for d in deliverables:
            print(f"  • {d['clientName']}: {d['deliverableName'] or 'Untitled'} ({len(d['tasks'])} open)")


def cmd_help(args):
    """Show help."""
    print_header("Mona CLI")
    print("""
COMMANDS:

  serve [--host H] [--port P]        Run the API server
  init                               Create the data directory and store
  users                              List accounts
  create-user <name> [--password X]  Create an account
  upcoming <user> [--assignee A]     Open dated tasks, soonest first
  buckets <user> [--search S]        Deliverables by bucket
  help                               Show this help

ENVIRONMENT:
  MONA_HOME, MONA_STORE (file|document), MONA_PORT, MONA_LOG_LEVEL
""")


COMMANDS = {
    "serve": cmd_serve,
    "init": cmd_init,
    "users": cmd_users,
    "create-user": cmd_create_user,
    "upcoming": cmd_upcoming,
    "u": cmd_upcoming,
    "buckets": cmd_buckets,
    "b": cmd_buckets,
    "help": cmd_help,
    "h": cmd_help,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        cmd_help([])
        return 0

    cmd, args = argv[0], argv[1:]
    if cmd not in COMMANDS:
        print(f"Unknown command: {cmd}")
        print("Run 'help' for available commands.")
        return 2

    configure_logging(config.LOG_LEVEL, config.LOG_JSON)
    try:
        COMMANDS[cmd](args)
    except (MonaError, ValueError) as e:
        print(f"✗ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
