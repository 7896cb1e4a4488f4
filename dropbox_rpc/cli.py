"""
Dropbox RPC CLI - Small command-line front-end.

Uses the SDK layer for all operations. It handles:
- Argument parsing and bearer token lookup
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import os
import sys
from typing import Any

from dropbox_rpc.core.client import DropboxError
from dropbox_rpc.sdk import DropboxClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: DropboxError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_account(client: DropboxClient, args: argparse.Namespace) -> None:
    """Show the current account."""
    try:
        info, _ = client.users.get_account()
    except DropboxError as e:
        error_output(e)
        return
    except OSError as e:
        error_output(DropboxError(str(e)))
        return

    if is_tty():
        print(f"Name:    {info.name.display_name}")
        print(f"Email:   {info.email}")
        print(f"Country: {info.country}")
        print(f"ID:      {info.account_id}")
    else:
        json_output(info.to_dict())


def cmd_ls(client: DropboxClient, args: argparse.Namespace) -> None:
    """List a folder."""
    # The API addresses the root folder as ""
    path = "" if args.path == "/" else args.path
    try:
        entries, _ = client.files.list_folder(path)
    except DropboxError as e:
        error_output(e)
        return
    except OSError as e:
        error_output(DropboxError(str(e)))
        return

    if is_tty():
        for entry in entries:
            print(entry.name)
    else:
        json_output({"entries": [e.to_dict() for e in entries]})


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dropbox-rpc",
        description="dropbox-rpc - Command-line interface for the Dropbox RPC API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dropbox-rpc --token $TOKEN account
  dropbox-rpc ls /photos | jq '.entries[].name'
""",
    )
    parser.add_argument("--token", "-t", help="OAuth2 bearer token (overrides DROPBOX_TOKEN)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    account = subparsers.add_parser("account", help="Show the current account")
    account.set_defaults(func=cmd_account)

    ls = subparsers.add_parser("ls", help="List a folder")
    ls.add_argument("path", nargs="?", default="/", help="Folder to list (default: /)")
    ls.set_defaults(func=cmd_ls)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    token = args.token or os.environ.get("DROPBOX_TOKEN")
    if not token:
        parser.error("a bearer token is required: use --token or set DROPBOX_TOKEN")

    client = DropboxClient(bearer_token=token)
    args.func(client, args)


if __name__ == "__main__":
    main()
