"""pagekit command line tool.

Usage:
    export PAGEKIT_API_URL="https://your-host/api"

    pagekit login --username admin
    export PAGEKIT_TOKEN="<printed token>"

    pagekit pages list --type login
    pagekit pages show 42
    pagekit pages export 42
    pagekit pages delete 42 --yes
"""

import argparse
import getpass
import json
import sys

import structlog

from pagekit.client import ApiClient
from pagekit.config import Settings
from pagekit.models.page import PageType
from pagekit.repositories.page import PageRepository
from pagekit.services import normalizer
from pagekit.utils.auth import login
from pagekit.utils.exceptions import PageKitError, UnauthorizedError, describe_error
from pagekit.utils.logging import configure_logging

logger = structlog.get_logger()

PAGE_TYPE_CHOICES = [t.value for t in PageType]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="pagekit", description="Manage tenant pages")
    parser.add_argument("--api-url", help="API base URL (default: $PAGEKIT_API_URL)")
    parser.add_argument("--token", help="Bearer token (default: $PAGEKIT_TOKEN)")
    commands = parser.add_subparsers(dest="command", required=True)

    login_parser = commands.add_parser("login", help="Log in and print a token")
    login_parser.add_argument("--username", required=True)
    login_parser.add_argument("--password", help="Prompted for when omitted")
    login_parser.add_argument("--email")

    pages = commands.add_parser("pages", help="Page operations")
    page_commands = pages.add_subparsers(dest="action", required=True)

    list_parser = page_commands.add_parser("list", help="List pages")
    list_parser.add_argument("--type", choices=PAGE_TYPE_CHOICES, dest="page_type")

    for action, help_text in (
        ("show", "Show a normalized page definition"),
        ("export", "Print the request body a save would send"),
    ):
        sub = page_commands.add_parser(action, help=help_text)
        sub.add_argument("page_id")
        sub.add_argument("--type", choices=PAGE_TYPE_CHOICES, dest="page_type")

    delete_parser = page_commands.add_parser("delete", help="Delete a page")
    delete_parser.add_argument("page_id")
    delete_parser.add_argument("--yes", action="store_true", help="Confirm the deletion")

    return parser


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def _cmd_login(client: ApiClient, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    session = login(client, args.username, password, email=args.email)
    print(session.token)
    return 0


def _cmd_pages(client: ApiClient, args: argparse.Namespace) -> int:
    repository = PageRepository(client)

    if args.action == "list":
        records = repository.list_by_type(args.page_type) if args.page_type else repository.list_pages()
        for record in records:
            page_type = record.get("page_type") or record.get("type") or record.get("form_type") or ""
            print(f"{record.get('id')}\t{page_type}\t{record.get('slug', '')}\t{record.get('title', '')}")
        return 0

    if args.action == "show":
        definition = repository.get_definition(args.page_id, args.page_type)
        _print_json(definition.model_dump(mode="json"))
        return 0

    if args.action == "export":
        definition = repository.get_definition(args.page_id, args.page_type)
        _print_json(normalizer.to_request_body(definition))
        return 0

    if args.action == "delete":
        if not args.yes:
            print("Refusing to delete without --yes", file=sys.stderr)
            return 1
        repository.delete(args.page_id)
        print(f"Deleted page {args.page_id}")
        return 0

    raise ValueError(f"Unknown pages action: {args.action}")


def main(argv: list[str] | None = None, client: ApiClient | None = None) -> int:
    """Main entry point.

    Args:
        argv: Arguments, defaulting to ``sys.argv[1:]``.
        client: Client to use instead of one built from the environment.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    if args.api_url:
        settings.api_url = args.api_url
    if args.token:
        settings.token = args.token

    owns_client = client is None
    client = client or settings.client()
    try:
        if args.command == "login":
            return _cmd_login(client, args)
        return _cmd_pages(client, args)
    except PageKitError as e:
        logger.debug("Command failed", command=args.command, error_code=e.error_code)
        if args.command == "login" and isinstance(e, UnauthorizedError):
            print(e.message, file=sys.stderr)
        else:
            print(describe_error(e), file=sys.stderr)
        return 1
    finally:
        if owns_client:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
