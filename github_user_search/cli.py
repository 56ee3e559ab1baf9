"""CLI commands for GitHub user search."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .models import SortKey, SortOrder


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-user-search",
        description="Search GitHub users and fetch profiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--token-file",
        type=Path,
        default=None,
        help="JSON file holding the access token (default: GITHUB_TOKEN from env)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # user subcommand
    user_parser = subparsers.add_parser(
        "user",
        help="Fetch a single user's profile",
    )
    user_parser.add_argument("username", help="GitHub login")

    # search subcommand
    search_parser = subparsers.add_parser(
        "search",
        help="Search users and enrich results with profile details",
    )
    search_parser.add_argument(
        "username",
        nargs="?",
        default=None,
        help="Login or name fragment (exact login match when it is a valid handle)",
    )
    search_parser.add_argument("--location", help="Location, e.g. 'San Francisco'")
    search_parser.add_argument("--company", help="Company name")
    search_parser.add_argument("--min-repos", type=int, help="Minimum public repositories")
    search_parser.add_argument("--max-repos", type=int, help="Maximum public repositories")
    search_parser.add_argument("--min-followers", type=int, help="Minimum followers")
    search_parser.add_argument("--max-followers", type=int, help="Maximum followers")
    search_parser.add_argument("--language", help="Primary language")
    search_parser.add_argument("--created", help="Account creation filter, e.g. '>2015-01-01'")
    search_parser.add_argument(
        "--type",
        dest="account_type",
        choices=["user", "org"],
        help="Account type",
    )
    search_parser.add_argument("--hireable", action="store_true", default=None, help="Only hireable users")
    search_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    search_parser.add_argument("--per-page", type=int, default=10, help="Results per page, 1-100 (default: 10)")
    search_parser.add_argument(
        "--sort",
        choices=[k.value for k in SortKey],
        default=SortKey.FOLLOWERS.value,
        help="Sort key (default: followers)",
    )
    search_parser.add_argument(
        "--order",
        choices=[o.value for o in SortOrder],
        default=SortOrder.DESC.value,
        help="Sort order (default: desc)",
    )
    return parser


async def _run(args) -> int:
    from .client import UserSearchClient
    from .models import SearchParameters
    from .settings import get_settings

    settings = get_settings()
    if args.token_file:
        settings = settings.model_copy(update={"token_file": args.token_file})

    async with UserSearchClient(settings) as client:
        if args.command == "user":
            result = await client.fetch_user_data(args.username)
        else:
            params = SearchParameters(
                username=args.username,
                location=args.location,
                company=args.company,
                min_repos=args.min_repos,
                max_repos=args.max_repos,
                min_followers=args.min_followers,
                max_followers=args.max_followers,
                language=args.language,
                created=args.created,
                account_type=args.account_type,
                hireable=args.hireable,
                page=args.page,
                per_page=args.per_page,
                sort=args.sort,
                order=args.order,
            )
            result = await client.search_users(params)

    if result.cancelled:
        return 130
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    json.dump(result.to_dict()["data"], sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
    return 0


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if args.command not in ("user", "search"):
        parser.print_help()
        return 0

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
