"""CLI entry point for gl-members."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Ensure all commands are registered by importing the commands package
import gl_members.commands  # noqa: F401
from gl_members.client import GitLabClient
from gl_members.commands import CommandContext, get_command_registry
from gl_members.errors import GitLabMembersError
from gl_members.logging_utils import setup_logging
from gl_members.models import DEFAULT_GITLAB_URL, DEFAULT_MAX_RETRIES, ConnectionProfile
from gl_members.profile import ProfileHolder, build_profile
from gl_members.store import RosterStore, open_store

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "gl-members" / "gl_members.sqlite3"


def resolve_db_path(cli_value: str | None) -> Path:
    return Path(cli_value or os.environ.get("GL_MEMBERS_DB") or DEFAULT_DB_PATH)


def resolve_profile(args: argparse.Namespace, store: RosterStore) -> ConnectionProfile | None:
    """Flags win over environment, environment over the saved profile."""
    gitlab_url = args.gitlab_url or os.environ.get("GITLAB_URL")
    token = args.token or os.environ.get("GITLAB_TOKEN")
    saved = store.get_profile()

    if token:
        base_url = gitlab_url or (saved.base_url if saved else DEFAULT_GITLAB_URL)
        return build_profile(base_url, token)
    if saved and gitlab_url:
        return build_profile(gitlab_url, saved.token)
    return saved


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gl-members",
        description="Browse GitLab projects, manage project membership and keep a local roster of people.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    GITLAB_TOKEN   - GitLab Personal Access Token (overrides the saved profile)
    GITLAB_URL     - GitLab instance URL (default: saved profile or https://gitlab.com)
    GL_MEMBERS_DB  - Path of the local roster database

Examples:
    # Save the connection profile once
    gl-members set-config --base-url https://gitlab.example.com --token glpat-xxxx

    # Find a project and save its members to the local roster
    gl-members search-projects backend
    gl-members list-members myorg/backend --all --save

    # Build a local group and add it to another project as reporters
    gl-members create-group "QA team"
    gl-members group-add 1 101 102 103
    gl-members add-members myorg/frontend --group 1 --access-level reporter

    # JSON output for machine parsing
    gl-members --json remove-members 42 --user 101 102
""",
    )
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output results as JSON (logs as JSON lines to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--gitlab-url", default=None, help="GitLab instance URL (default: GITLAB_URL or saved profile)")
    parser.add_argument("--token", default=None, help="GitLab token (default: GITLAB_TOKEN or saved profile)")
    parser.add_argument("--db", default=None, help=f"Local roster database (default: {DEFAULT_DB_PATH})")
    parser.add_argument(
        "--max-retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help=f"Maximum retry attempts for transient errors (default: {DEFAULT_MAX_RETRIES})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    registry = get_command_registry()
    for name, cmd_cls in sorted(registry.items()):
        sub = subparsers.add_parser(name, help=cmd_cls.__doc__)
        cmd_cls.add_arguments(sub)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose)

    try:
        store = open_store(resolve_db_path(args.db))
    except GitLabMembersError as e:
        logger.error(str(e))
        return 1

    try:
        profiles = ProfileHolder(resolve_profile(args, store))
        client = GitLabClient(max_retries=args.max_retries, profiles=profiles)
        ctx = CommandContext(client=client, store=store, json_output=args.json_output)

        command = get_command_registry()[args.command](ctx, args)
        return command.run()
    except GitLabMembersError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
