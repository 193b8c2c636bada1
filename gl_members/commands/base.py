"""Base class and registry for CLI commands."""

from __future__ import annotations

import argparse
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from gl_members.models import ACCESS_LEVELS

if TYPE_CHECKING:
    from gl_members.client import GitLabClient
    from gl_members.store import RosterStore

# ---------------------------------------------------------------------------
# Command Registry
# ---------------------------------------------------------------------------

_command_registry: dict[str, type[Command]] = {}


def register_command(name: str):
    """Decorator to register a command class under a CLI subcommand name."""

    def decorator(cls):
        _command_registry[name] = cls
        cls.command_name = name
        return cls

    return decorator


def get_command_registry() -> dict[str, type[Command]]:
    """Get the command registry."""
    return _command_registry


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def access_level(value: str) -> int:
    """argparse type: access level by name ('developer') or number ('30')."""
    if value in ACCESS_LEVELS:
        return ACCESS_LEVELS[value]
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid access level '{value}' (choose from {', '.join(ACCESS_LEVELS)} or an integer)"
        ) from None


def add_paging_arguments(parser: argparse.ArgumentParser, per_page: int) -> None:
    parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    parser.add_argument("--per-page", type=int, default=per_page, help=f"Items per page (default: {per_page})")


# ---------------------------------------------------------------------------
# Command Base Class
# ---------------------------------------------------------------------------


@dataclass
class CommandContext:
    """Collaborators a command works with."""

    client: GitLabClient
    store: RosterStore
    json_output: bool = False


class Command(ABC):
    """Base class for all commands."""

    command_name: str = ""

    def __init__(self, ctx: CommandContext, args: argparse.Namespace):
        self.ctx = ctx
        self.client = ctx.client
        self.store = ctx.store
        self.args = args
        self.logger = logging.getLogger("gl-members")

    @staticmethod
    @abstractmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Add command-specific CLI arguments."""
        ...

    @abstractmethod
    def run(self) -> int:
        """Run the command and return the process exit code."""
        ...

    def _emit(self, payload: Any, lines: Iterable[str]) -> None:
        """Print results to stdout: JSON in --json mode, human-readable lines otherwise."""
        if self.ctx.json_output:
            print(json.dumps(payload))
            return
        for line in lines:
            print(line)
