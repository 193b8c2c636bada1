"""Local roster commands."""

from __future__ import annotations

import argparse

from gl_members.commands.base import Command, add_paging_arguments, register_command


@register_command("local-members")
class LocalMembersCommand(Command):
    """List members saved in the local roster."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--query", "-q", default=None, help="Match username or name (case-insensitive)")
        add_paging_arguments(parser, 50)

    def run(self) -> int:
        result = self.store.list_members(self.args.query, page=self.args.page, per_page=self.args.per_page)
        lines = [
            f"{m.user_id:>8}  {m.username:<24} {m.name:<32} {m.updated_at}"
            f"{'  [' + m.project_name + ']' if m.project_name else ''}"
            for m in result.items
        ]
        lines.append(f"-- {len(result.items)} of {result.total}")
        self._emit({"items": [m.to_dict() for m in result.items], "total": result.total}, lines)
        return 0


@register_command("delete-local-members")
class DeleteLocalMembersCommand(Command):
    """Delete members from the local roster (and from every local group)."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("user_ids", type=int, nargs="+", help="User id(s) to delete")

    def run(self) -> int:
        self.store.delete_members(self.args.user_ids)
        return 0
