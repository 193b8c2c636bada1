"""Remote project membership commands."""

from __future__ import annotations

import argparse
from dataclasses import asdict

from gl_members.batch import BatchMutator
from gl_members.commands.base import Command, access_level, add_paging_arguments, register_command
from gl_members.models import ACCESS_LEVELS, PER_PAGE, BatchResult

_LEVEL_NAMES = {v: k for k, v in ACCESS_LEVELS.items()}


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("project", help="Project id, path (myorg/myproject) or web URL")
    who = parser.add_mutually_exclusive_group(required=True)
    who.add_argument("--user", dest="user_ids", type=int, nargs="+", help="GitLab user id(s)")
    who.add_argument("--group", dest="group_id", type=int, help="Use every member of this local group")
    parser.add_argument("--workers", type=int, default=1, help="Concurrent requests (1-8, default: 1)")


class _BatchCommand(Command):
    """Shared user resolution and summary for batch commands."""

    def _user_ids(self) -> list[int]:
        if self.args.user_ids:
            return list(self.args.user_ids)
        members = self.store.list_group_members(self.args.group_id)
        if not members:
            self.logger.warning(f"Local group {self.args.group_id} has no members")
        return [m.user_id for m in members]

    def _finish(self, result: BatchResult) -> int:
        # Exit code: non-zero if any item failed
        return 0 if result.ok else 1


@register_command("list-members")
class ListMembersCommand(Command):
    """List members of a project, optionally saving them to the local roster."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("project", help="Project id, path (myorg/myproject) or web URL")
        add_paging_arguments(parser, PER_PAGE)
        parser.add_argument("--all", action="store_true", dest="all_pages", help="Fetch every page")
        parser.add_argument("--save", action="store_true", help="Save the listed members to the local roster")

    def run(self) -> int:
        page, per_page = self.args.page, self.args.per_page
        if self.args.all_pages:
            members = self.client.list_all_project_members(self.args.project)
            total, has_next = len(members), False
        else:
            result = self.client.list_project_members(self.args.project, page=page, per_page=per_page)
            members, total = result.items, result.total
            has_next = result.has_next_page(page, per_page)

        if self.args.save and members:
            project = self.client.get_project(self.args.project)
            self.store.upsert_members(m.to_upsert(project.id, project.path_with_namespace) for m in members)

        lines = [
            f"{m.id:>8}  {m.username:<24} {m.name:<32} "
            f"{_LEVEL_NAMES.get(m.access_level, m.access_level)}"
            f"{'  expires ' + m.expires_at if m.expires_at else ''}"
            for m in members
        ]
        lines.append(f"-- {len(members)} of ~{total}{', more available' if has_next else ''}")
        self._emit(
            {"items": [asdict(m) for m in members], "total": total, "has_next_page": has_next},
            lines,
        )
        return 0


@register_command("add-members")
class AddMembersCommand(_BatchCommand):
    """Add users to a project; users already on it count as added."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        _add_target_arguments(parser)
        parser.add_argument(
            "--access-level",
            type=access_level,
            default=ACCESS_LEVELS["developer"],
            help=f"Role name ({', '.join(ACCESS_LEVELS)}) or number (default: developer)",
        )
        parser.add_argument("--expires-at", default=None, help="Membership expiry date (YYYY-MM-DD)")

    def run(self) -> int:
        mutator = BatchMutator(self.client, max_workers=self.args.workers)
        result = mutator.add_members(
            self.args.project, self._user_ids(), self.args.access_level, expires_at=self.args.expires_at
        )
        return self._finish(result)


@register_command("remove-members")
class RemoveMembersCommand(_BatchCommand):
    """Remove users from a project; non-members count as removed."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        _add_target_arguments(parser)

    def run(self) -> int:
        mutator = BatchMutator(self.client, max_workers=self.args.workers)
        result = mutator.remove_members(self.args.project, self._user_ids())
        return self._finish(result)
