"""Local group commands."""

from __future__ import annotations

import argparse

from gl_members.commands.base import Command, register_command
from gl_members.models import LocalGroup


def _group_line(group: LocalGroup) -> str:
    return f"{group.id:>6}  {group.name:<32} {group.members_count:>4} members  (created {group.created_at})"


@register_command("create-group")
class CreateGroupCommand(Command):
    """Create an empty local group."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("name", help="Group name")

    def run(self) -> int:
        group = self.store.create_group(self.args.name)
        self._emit(group.to_dict(), [_group_line(group)])
        return 0


@register_command("rename-group")
class RenameGroupCommand(Command):
    """Rename a local group."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("group_id", type=int, help="Group id")
        parser.add_argument("name", help="New group name")

    def run(self) -> int:
        group = self.store.update_group(self.args.group_id, self.args.name)
        self._emit(group.to_dict(), [_group_line(group)])
        return 0


@register_command("delete-group")
class DeleteGroupCommand(Command):
    """Delete a local group (the members stay in the roster)."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("group_id", type=int, help="Group id")

    def run(self) -> int:
        self.store.delete_group(self.args.group_id)
        return 0


@register_command("list-groups")
class ListGroupsCommand(Command):
    """List local groups, newest first."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        pass

    def run(self) -> int:
        groups = self.store.list_groups()
        self._emit([g.to_dict() for g in groups], [_group_line(g) for g in groups])
        return 0


@register_command("group-add")
class GroupAddCommand(Command):
    """Add roster members to a local group."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("group_id", type=int, help="Group id")
        parser.add_argument("user_ids", type=int, nargs="+", help="User id(s) already in the local roster")

    def run(self) -> int:
        self.store.add_members_to_group(self.args.group_id, self.args.user_ids)
        return 0


@register_command("group-remove")
class GroupRemoveCommand(Command):
    """Remove members from a local group."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("group_id", type=int, help="Group id")
        parser.add_argument("user_ids", type=int, nargs="+", help="User id(s)")

    def run(self) -> int:
        self.store.remove_members_from_group(self.args.group_id, self.args.user_ids)
        return 0


@register_command("group-members")
class GroupMembersCommand(Command):
    """List the members of a local group."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("group_id", type=int, help="Group id")

    def run(self) -> int:
        members = self.store.list_group_members(self.args.group_id)
        self._emit(
            [m.to_dict() for m in members],
            [f"{m.user_id:>8}  {m.username:<24} {m.name}" for m in members],
        )
        return 0
