"""Commands for gl-members."""

from gl_members.commands.base import Command, CommandContext, get_command_registry, register_command

# Import all commands to register them
from gl_members.commands.config import SetConfigCommand, ShowConfigCommand
from gl_members.commands.groups import (
    CreateGroupCommand,
    DeleteGroupCommand,
    GroupAddCommand,
    GroupMembersCommand,
    GroupRemoveCommand,
    ListGroupsCommand,
    RenameGroupCommand,
)
from gl_members.commands.members import AddMembersCommand, ListMembersCommand, RemoveMembersCommand
from gl_members.commands.projects import SearchProjectsCommand
from gl_members.commands.roster import DeleteLocalMembersCommand, LocalMembersCommand

__all__ = [
    "Command",
    "CommandContext",
    "register_command",
    "get_command_registry",
    "SetConfigCommand",
    "ShowConfigCommand",
    "SearchProjectsCommand",
    "ListMembersCommand",
    "AddMembersCommand",
    "RemoveMembersCommand",
    "LocalMembersCommand",
    "DeleteLocalMembersCommand",
    "CreateGroupCommand",
    "RenameGroupCommand",
    "DeleteGroupCommand",
    "ListGroupsCommand",
    "GroupAddCommand",
    "GroupRemoveCommand",
    "GroupMembersCommand",
]
