"""Connection profile commands."""

from __future__ import annotations

import argparse

from gl_members.commands.base import Command, register_command


@register_command("set-config")
class SetConfigCommand(Command):
    """Save the GitLab base URL and access token."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--base-url", dest="new_base_url", required=True, help="GitLab instance URL (e.g., https://gitlab.com)"
        )
        parser.add_argument(
            "--token", dest="new_token", required=True, help="GitLab Personal Access Token with 'api' scope"
        )

    def run(self) -> int:
        profile = self.client.profiles.set(self.args.new_base_url, self.args.new_token)
        self.store.save_profile(profile)
        self.logger.info(f"Saved connection profile for {profile.base_url}")
        return 0


@register_command("show-config")
class ShowConfigCommand(Command):
    """Show the active connection profile (token masked)."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        pass

    def run(self) -> int:
        profile = self.client.profiles.get()
        if profile is None:
            self.logger.error("GitLab connection is not configured")
            return 1
        self._emit(
            {"base_url": profile.base_url, "token": profile.masked_token()},
            [f"base_url: {profile.base_url}", f"token:    {profile.masked_token()}"],
        )
        return 0
