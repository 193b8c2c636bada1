"""Project search command."""

from __future__ import annotations

import argparse
from dataclasses import asdict

from gl_members.commands.base import Command, add_paging_arguments, register_command
from gl_members.models import PER_PAGE


@register_command("search-projects")
class SearchProjectsCommand(Command):
    """Search GitLab projects, most recently active first."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("keyword", nargs="?", default="", help="Search keyword (optional)")
        add_paging_arguments(parser, PER_PAGE)

    def run(self) -> int:
        page, per_page = self.args.page, self.args.per_page
        result = self.client.search_projects(self.args.keyword, page=page, per_page=per_page)
        has_next = result.has_next_page(page, per_page)

        lines = [f"{p.id:>8}  {p.path_with_namespace}  ({p.last_activity_at})" for p in result.items]
        lines.append(f"-- page {page}, {len(result.items)} of ~{result.total}{', more available' if has_next else ''}")
        self._emit(
            {"items": [asdict(p) for p in result.items], "total": result.total, "has_next_page": has_next},
            lines,
        )
        return 0
