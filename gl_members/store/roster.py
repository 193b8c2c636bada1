"""Repository for the cached member roster and its groups."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable

from gl_members.errors import StoreError, ValidationError
from gl_members.models import (
    MAX_PER_PAGE,
    ConnectionProfile,
    LocalGroup,
    LocalMember,
    LocalMemberUpsert,
    Page,
)
from gl_members.store.database import Database

PROFILE_KEY = "gitlab"

_GROUP_SELECT = """
    SELECT g.id, g.name, g.created_at, COUNT(gm.user_id) AS members_count
    FROM local_groups g
    LEFT JOIN local_group_members gm ON gm.group_id = g.id
"""


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _like_pattern(query: str) -> str:
    escaped = query.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class RosterStore:
    """Local members, groups and the saved connection profile."""

    def __init__(self, db: Database, clock: Callable[[], str] = utcnow):
        self._db = db
        self._clock = clock
        self.logger = logging.getLogger("gl-members")

    def close(self) -> None:
        self._db.close()

    # -- Members ---------------------------------------------------------------

    def upsert_members(self, records: Iterable[LocalMemberUpsert]) -> None:
        """Insert or overwrite members keyed by user id, all in one transaction."""
        records = list(records)
        if not records:
            return
        now = self._clock()
        self.logger.info(f"Saving {len(records)} members to local roster")
        with self._db.transaction() as conn:
            conn.executemany(
                """INSERT INTO local_members
                   (user_id, username, name, avatar_url, updated_at, project_id, project_name)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                     username = excluded.username,
                     name = excluded.name,
                     avatar_url = excluded.avatar_url,
                     updated_at = excluded.updated_at,
                     project_id = excluded.project_id,
                     project_name = excluded.project_name""",
                [(r.user_id, r.username, r.name, r.avatar_url, now, r.project_id, r.project_name) for r in records],
            )

    def list_members(self, query: str | None = None, page: int = 1, per_page: int = 50) -> Page[LocalMember]:
        """
        List cached members, most recently updated first.

        ``query`` matches a case-insensitive substring of username or name.
        """
        per_page = max(1, min(per_page, MAX_PER_PAGE))
        page = max(1, page)

        where = ""
        params: tuple = ()
        if query and query.strip():
            where = " WHERE LOWER(username) LIKE ? ESCAPE '\\' OR LOWER(name) LIKE ? ESCAPE '\\'"
            pattern = _like_pattern(query.strip())
            params = (pattern, pattern)

        total_row = self._db.fetchone(f"SELECT COUNT(*) AS n FROM local_members{where}", params)
        rows = self._db.fetchall(
            f"SELECT * FROM local_members{where} ORDER BY updated_at DESC, user_id DESC LIMIT ? OFFSET ?",
            params + (per_page, (page - 1) * per_page),
        )
        self.logger.debug(f"list_members query={query!r} page={page}: {len(rows)} rows")
        return Page(items=[LocalMember.from_row(r) for r in rows], total=total_row["n"] if total_row else 0)

    def get_member(self, user_id: int) -> LocalMember | None:
        row = self._db.fetchone("SELECT * FROM local_members WHERE user_id = ?", (user_id,))
        return LocalMember.from_row(row) if row else None

    def delete_members(self, user_ids: Iterable[int]) -> None:
        """Delete members; their group links go with them."""
        user_ids = list(user_ids)
        self.logger.info(f"Deleting {len(user_ids)} members from local roster")
        with self._db.transaction() as conn:
            conn.executemany("DELETE FROM local_members WHERE user_id = ?", [(uid,) for uid in user_ids])

    # -- Groups ----------------------------------------------------------------

    def create_group(self, name: str) -> LocalGroup:
        name = _group_name(name)
        now = self._clock()
        with self._db.transaction() as conn:
            cur = conn.execute("INSERT INTO local_groups (name, created_at) VALUES (?, ?)", (name, now))
            group_id = cur.lastrowid
        self.logger.info(f"Created group '{name}' (id={group_id})")
        return LocalGroup(id=group_id, name=name, created_at=now, members_count=0)

    def get_group(self, group_id: int) -> LocalGroup | None:
        row = self._db.fetchone(f"{_GROUP_SELECT} WHERE g.id = ? GROUP BY g.id", (group_id,))
        return LocalGroup.from_row(row) if row else None

    def update_group(self, group_id: int, name: str) -> LocalGroup:
        name = _group_name(name)
        with self._db.transaction() as conn:
            cur = conn.execute("UPDATE local_groups SET name = ? WHERE id = ?", (name, group_id))
            if cur.rowcount == 0:
                raise StoreError(f"group {group_id} does not exist")
        self.logger.info(f"Renamed group {group_id} to '{name}'")
        return self.get_group(group_id)

    def delete_group(self, group_id: int) -> None:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM local_groups WHERE id = ?", (group_id,))
        self.logger.info(f"Deleted group {group_id}")

    def list_groups(self) -> list[LocalGroup]:
        rows = self._db.fetchall(f"{_GROUP_SELECT} GROUP BY g.id ORDER BY g.id DESC")
        return [LocalGroup.from_row(r) for r in rows]

    def add_members_to_group(self, group_id: int, user_ids: Iterable[int]) -> None:
        """Link members to a group. Existing links are left alone."""
        user_ids = list(user_ids)
        now = self._clock()
        self.logger.info(f"Adding {len(user_ids)} members to group {group_id}")
        with self._db.transaction() as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO local_group_members (group_id, user_id, created_at) VALUES (?, ?, ?)",
                [(group_id, uid, now) for uid in user_ids],
            )

    def remove_members_from_group(self, group_id: int, user_ids: Iterable[int]) -> None:
        user_ids = list(user_ids)
        self.logger.info(f"Removing {len(user_ids)} members from group {group_id}")
        with self._db.transaction() as conn:
            conn.executemany(
                "DELETE FROM local_group_members WHERE group_id = ? AND user_id = ?",
                [(group_id, uid) for uid in user_ids],
            )

    def list_group_members(self, group_id: int) -> list[LocalMember]:
        rows = self._db.fetchall(
            """SELECT m.* FROM local_members m
               INNER JOIN local_group_members gm ON gm.user_id = m.user_id
               WHERE gm.group_id = ?
               ORDER BY m.username ASC""",
            (group_id,),
        )
        return [LocalMember.from_row(r) for r in rows]

    # -- Connection profile ----------------------------------------------------

    def get_profile(self) -> ConnectionProfile | None:
        row = self._db.fetchone("SELECT value FROM app_config WHERE key = ?", (PROFILE_KEY,))
        if not row:
            return None
        try:
            data = json.loads(row["value"])
            return ConnectionProfile(base_url=data["base_url"], token=data["token"])
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise StoreError(f"saved connection profile is unreadable: {e!r}") from e

    def save_profile(self, profile: ConnectionProfile) -> None:
        value = json.dumps({"base_url": profile.base_url, "token": profile.token})
        with self._db.transaction() as conn:
            conn.execute("INSERT OR REPLACE INTO app_config (key, value) VALUES (?, ?)", (PROFILE_KEY, value))


def _group_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("group name is empty")
    return name
