"""Local roster storage (SQLite)."""

from gl_members.store.database import Database
from gl_members.store.roster import RosterStore

__all__ = ["Database", "RosterStore", "open_store"]


def open_store(path) -> RosterStore:
    """Open (creating if needed) the roster database at ``path``."""
    db = Database(path)
    db.init()
    return RosterStore(db)
