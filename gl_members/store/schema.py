"""Roster database schema."""

SCHEMA_DDL = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS local_members (
    user_id         INTEGER PRIMARY KEY,
    username        TEXT NOT NULL,
    name            TEXT NOT NULL,
    avatar_url      TEXT,
    updated_at      TEXT NOT NULL,
    project_id      INTEGER,
    project_name    TEXT
);

CREATE INDEX IF NOT EXISTS idx_local_members_updated ON local_members(updated_at);

CREATE TABLE IF NOT EXISTS local_groups (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL,
    created_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS local_group_members (
    group_id        INTEGER NOT NULL REFERENCES local_groups(id) ON DELETE CASCADE,
    user_id         INTEGER NOT NULL REFERENCES local_members(user_id) ON DELETE CASCADE,
    created_at      TEXT NOT NULL,
    PRIMARY KEY (group_id, user_id)
);

CREATE INDEX IF NOT EXISTS idx_group_members_user ON local_group_members(user_id);

CREATE TABLE IF NOT EXISTS app_config (
    key             TEXT PRIMARY KEY,
    value           TEXT NOT NULL
);
"""
