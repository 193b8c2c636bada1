"""End-to-end tests for the gl-members CLI."""

import json

import pytest
import responses

from gl_members import open_store
from gl_members.cli import build_parser, main

# Constants
MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"

PROJECT = {
    "id": 55,
    "name": "app",
    "path_with_namespace": "myorg/app",
    "last_activity_at": "2024-05-01T10:00:00Z",
    "namespace": {"full_path": "myorg"},
}
MEMBERS = [
    {"id": 1, "username": "alice", "name": "Alice", "access_level": 30},
    {"id": 2, "username": "bob", "name": "Bob", "access_level": 40, "expires_at": "2030-01-01"},
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    monkeypatch.delenv("GITLAB_URL", raising=False)
    monkeypatch.delenv("GL_MEMBERS_DB", raising=False)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "roster.sqlite3")


@pytest.fixture
def run(db_path, capsys):
    """Run the CLI against the temp database; return (exit_code, stdout)."""

    def _run(*argv):
        code = main(["--db", db_path, "--max-retries", "0", *argv])
        return code, capsys.readouterr().out

    return _run


@pytest.fixture
def configured(run):
    assert run("set-config", "--base-url", MOCK_GITLAB_URL, "--token", "glpat-secret")[0] == 0
    return run


class TestConfigCommands:
    def test_set_and_show_config(self, configured, db_path):
        code, out = configured("--json", "show-config")

        assert code == 0
        assert json.loads(out) == {"base_url": MOCK_GITLAB_URL, "token": "glpa********"}
        store = open_store(db_path)
        try:
            assert store.get_profile().token == "glpat-secret"
        finally:
            store.close()

    def test_show_config_without_profile(self, run):
        code, _ = run("show-config")

        assert code == 1

    def test_set_config_rejects_blank_token(self, run):
        code, _ = run("set-config", "--base-url", MOCK_GITLAB_URL, "--token", "  ")

        assert code == 1

    def test_env_token_overrides_saved_profile(self, configured, monkeypatch):
        monkeypatch.setenv("GITLAB_TOKEN", "env-token")

        code, out = configured("--json", "show-config")

        assert code == 0
        assert json.loads(out)["token"] == "env-*****"


class TestRemoteCommands:
    @responses.activate
    def test_search_projects_reports_next_page(self, configured):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects", json=[PROJECT, PROJECT])

        code, out = configured("--json", "search-projects", "app", "--per-page", "2")

        payload = json.loads(out)
        assert code == 0
        assert payload["total"] == 3
        assert payload["has_next_page"] is True
        assert payload["items"][0]["path_with_namespace"] == "myorg/app"

    @responses.activate
    def test_list_members_save_populates_roster(self, configured, db_path):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/myorg%2Fapp/members/all", json=MEMBERS)
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/myorg%2Fapp", json=PROJECT)

        code, out = configured("list-members", "myorg/app", "--save")

        assert code == 0
        assert "alice" in out
        store = open_store(db_path)
        try:
            saved = store.list_members().items
        finally:
            store.close()
        assert {m.username for m in saved} == {"alice", "bob"}
        assert {m.project_id for m in saved} == {55}
        assert {m.project_name for m in saved} == {"myorg/app"}

    @responses.activate
    def test_add_members_from_local_group_with_partial_failure(self, configured, db_path, capsys):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/55/members/all", json=MEMBERS)
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/55", json=PROJECT)
        configured("list-members", "55", "--save")
        configured("create-group", "reviewers")
        configured("group-add", "1", "1", "2")

        def callback(request):
            if json.loads(request.body)["user_id"] == 2:
                return (403, {}, '{"message": "403 Forbidden"}')
            return (201, {}, "{}")

        responses.add_callback(responses.POST, f"{MOCK_API_URL}/projects/99/members", callback=callback)

        code = main(["--db", db_path, "--max-retries", "0", "--json", "add-members", "99", "--group", "1"])
        err = capsys.readouterr().err

        assert code == 1
        batch_line = [json.loads(line) for line in err.splitlines() if "success_user_ids" in line][0]
        assert batch_line["success_user_ids"] == [1]
        assert batch_line["failed"][0]["user_id"] == 2

    @responses.activate
    def test_remove_members_idempotent(self, configured):
        responses.add(responses.DELETE, f"{MOCK_API_URL}/projects/55/members/1", status=204)
        responses.add(responses.DELETE, f"{MOCK_API_URL}/projects/55/members/2", status=404)

        code, _ = configured("remove-members", "55", "--user", "1", "2")

        assert code == 0

    def test_add_members_without_profile_fails(self, run):
        code, _ = run("add-members", "55", "--user", "1")

        assert code == 1


class TestLocalCommands:
    def test_group_lifecycle(self, run):
        assert run("create-group", "ops")[0] == 0
        code, out = run("--json", "rename-group", "1", "platform")
        assert code == 0
        assert json.loads(out)["name"] == "platform"

        code, out = run("--json", "list-groups")
        assert [g["name"] for g in json.loads(out)] == ["platform"]

        assert run("delete-group", "1")[0] == 0
        code, out = run("--json", "group-members", "1")
        assert code == 0
        assert json.loads(out) == []

    def test_group_add_unknown_member_fails(self, run):
        run("create-group", "ops")

        code, _ = run("group-add", "1", "12345")

        assert code == 1

    def test_unreadable_saved_profile_fails_cleanly(self, run, db_path):
        store = open_store(db_path)
        try:
            with store._db.transaction() as conn:
                conn.execute("INSERT INTO app_config (key, value) VALUES ('gitlab', '{not json')")
        finally:
            store.close()

        code, _ = run("list-groups")

        assert code == 1

    def test_local_members_empty(self, run):
        code, out = run("--json", "local-members", "--query", "x")

        assert code == 0
        assert json.loads(out) == {"items": [], "total": 0}


class TestParser:
    def test_access_level_by_name(self):
        args = build_parser().parse_args(["add-members", "55", "--user", "1", "--access-level", "maintainer"])

        assert args.access_level == 40

    def test_access_level_by_number(self):
        args = build_parser().parse_args(["add-members", "55", "--user", "1", "--access-level", "20"])

        assert args.access_level == 20

    def test_invalid_access_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["add-members", "55", "--user", "1", "--access-level", "boss"])

    def test_user_and_group_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["remove-members", "55", "--user", "1", "--group", "2"])
