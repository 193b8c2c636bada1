"""Tests for the local roster store."""

import pytest

from gl_members import ConnectionProfile, LocalMemberUpsert, StoreError, ValidationError, open_store


def upsert(user_id, username, name, **kwargs):
    return LocalMemberUpsert(user_id=user_id, username=username, name=name, **kwargs)


@pytest.fixture
def roster(store):
    """Store with three members saved in separate calls (alice oldest)."""
    store.upsert_members([upsert(1, "alice", "Alice Liddell")])
    store.upsert_members([upsert(2, "bob", "Bob Builder")])
    store.upsert_members([upsert(3, "cmalinowski", "Carol Malinowski")])
    return store


class TestUpsertMembers:
    """Tests for upsert_members()."""

    def test_insert_and_read_back(self, store):
        store.upsert_members(
            [upsert(5, "dave", "Dave", avatar_url="https://a/5.png", project_id=9, project_name="org/app")]
        )

        member = store.get_member(5)
        assert member.username == "dave"
        assert member.avatar_url == "https://a/5.png"
        assert member.project_id == 9
        assert member.project_name == "org/app"
        assert member.updated_at

    def test_second_upsert_overwrites_single_row(self, store):
        store.upsert_members([upsert(5, "dave", "Dave", project_id=1, project_name="org/one")])
        first = store.get_member(5)
        store.upsert_members([upsert(5, "dave2", "David", project_id=2, project_name="org/two")])

        result = store.list_members()
        assert result.total == 1
        member = result.items[0]
        assert member.username == "dave2"
        assert member.name == "David"
        assert member.project_name == "org/two"
        assert member.updated_at > first.updated_at

    def test_empty_list_is_noop(self, store):
        store.upsert_members([])

        assert store.list_members().total == 0

    def test_failed_batch_writes_nothing(self, store):
        with pytest.raises(StoreError):
            store.upsert_members([upsert(1, "ok", "Ok"), upsert(2, None, "No username")])

        assert store.list_members().total == 0


class TestListMembers:
    """Tests for list_members() search and paging."""

    def test_ordered_by_updated_desc(self, roster):
        result = roster.list_members()

        assert [m.username for m in result.items] == ["cmalinowski", "bob", "alice"]
        assert result.total == 3

    def test_query_matches_username_or_name_case_insensitive(self, roster):
        result = roster.list_members("ALI")

        # alice by username and name, cmalinowski by username and name
        assert [m.user_id for m in result.items] == [3, 1]
        assert result.total == 2

    def test_query_matches_name_only(self, roster):
        result = roster.list_members("builder")

        assert [m.username for m in result.items] == ["bob"]

    def test_like_wildcards_are_literal(self, store):
        store.upsert_members([upsert(1, "a_b", "Under Score"), upsert(2, "axb", "Plain")])

        result = store.list_members("a_b")

        assert [m.user_id for m in result.items] == [1]

    def test_blank_query_lists_everything(self, roster):
        assert roster.list_members("   ").total == 3

    def test_pagination_offsets(self, roster):
        first = roster.list_members(page=1, per_page=2)
        second = roster.list_members(page=2, per_page=2)

        assert [m.user_id for m in first.items] == [3, 2]
        assert [m.user_id for m in second.items] == [1]
        assert first.total == second.total == 3

    def test_per_page_clamped_to_100(self, store):
        store.upsert_members([upsert(i, f"user{i}", f"User {i}") for i in range(1, 151)])

        result = store.list_members(per_page=500)

        assert len(result.items) == 100
        assert result.total == 150

    def test_per_page_clamped_to_at_least_one(self, roster):
        assert len(roster.list_members(per_page=0).items) == 1


class TestDeleteMembers:
    """Tests for delete_members()."""

    def test_delete_removes_rows(self, roster):
        roster.delete_members([1, 2])

        assert [m.user_id for m in roster.list_members().items] == [3]

    def test_delete_removes_member_from_every_group(self, roster):
        g1 = roster.create_group("one")
        g2 = roster.create_group("two")
        roster.add_members_to_group(g1.id, [1, 2])
        roster.add_members_to_group(g2.id, [1, 3])

        roster.delete_members([1])

        assert [m.user_id for m in roster.list_group_members(g1.id)] == [2]
        assert [m.user_id for m in roster.list_group_members(g2.id)] == [3]
        assert {g.id: g.members_count for g in roster.list_groups()} == {g1.id: 1, g2.id: 1}

    def test_delete_unknown_id_is_noop(self, roster):
        roster.delete_members([999])

        assert roster.list_members().total == 3


class TestGroups:
    """Tests for group CRUD and membership links."""

    def test_create_group_starts_empty(self, store):
        group = store.create_group("  Reviewers ")

        assert group.name == "Reviewers"
        assert group.members_count == 0
        assert group.created_at

    def test_blank_group_name_rejected(self, store):
        with pytest.raises(ValidationError):
            store.create_group("   ")

    def test_list_groups_newest_first_with_counts(self, roster):
        g1 = roster.create_group("first")
        g2 = roster.create_group("second")
        roster.add_members_to_group(g1.id, [1, 2, 3])

        groups = roster.list_groups()

        assert [g.id for g in groups] == [g2.id, g1.id]
        assert [g.members_count for g in groups] == [0, 3]

    def test_update_group_renames_and_keeps_created_at(self, store):
        group = store.create_group("old")

        renamed = store.update_group(group.id, "new")

        assert renamed.name == "new"
        assert renamed.created_at == group.created_at

    def test_update_unknown_group_raises(self, store):
        with pytest.raises(StoreError):
            store.update_group(404, "nope")

    def test_duplicate_add_is_ignored(self, roster):
        group = roster.create_group("g")
        roster.add_members_to_group(group.id, [1, 2])
        roster.add_members_to_group(group.id, [2, 1, 2])

        assert [m.user_id for m in roster.list_group_members(group.id)] == [1, 2]
        assert roster.get_group(group.id).members_count == 2

    def test_add_unknown_member_rolls_back_whole_call(self, roster):
        group = roster.create_group("g")

        with pytest.raises(StoreError):
            roster.add_members_to_group(group.id, [1, 999])

        assert roster.list_group_members(group.id) == []

    def test_add_to_unknown_group_raises(self, roster):
        with pytest.raises(StoreError):
            roster.add_members_to_group(404, [1])

    def test_remove_members_from_group(self, roster):
        group = roster.create_group("g")
        roster.add_members_to_group(group.id, [1, 2, 3])

        roster.remove_members_from_group(group.id, [2, 42])

        assert [m.user_id for m in roster.list_group_members(group.id)] == [1, 3]
        # Removing the link leaves the member in the roster
        assert roster.get_member(2) is not None

    def test_group_members_ordered_by_username(self, roster):
        group = roster.create_group("g")
        roster.add_members_to_group(group.id, [3, 1, 2])

        assert [m.username for m in roster.list_group_members(group.id)] == ["alice", "bob", "cmalinowski"]

    def test_delete_group_removes_links(self, roster):
        group = roster.create_group("g")
        roster.add_members_to_group(group.id, [1, 2])

        roster.delete_group(group.id)

        assert roster.list_group_members(group.id) == []
        assert roster.get_group(group.id) is None
        assert roster.list_members().total == 3

    def test_deleted_group_links_do_not_resurface(self, roster):
        group = roster.create_group("g")
        roster.add_members_to_group(group.id, [1])
        roster.delete_group(group.id)

        replacement = roster.create_group("g")

        assert replacement.id != group.id
        assert roster.list_group_members(replacement.id) == []

    def test_delete_unknown_group_is_noop(self, store):
        store.delete_group(12345)


class TestProfileStorage:
    """Tests for the saved connection profile."""

    def test_no_profile_initially(self, store):
        assert store.get_profile() is None

    def test_save_replaces_previous(self, store):
        store.save_profile(ConnectionProfile("https://one.example.com", "t1"))
        store.save_profile(ConnectionProfile("https://two.example.com/", "t2"))

        profile = store.get_profile()
        assert profile == ConnectionProfile("https://two.example.com", "t2")

    def test_profile_survives_reopen(self, tmp_path):
        path = tmp_path / "nested" / "roster.sqlite3"
        first = open_store(path)
        first.save_profile(ConnectionProfile("https://gitlab.example.com", "secret"))
        first.close()

        second = open_store(path)
        try:
            assert second.get_profile().token == "secret"
        finally:
            second.close()

    @pytest.mark.parametrize("value", ["{not json", '{"base_url": "https://gitlab.example.com"}', "[1, 2]"])
    def test_unreadable_profile_raises_store_error(self, store, value):
        with store._db.transaction() as conn:
            conn.execute("INSERT OR REPLACE INTO app_config (key, value) VALUES ('gitlab', ?)", (value,))

        with pytest.raises(StoreError):
            store.get_profile()
