"""
Unit tests for the in-memory user store.
"""

import threading

import pytest

from userapi.models import User
from userapi.store import UserStore


class TestSeededStore:

    def test_seed_records(self, store: UserStore):
        assert store.list_users() == [
            User(id=1, name="Alice", email="alice@techhive.com"),
            User(id=2, name="Bob", email="bob@techhive.com"),
        ]
        assert len(store) == 2
        assert 1 in store
        assert 3 not in store

    def test_empty_store(self):
        store = UserStore()

        assert store.list_users() == []
        assert store.create_user("Ann", "ann@x.com").id == 1

    def test_duplicate_seed_ids_rejected(self):
        with pytest.raises(ValueError):
            UserStore([User(1, "A", None), User(1, "B", None)])

    def test_list_is_a_copy(self, store: UserStore):
        users = store.list_users()
        users.clear()

        assert len(store) == 2


class TestCreate:

    def test_ids_continue_after_seed(self, store: UserStore):
        carl = store.create_user("Carl", "carl@x.com")

        assert carl == User(id=3, name="Carl", email="carl@x.com")
        assert store.list_users()[-1] == carl

    def test_missing_fields_stored_as_none(self, store: UserStore):
        user = store.create_user(None, None)

        assert user.name is None
        assert user.email is None

    def test_ids_never_reused(self, store: UserStore):
        """Deleting the newest record does not free its id."""
        carl = store.create_user("Carl", "carl@x.com")
        assert store.delete_user(carl.id)

        dana = store.create_user("Dana", "dana@x.com")

        assert dana.id == 4

    def test_ids_after_deleting_everything(self, store: UserStore):
        store.delete_user(1)
        store.delete_user(2)

        assert store.create_user("Eve", None).id == 3


class TestGetUpdateDelete:

    def test_get(self, store: UserStore):
        assert store.get_user(2).name == "Bob"
        assert store.get_user(99) is None

    def test_update_keeps_id_and_position(self, store: UserStore):
        updated = store.update_user(1, "Alicia", "alicia@x.com")

        assert updated == User(id=1, name="Alicia", email="alicia@x.com")
        assert store.list_users()[0] == updated
        assert store.get_user(1) == updated

    def test_update_unknown_changes_nothing(self, store: UserStore):
        before = store.list_users()

        assert store.update_user(99, "Ghost", "ghost@x.com") is None
        assert store.list_users() == before

    def test_delete(self, store: UserStore):
        assert store.delete_user(1) is True
        assert store.get_user(1) is None
        assert [u.id for u in store.list_users()] == [2]

    def test_delete_unknown(self, store: UserStore):
        assert store.delete_user(99) is False
        assert len(store) == 2

    def test_delete_twice(self, store: UserStore):
        assert store.delete_user(2) is True
        assert store.delete_user(2) is False


class TestConcurrency:

    def test_concurrent_creates_get_distinct_ids(self, store: UserStore):
        """Parallel creates must never hand out the same id."""
        created = []
        created_lock = threading.Lock()

        def worker(n: int):
            for i in range(50):
                user = store.create_user(f"user-{n}-{i}", None)
                with created_lock:
                    created.append(user.id)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(created) == 400
        assert sorted(created) == list(range(3, 403))
        assert len(store) == 402
