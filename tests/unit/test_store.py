"""
Unit tests for the in-memory user store.
"""

import threading

import pytest

from userapi.users.models import User, UserPayload
from userapi.users.store import UserStore
from userapi.users.validation import ValidationError


def payload(n: int = 1) -> UserPayload:
    return UserPayload(name=f"User {n}", title="Engineer", email=f"user{n}@example.com")


class TestUserStore:
    """Tests for UserStore CRUD operations."""

    def test_starts_empty(self, store: UserStore):
        assert store.all() == []
        assert len(store) == 0
        assert store.next_id == 1

    def test_create_assigns_sequential_ids(self, store: UserStore):
        first = store.create(payload(1))
        second = store.create(payload(2))

        assert (first.id, second.id) == (1, 2)
        assert store.next_id == 3

    def test_get_after_create(self, store: UserStore):
        created = store.create(payload())

        assert store.get(created.id) == created
        assert store.get(created.id) == User(
            id=1, name="User 1", title="Engineer", email="user1@example.com"
        )

    def test_get_unknown(self, store: UserStore):
        assert store.get(42) is None

    def test_all_in_insertion_order(self, store: UserStore):
        for n in range(1, 4):
            store.create(payload(n))

        assert [user.id for user in store.all()] == [1, 2, 3]

    def test_ids_are_never_reused(self, store: UserStore):
        store.create(payload(1))
        second = store.create(payload(2))
        store.delete(second.id)

        third = store.create(payload(3))

        assert third.id == 3
        assert store.get(2) is None

    def test_update(self, store: UserStore):
        created = store.create(payload(1))

        updated = store.update(created.id, payload(2))

        assert updated.id == created.id
        assert updated.name == "User 2"
        assert store.get(created.id) == updated

    def test_update_unknown_changes_nothing(self, store: UserStore):
        store.create(payload(1))

        assert store.update(99, payload(2)) is None
        assert len(store) == 1
        assert store.next_id == 2

    def test_delete(self, store: UserStore):
        created = store.create(payload())

        assert store.delete(created.id) is True
        assert len(store) == 0

    def test_everything_reports_not_found_after_delete(self, store: UserStore):
        created = store.create(payload())
        store.delete(created.id)

        assert store.get(created.id) is None
        assert store.update(created.id, payload(2)) is None
        assert store.delete(created.id) is False

    def test_returns_copies(self, store: UserStore):
        """Mutating a returned user does not change the stored one."""
        created = store.create(payload())
        created.name = "Changed"

        fetched = store.get(1)
        fetched.email = "changed@example.com"

        assert store.get(1).name == "User 1"
        assert store.get(1).email == "user1@example.com"

    def test_create_rejects_invalid(self, store: UserStore):
        with pytest.raises(ValidationError) as exc_info:
            store.create(UserPayload(name="", title="Engineer", email="bad"))

        assert exc_info.value.errors == [
            "Name is required",
            "Please enter a valid email address",
        ]
        assert len(store) == 0
        assert store.next_id == 1

    def test_update_rejects_invalid(self, store: UserStore):
        created = store.create(payload())

        with pytest.raises(ValidationError):
            store.update(created.id, UserPayload(name="Ada", title="", email="ada@example.com"))

        assert store.get(created.id) == created

    def test_custom_lock(self):
        lock = threading.RLock()
        store = UserStore(lock=lock)

        assert store.create(payload()).id == 1


class TestUserStoreConcurrency:
    """The store is shared by every worker thread."""

    def test_concurrent_creates_get_distinct_contiguous_ids(self, store: UserStore):
        threads_count = 16
        per_thread = 25
        barrier = threading.Barrier(threads_count)
        ids = []
        ids_lock = threading.Lock()

        def worker(n: int):
            barrier.wait()
            for i in range(per_thread):
                user = store.create(payload(n * per_thread + i))
                with ids_lock:
                    ids.append(user.id)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        total = threads_count * per_thread
        assert sorted(ids) == list(range(1, total + 1))
        assert len(store) == total
        assert store.next_id == total + 1

    def test_concurrent_create_and_delete(self, store: UserStore):
        for n in range(100):
            store.create(payload(n))

        def deleter():
            for user_id in range(1, 101):
                store.delete(user_id)

        def creator():
            for n in range(100):
                store.create(payload(n))

        threads = [threading.Thread(target=deleter), threading.Thread(target=creator)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        assert [user.id for user in store.all()] == list(range(101, 201))
