"""Tests for the ordered, duplicate-free account collection."""

import random

import pytest

from lslogins import SORT_KEYS, AccountCollection, AccountRecord


def record(login, uid, **fields):
    return AccountRecord(login=login, uid=uid, **fields)


@pytest.mark.unit
class TestAccountCollection:

    def test_traverse_by_uid(self):
        collection = AccountCollection(SORT_KEYS["uid"])
        for login, uid in [("bob", 1001), ("root", 0), ("alice", 1000), ("daemon", 1)]:
            collection.insert(record(login, uid))

        assert [r.uid for r in collection] == [0, 1, 1000, 1001]

    def test_traverse_by_login(self):
        collection = AccountCollection(SORT_KEYS["login"])
        for login, uid in [("bob", 1001), ("root", 0), ("alice", 1000), ("Zed", 5)]:
            collection.insert(record(login, uid))

        # byte order, like strcmp: upper case sorts first
        assert [r.login for r in collection] == ["Zed", "alice", "bob", "root"]

    def test_duplicate_insert_is_ignored(self):
        collection = AccountCollection(SORT_KEYS["login"])
        assert collection.insert(record("alice", 1000, shell="/bin/bash")) is True
        assert collection.insert(record("alice", 1000, shell="/bin/zsh")) is False

        assert len(collection) == 1
        assert next(iter(collection)).shell == "/bin/bash"

    def test_same_uid_different_login_collapses_under_uid_order(self):
        collection = AccountCollection(SORT_KEYS["uid"])
        collection.insert(record("root", 0))
        collection.insert(record("toor", 0))

        assert [r.login for r in collection] == ["root"]

    def test_same_uid_different_login_kept_under_login_order(self):
        collection = AccountCollection(SORT_KEYS["login"])
        collection.insert(record("root", 0))
        collection.insert(record("toor", 0))

        assert [r.login for r in collection] == ["root", "toor"]

    @pytest.mark.parametrize("order", ["uid", "login"])
    def test_random_inserts_are_strictly_increasing(self, order):
        rng = random.Random(4242)
        uids = [rng.randrange(0, 500) for _ in range(2000)]
        collection = AccountCollection(SORT_KEYS[order])
        for uid in uids:
            collection.insert(record(f"user{uid:04d}", uid))

        keys = [SORT_KEYS[order](r) for r in collection.traverse()]
        assert keys == sorted(set(keys))
        assert len(collection) == len(set(uids))

    def test_tree_stays_balanced_on_sorted_input(self):
        collection = AccountCollection()
        for uid in range(1024):
            collection.insert(record(f"u{uid}", uid))

        # AVL bound: height < 1.45 * log2(n + 2)
        assert collection._root.height <= 15
        assert [r.uid for r in collection] == list(range(1024))

    def test_contains(self):
        collection = AccountCollection()
        collection.insert(record("alice", 1000))

        assert record("someone", 1000) in collection
        assert record("alice", 1001) not in collection

    def test_traverse_is_restartable(self):
        collection = AccountCollection()
        for uid in (3, 1, 2):
            collection.insert(record(str(uid), uid))

        first = collection.traverse()
        assert next(first).uid == 1
        assert [r.uid for r in collection.traverse()] == [1, 2, 3]
        assert [r.uid for r in first] == [2, 3]

    def test_empty_and_clear(self):
        collection = AccountCollection()
        assert list(collection) == []

        collection.insert(record("alice", 1000))
        collection.clear()
        assert len(collection) == 0
        assert list(collection) == []
