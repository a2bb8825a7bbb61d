"""
Session store and lifecycle tests.
Run with: python3 -m pytest tests/test_sessions.py -v
"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

from game_organizer.sessions import Session, SessionManager, SessionStore

from conftest import FakeClock


def _session(username="alice", minutes=30) -> Session:
    return Session(
        username=username,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=minutes),
    )


# ── Store contract ────────────────────────────────────────────────────────────

def test_store_put_get_remove():
    store = SessionStore()
    s = _session()

    assert store.get("missing") is None
    store.put("abc", s)
    assert store.get("abc") is s
    assert "abc" in store
    assert len(store) == 1

    store.remove("abc")
    assert store.get("abc") is None
    # idempotent
    store.remove("abc")
    assert len(store) == 0


def test_store_put_overwrites():
    store = SessionStore()
    first, second = _session("alice"), _session("bob")
    store.put("abc", first)
    store.put("abc", second)
    assert store.get("abc") is second


def test_store_get_does_not_judge_expiry():
    store = SessionStore()
    stale = _session(minutes=-5)
    store.put("old", stale)
    assert store.get("old") is stale


def test_put_if_absent_refuses_taken_ids():
    store = SessionStore()
    assert store.put_if_absent("abc", _session("alice"))
    assert not store.put_if_absent("abc", _session("bob"))
    assert store.get("abc").username == "alice"


# ── Lifecycle manager ─────────────────────────────────────────────────────────

def test_create_then_get_returns_user_and_expiry():
    """A new session belongs to the user and expires one TTL from now."""
    manager = SessionManager(SessionStore())

    before = datetime.now(timezone.utc)
    session_id = manager.create_session("alice", 30)
    after = datetime.now(timezone.utc)

    session = manager.get_session(session_id)
    assert session is not None
    assert session.username == "alice"
    assert before + timedelta(minutes=30) <= session.expires_at <= after + timedelta(minutes=30)


def test_expiry_uses_injected_clock():
    clock = FakeClock()
    manager = SessionManager(SessionStore(), clock=clock)

    session_id = manager.create_session("alice", 2)
    session = manager.get_session(session_id)
    assert session.expires_at == clock.current + timedelta(minutes=2)
    assert not manager.is_expired(session)

    clock.advance(1.99)
    assert not manager.is_expired(session)

    # expiry is inclusive of the exact instant
    clock.advance(0.01)
    assert manager.is_expired(session)


def test_negative_ttl_is_already_expired():
    manager = SessionManager(SessionStore())
    session_id = manager.create_session("alice", -1)
    assert manager.is_expired(manager.get_session(session_id))


def test_delete_session_is_idempotent():
    manager = SessionManager(SessionStore())
    session_id = manager.create_session("alice", 30)
    manager.delete_session(session_id)
    manager.delete_session(session_id)
    assert manager.get_session(session_id) is None


def test_session_ids_are_unique_and_opaque():
    """10 000 sessions, no repeated ids, nothing that looks like a counter."""
    manager = SessionManager(SessionStore())
    ids = [manager.create_session("alice", 30) for _ in range(10_000)]

    assert len(set(ids)) == len(ids)
    assert len(manager.store) == len(ids)
    assert all(len(i) >= 43 for i in ids)
    assert not any(i.isdigit() for i in ids)


def test_purge_expired_removes_only_stale_sessions():
    clock = FakeClock()
    manager = SessionManager(SessionStore(), clock=clock)

    short = manager.create_session("alice", 2)
    long = manager.create_session("bob", 30)
    clock.advance(5)

    assert manager.purge_expired() == 1
    assert manager.get_session(short) is None
    assert manager.get_session(long) is not None
    assert manager.purge_expired() == 0


# ── Concurrency ───────────────────────────────────────────────────────────────

def test_concurrent_store_operations_keep_mapping_consistent():
    """
    Many threads hammer the store with random put/get/remove on their own keys.
    Each thread tracks what its keys should hold; the final store must match
    the union exactly.
    """
    store = SessionStore()
    workers = 16
    ops_per_worker = 2_000
    start = threading.Barrier(workers)

    def worker(n: int) -> dict:
        rng = random.Random(n)
        expected = {}
        keys = [f"w{n}-k{i}" for i in range(20)]
        start.wait()
        for _ in range(ops_per_worker):
            key = rng.choice(keys)
            op = rng.random()
            if op < 0.5:
                s = _session(f"user{n}")
                store.put(key, s)
                expected[key] = s
            elif op < 0.8:
                assert store.get(key) is expected.get(key)
            else:
                store.remove(key)
                expected.pop(key, None)
        return expected

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(worker, range(workers)))

    merged = {}
    for expected in results:
        merged.update(expected)

    assert dict(store.items()) == merged
    assert len(store) == len(merged)


def test_concurrent_create_session_never_collides():
    manager = SessionManager(SessionStore())
    workers, per_worker = 8, 500

    def create_many(n: int) -> list:
        return [manager.create_session(f"user{n}", 30) for _ in range(per_worker)]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        ids = [i for batch in pool.map(create_many, range(workers)) for i in batch]

    assert len(set(ids)) == workers * per_worker
    assert len(manager.store) == workers * per_worker
