"""Tests for the in-memory store and its one-time initialization."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from leavedesk.domain.models import RequestStatus, User, UserRole
from leavedesk.repos.memory import (
    DEMO_MANAGER_PASSWORD,
    Store,
    seed_demo_data,
)
from leavedesk.services.auth import verify_password
from leavedesk.services.requests import apply_status


def test_concurrent_callers_share_one_initialization():
    calls = []

    def slow_seed(store: Store) -> None:
        calls.append(1)
        time.sleep(0.05)
        store.users.add(User(id="x", name="X", email="x@example.com", department="Ops"))

    store = Store(seed=slow_seed)
    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(store.ensure_initialized) for _ in range(8)]
        for f in futures:
            f.result()

    assert calls == [1]
    assert store.initialized
    assert [u.id for u in store.users.list_all()] == ["x"]


def test_failed_initialization_is_retried():
    attempts = []

    def flaky_seed(store: Store) -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("database unavailable")

    store = Store(seed=flaky_seed)
    with pytest.raises(RuntimeError, match="database unavailable"):
        store.ensure_initialized()
    assert not store.initialized

    store.ensure_initialized()
    assert store.initialized
    assert len(attempts) == 2


def test_repeated_calls_seed_once():
    calls = []
    store = Store(seed=lambda s: calls.append(1))
    store.ensure_initialized()
    store.ensure_initialized()
    assert calls == [1]


def test_reset_without_seed_leaves_store_empty():
    store = Store(seed=seed_demo_data)
    store.ensure_initialized()
    assert store.users.list_all()

    store.reset(seed=False)
    store.ensure_initialized()
    assert store.users.list_all() == []
    assert store.requests.list_all() == []


def test_reset_with_seed_reseeds_on_next_use():
    store = Store(seed=seed_demo_data)
    store.ensure_initialized()
    apply_status(store.requests.get("req2"), RequestStatus.REJECTED)
    assert store.requests.get("req2").status == RequestStatus.REJECTED

    store.reset()
    assert not store.initialized
    store.ensure_initialized()
    assert store.requests.get("req2").status == RequestStatus.PENDING


def test_demo_data_has_hashed_manager_password():
    store = Store()
    seed_demo_data(store, today=date(2024, 6, 1))

    [manager] = [u for u in store.users.list_all() if u.role == UserRole.MANAGER]
    assert manager.password_hash != DEMO_MANAGER_PASSWORD
    assert verify_password(DEMO_MANAGER_PASSWORD, manager.password_hash)
    assert store.requests.get("req1").start_date == date(2024, 6, 1)


def test_get_by_email_is_case_insensitive():
    store = Store()
    store.users.add(User(id="a", name="A", email="Anna@Example.com", department="Ops"))
    assert store.users.get_by_email(" anna@example.com ").id == "a"
    assert store.users.get_by_email("nobody@example.com") is None


def test_repositories_clear():
    store = Store()
    seed_demo_data(store, today=date(2024, 6, 1))

    store.users.clear()
    store.requests.clear()

    assert store.users.list_all() == []
    assert store.requests.get("req1") is None
