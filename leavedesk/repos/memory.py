"""In-memory repositories for users and leave requests."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from datetime import date, datetime, timedelta, timezone

from leavedesk.domain.models import (
    Department,
    LeaveRequest,
    RequestStatus,
    User,
    UserRole,
)
from leavedesk.services.auth import hash_password

logger = logging.getLogger(__name__)


class UserRepository:
    """Dict-backed store for User instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.id] = user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        for user in self._store.values():
            if user.email.lower() == email:
                return user
        return None

    def list_all(self) -> list[User]:
        return list(self._store.values())

    def clear(self) -> None:
        self._store.clear()


class LeaveRequestRepository:
    """Dict-backed store for LeaveRequest instances, kept in insertion order."""

    def __init__(self) -> None:
        self._store: dict[str, LeaveRequest] = {}

    def add(self, request: LeaveRequest) -> None:
        self._store[request.id] = request

    def get(self, request_id: str) -> LeaveRequest | None:
        return self._store.get(request_id)

    def list_all(self) -> list[LeaveRequest]:
        return list(self._store.values())

    def clear(self) -> None:
        self._store.clear()


class Store:
    """Holds the repositories and seeds them exactly once.

    The first caller of ``ensure_initialized`` runs the seed function; any
    concurrent caller blocks on the same future and sees the same outcome.
    A failed initialization is forgotten so the next caller retries.
    """

    def __init__(self, seed: Callable[[Store], None] | None = None) -> None:
        self.users = UserRepository()
        self.requests = LeaveRequestRepository()
        self._seed = seed
        self._lock = threading.Lock()
        self._init_future: Future | None = None

    @property
    def initialized(self) -> bool:
        future = self._init_future
        return future is not None and future.done() and future.exception() is None

    def ensure_initialized(self) -> None:
        with self._lock:
            future = self._init_future
            is_owner = future is None
            if is_owner:
                future = self._init_future = Future()

        if not is_owner:
            future.result()
            return

        try:
            self._initialize()
        except Exception as exc:
            with self._lock:
                self._init_future = None
            future.set_exception(exc)
            raise
        future.set_result(None)

    def reset(self, seed: bool = True) -> None:
        """Drop all data; re-seed on the next ``ensure_initialized`` if *seed*."""
        with self._lock:
            self.users.clear()
            self.requests.clear()
            self._init_future = None
            if not seed:
                done: Future = Future()
                done.set_result(None)
                self._init_future = done

    def _initialize(self) -> None:
        if self._seed is None or self.users.list_all():
            return
        self._seed(self)
        logger.info(
            "Seeded store with %d users and %d requests",
            len(self.users.list_all()),
            len(self.requests.list_all()),
        )


# ---------------------------------------------------------------------------
# Seed data – a small team with one overlapping pair for conflict testing
# ---------------------------------------------------------------------------

_DEMO_USERS = [
    ("u1", "Mario Rossi", "mario@example.com", UserRole.MANAGER, Department.MANAGEMENT),
    ("u2", "Luca Bianchi", "luca@example.com", UserRole.EMPLOYEE, Department.HELPDESK),
    ("u3", "Giulia Verdi", "giulia@example.com", UserRole.EMPLOYEE, Department.PREVENDITA),
    ("u4", "Sofia Esposito", "sofia@example.com", UserRole.EMPLOYEE, Department.COMMERCIALI),
    ("u5", "Alessandro Romano", "ale@example.com", UserRole.EMPLOYEE, Department.HELPDESK),
    ("u6", "Francesca Colombo", "fra@example.com", UserRole.EMPLOYEE, Department.COMMERCIALI),
    ("u7", "Matteo Ricci", "matteo@example.com", UserRole.EMPLOYEE, Department.PREVENDITA),
    ("u8", "Chiara Marino", "chiara@example.com", UserRole.EMPLOYEE, Department.HELPDESK),
]

DEMO_MANAGER_PASSWORD = "admin"


def seed_demo_data(store: Store, today: date | None = None) -> None:
    today = today or date.today()
    now = datetime.now(timezone.utc)

    for user_id, name, email, role, department in _DEMO_USERS:
        store.users.add(
            User(
                id=user_id,
                name=name,
                email=email,
                role=role,
                department=department,
                avatar=f"https://picsum.photos/seed/{user_id}/200",
                password_hash=(
                    hash_password(DEMO_MANAGER_PASSWORD)
                    if role == UserRole.MANAGER
                    else None
                ),
            )
        )

    # Luca and Alessandro are both Helpdesk and overlap on purpose.
    store.requests.add(
        LeaveRequest(
            id="req1",
            user_id="u2",
            start_date=today,
            end_date=today + timedelta(days=7),
            status=RequestStatus.APPROVED,
            reason="Summer holiday",
            created_at=now - timedelta(hours=3),
        )
    )
    store.requests.add(
        LeaveRequest(
            id="req2",
            user_id="u5",
            start_date=today,
            end_date=today + timedelta(days=2),
            reason="Medical visit",
            created_at=now - timedelta(minutes=10),
        )
    )
    store.requests.add(
        LeaveRequest(
            id="req3",
            user_id="u4",
            start_date=today + timedelta(days=7),
            end_date=today + timedelta(days=14),
            reason="Sister's wedding",
            created_at=now - timedelta(minutes=3),
        )
    )


def create_store() -> Store:
    """Return a Store that seeds demo data on first use."""
    return Store(seed=seed_demo_data)
